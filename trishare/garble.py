"""Half-gates garbling with free XOR over a fixed-key AES hash."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from trishare.checks import ProtocolError, check
from trishare.circuit import Circuit, GateType, WireFlag

_MASK128 = (1 << 128) - 1
_MASK64 = (1 << 64) - 1
_LANE_CARRY = 1 << 64
_CC_BLOCK = int.from_bytes(b"\xcc" * 16, "little")
_FIXED_KEY = bytes(range(16))


@dataclass(frozen=True)
class GarbledGate:
    """The two ciphertexts of one half-gates AND-type gate."""

    table: tuple[int, int]


def _shl(x: int) -> int:
    # Each 64-bit lane shifts on its own; no bit crosses from the low lane.
    return ((x << 1) & _MASK128) & ~_LANE_CARRY


def _next_tweak(t: int) -> int:
    return (t & ~_MASK64 & _MASK128) | ((t + 1) & _MASK64)


class _FixedKeyHash:
    def __init__(self) -> None:
        self._enc = Cipher(algorithms.AES(_FIXED_KEY), modes.ECB()).encryptor()

    def __call__(self, blocks: Sequence[int]) -> list[int]:
        """Return ``AES(x) ^ x`` for each block."""
        data = b"".join(b.to_bytes(16, "little") for b in blocks)
        out = self._enc.update(data)
        return [
            int.from_bytes(out[i * 16:(i + 1) * 16], "little") ^ blk
            for i, blk in enumerate(blocks)
        ]


def sub_gate(const_b: bool, aa: int, bb: int, gate_type: GateType) -> int:
    """Describe a gate with one constant input as a function of the other.

    With ``const_b`` the constant is ``b = bb``, otherwise ``a = aa``. Returns
    0 for constant zero, 1 for the negated other input, 2 for the other input
    unchanged and 3 for constant one.
    """
    gate_type = GateType(gate_type)
    if const_b:
        low, high = gate_type.eval(0, bb), gate_type.eval(1, bb)
    else:
        low, high = gate_type.eval(aa, 0), gate_type.eval(aa, 1)
    return low | (high << 1)


def _labels(circuit: Circuit, wires: Iterable[int]) -> list[int]:
    labels = [int(w) & _MASK128 for w in wires]
    labels.extend([0] * (circuit.wire_count - len(labels)))
    return labels


def _copy(labels: list[int], gate) -> None:
    src, length = gate.inputs
    labels[gate.output:gate.output + length] = labels[src:src + length]


def garble(
    circuit: Circuit, wires: Iterable[int], tweak: int, free_xor_offset: int
) -> tuple[list[int], list[GarbledGate], int]:
    """Garble ``circuit``.

    ``wires`` holds the zero-labels of the input wires (at their indices).
    Returns every wire's zero-label, the garbled gates and the next tweak.
    """
    offset = free_xor_offset & _MASK128
    check(offset & 1, "free-XOR offset must have its low bit set")
    labels = _labels(circuit, wires)
    zero_and_offset = (0, offset)
    t0 = tweak & _MASK128
    t1 = t0 ^ _CC_BLOCK
    hasher = _FixedKeyHash()
    garbled: list[GarbledGate] = []

    for gate in circuit.gates:
        if gate.is_copy:
            _copy(labels, gate)
            continue
        a = labels[gate.inputs[0]]
        b = labels[gate.inputs[1]]
        if gate.gate_type.is_linear:
            labels[gate.output] = a ^ b ^ zero_and_offset[int(gate.gate_type) & 1]
            continue

        pa, pb = a & 1, b & 1
        b_perm = gate.b_alpha ^ pb
        c_perm = ((pa ^ gate.a_alpha) & b_perm) ^ gate.c_alpha
        h = hasher([
            _shl(a) ^ t0,
            _shl(a ^ offset) ^ t0,
            _shl(b) ^ t1,
            _shl(b ^ offset) ^ t1,
        ])
        t0, t1 = _next_tweak(t0), _next_tweak(t1)
        garbled.append(GarbledGate((
            h[0] ^ h[1] ^ zero_and_offset[b_perm],
            h[2] ^ h[3] ^ a ^ zero_and_offset[gate.a_alpha],
        )))
        labels[gate.output] = h[pa] ^ h[2 ^ pb] ^ zero_and_offset[c_perm]

    for bundle in circuit.outputs:
        for wire in bundle:
            if circuit.wire_flags[wire] is WireFlag.INV_WIRE:
                labels[wire] ^= offset

    return labels, garbled, t0


def evaluate(
    circuit: Circuit,
    wires: Iterable[int],
    garbled_gates: Iterable[GarbledGate],
    tweak: int,
) -> tuple[list[int], int]:
    """Evaluate a garbled ``circuit`` from the active input labels.

    Returns every wire's active label and the next tweak.
    """
    labels = _labels(circuit, wires)
    t0 = tweak & _MASK128
    t1 = t0 ^ _CC_BLOCK
    hasher = _FixedKeyHash()
    tables = iter(garbled_gates)

    for gate in circuit.gates:
        if gate.is_copy:
            _copy(labels, gate)
            continue
        a = labels[gate.inputs[0]]
        b = labels[gate.inputs[1]]
        if gate.gate_type.is_linear:
            labels[gate.output] = a ^ b
            continue

        h = hasher([_shl(a) ^ t0, _shl(b) ^ t1])
        t0, t1 = _next_tweak(t0), _next_tweak(t1)
        try:
            table = next(tables).table
        except StopIteration:
            raise ProtocolError("too few garbled gates for the circuit") from None
        c = h[0] ^ h[1]
        if a & 1:
            c ^= table[0]
        if b & 1:
            c ^= table[1] ^ a
        labels[gate.output] = c

    return labels, t0