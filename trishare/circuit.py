"""Boolean circuits built from bundles of wires, with free inversion and constants."""

from __future__ import annotations

import enum
import itertools
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import TextIO

from trishare.checks import ProtocolError, check


class GateType(enum.IntEnum):
    """Two-input gate, encoded as its truth table.

    Bit ``a | (b << 1)`` of the value is the output for inputs ``a`` and ``b``.
    """

    ZERO = 0
    NOR = 1
    NB_AND = 2
    NB = 3
    NA_AND = 4
    NA = 5
    XOR = 6
    NAND = 7
    AND = 8
    NXOR = 9
    A = 10
    NB_OR = 11
    B = 12
    NA_OR = 13
    OR = 14
    ONE = 15

    def eval(self, a: int, b: int) -> int:
        """Return the gate's output bit for inputs ``a`` and ``b``."""
        return (int(self) >> (int(bool(a)) | (int(bool(b)) << 1))) & 1

    @property
    def is_linear(self) -> bool:
        return self in (GateType.XOR, GateType.NXOR)


# Gate types that do not depend on both inputs; they cannot be added as gates.
_DEGENERATE = frozenset(
    {GateType.ZERO, GateType.ONE, GateType.A, GateType.B, GateType.NA, GateType.NB}
)


class WireFlag(enum.Enum):
    """How a wire's stored value relates to its logical value."""

    WIRE = "wire"
    INV_WIRE = "inverted"
    ZERO = "zero"
    ONE = "one"


@dataclass(frozen=True)
class Gate:
    """One gate. A gate of type ``A`` copies ``inputs[1]`` wires starting at ``inputs[0]``.

    Nonlinear gates compute ``((a ^ a_alpha) & (b ^ b_alpha)) ^ c_alpha``.
    """

    gate_type: GateType
    inputs: tuple[int, int]
    output: int
    a_alpha: int = 0
    b_alpha: int = 0
    c_alpha: int = 0

    @property
    def is_copy(self) -> bool:
        return self.gate_type is GateType.A


class Bundle:
    """An ordered group of wire indices; unassigned wires are ``-1``."""

    def __init__(self, size: int = 0, wires: Iterable[int] | None = None) -> None:
        self.wires: list[int] = list(wires) if wires is not None else [-1] * size

    def __len__(self) -> int:
        return len(self.wires)

    def __iter__(self) -> Iterator[int]:
        return iter(self.wires)

    def __getitem__(self, index):
        return self.wires[index]

    def __setitem__(self, index, value) -> None:
        self.wires[index] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bundle):
            return NotImplemented
        return self.wires == other.wires

    def __repr__(self) -> str:
        return f"Bundle({self.wires!r})"


def _table_of(func: Callable[[int, int], int]) -> GateType:
    value = 0
    for a, b in itertools.product((0, 1), repeat=2):
        value |= func(a, b) << (a | (b << 1))
    return GateType(value)


def _alphas(table: GateType) -> tuple[int, int, int]:
    for aa, ba, ca in itertools.product((0, 1), repeat=3):
        if all(
            table.eval(x, y) == (((x ^ aa) & (y ^ ba)) ^ ca)
            for x, y in itertools.product((0, 1), repeat=2)
        ):
            return aa, ba, ca
    raise ProtocolError(f"gate {table.name} is not an AND-type gate")


_PrintEntry = str | tuple[tuple[int, WireFlag], ...]


class Circuit:
    """A boolean circuit with free inversion and constant folding."""

    def __init__(self) -> None:
        self.wire_count = 0
        self.inputs: list[Bundle] = []
        self.outputs: list[Bundle] = []
        self.gates: list[Gate] = []
        self.wire_flags: list[WireFlag] = []
        self.nonlinear_gate_count = 0
        self.prints: list[tuple[int, _PrintEntry]] = []
        self.print_stream: TextIO | None = None

    # -- wires -------------------------------------------------------------

    def _assign_wires(self, bundle: Bundle) -> None:
        n = len(bundle)
        bundle.wires = list(range(self.wire_count, self.wire_count + n))
        self.wire_count += n
        self.wire_flags.extend([WireFlag.WIRE] * n)

    def _check_wire(self, wire: int) -> None:
        check(0 <= wire < self.wire_count, f"wire {wire} does not exist")

    def _is_const(self, wire: int) -> bool:
        return self.wire_flags[wire] in (WireFlag.ZERO, WireFlag.ONE)

    def _const_value(self, wire: int) -> int:
        return int(self.wire_flags[wire] is WireFlag.ONE)

    def _inverted(self, wire: int) -> int:
        return int(self.wire_flags[wire] is WireFlag.INV_WIRE)

    def add_input_bundle(self, bundle: Bundle) -> None:
        self._assign_wires(bundle)
        self.inputs.append(bundle)

    def add_output_bundle(self, bundle: Bundle) -> None:
        self._assign_wires(bundle)
        self.outputs.append(bundle)

    def add_temp_wire_bundle(self, bundle: Bundle) -> None:
        self._assign_wires(bundle)

    # -- gates -------------------------------------------------------------

    def add_copy(self, src: int, dest: int) -> None:
        """Make ``dest`` carry the same logical value as ``src``."""
        self._check_wire(src)
        self._check_wire(dest)
        if src == dest:
            return
        flag = self.wire_flags[src]
        if not self._is_const(src):
            self.gates.append(Gate(GateType.A, (src, 1), dest))
        self.wire_flags[dest] = flag

    def _set_from(self, src: int, dest: int, h0: int, h1: int) -> None:
        """Set ``dest`` to ``h(raw src)`` where ``h(0) = h0`` and ``h(1) = h1``."""
        if h0 == h1:
            self.wire_flags[dest] = WireFlag.ONE if h0 else WireFlag.ZERO
            return
        if src != dest:
            self.gates.append(Gate(GateType.A, (src, 1), dest))
        self.wire_flags[dest] = WireFlag.INV_WIRE if h0 else WireFlag.WIRE

    def add_gate(self, a: int, b: int, gate_type: GateType, out: int) -> None:
        """Add ``out = gate_type(a, b)``, folding constants and inversions."""
        gate_type = GateType(gate_type)
        check(gate_type not in _DEGENERATE, f"gate {gate_type.name} needs a copy, invert or const")
        for wire in (a, b, out):
            self._check_wire(wire)
        f = gate_type.eval

        if self._is_const(a) and self._is_const(b):
            value = f(self._const_value(a), self._const_value(b))
            self.wire_flags[out] = WireFlag.ONE if value else WireFlag.ZERO
            return
        if self._is_const(a):
            va, ib = self._const_value(a), self._inverted(b)
            self._set_from(b, out, f(va, ib), f(va, 1 ^ ib))
            return
        if self._is_const(b):
            vb, ia = self._const_value(b), self._inverted(a)
            self._set_from(a, out, f(ia, vb), f(1 ^ ia, vb))
            return

        ia, ib = self._inverted(a), self._inverted(b)
        if a == b:
            self._set_from(a, out, f(ia, ib), f(1 ^ ia, 1 ^ ib))
            return

        table = _table_of(lambda x, y: f(x ^ ia, y ^ ib))
        if table.is_linear:
            self.gates.append(Gate(table, (a, b), out))
        else:
            aa, ba, ca = _alphas(table)
            self.gates.append(Gate(table, (a, b), out, aa, ba, ca))
            self.nonlinear_gate_count += 1
        self.wire_flags[out] = WireFlag.WIRE

    def add_invert(self, src: int, dest: int) -> None:
        """Make ``dest`` the negation of ``src``; costs no gate."""
        self._check_wire(src)
        self._check_wire(dest)
        if src != dest:
            self.add_copy(src, dest)
        flipped = {
            WireFlag.WIRE: WireFlag.INV_WIRE,
            WireFlag.INV_WIRE: WireFlag.WIRE,
            WireFlag.ZERO: WireFlag.ONE,
            WireFlag.ONE: WireFlag.ZERO,
        }
        self.wire_flags[dest] = flipped[self.wire_flags[dest]]

    def add_const(self, wire: int, value: int) -> None:
        self._check_wire(wire)
        self.wire_flags[wire] = WireFlag.ONE if value else WireFlag.ZERO

    def add_const_bundle(self, bundle: Bundle, bits: Iterable[int]) -> None:
        """Give ``bundle`` fresh wires holding the constant ``bits``."""
        bits = list(bits)
        check(len(bits) == len(bundle), "constant has the wrong number of bits")
        self.add_temp_wire_bundle(bundle)
        for wire, bit in zip(bundle, bits):
            self.add_const(wire, bit)

    def add_print(self, item: str | Bundle) -> None:
        """Print ``item`` (text, or a bundle's bits) when the circuit is evaluated here."""
        if isinstance(item, Bundle):
            entry: _PrintEntry = tuple((w, self.wire_flags[w]) for w in item)
        else:
            entry = str(item)
        self.prints.append((len(self.gates), entry))

    # -- evaluation ----------------------------------------------------------

    @staticmethod
    def _logical(raw: Sequence[int], wire: int, flag: WireFlag) -> int:
        if flag is WireFlag.ZERO:
            return 0
        if flag is WireFlag.ONE:
            return 1
        return raw[wire] ^ int(flag is WireFlag.INV_WIRE)

    def _emit(self, entry: _PrintEntry, raw: Sequence[int]) -> None:
        if self.print_stream is None:
            return
        if isinstance(entry, str):
            self.print_stream.write(entry)
        else:
            self.print_stream.write("".join(str(self._logical(raw, w, f)) for w, f in entry))

    def evaluate(self, inputs: Sequence[Iterable[int]]) -> list[list[int]]:
        """Evaluate in the clear; one bit list per input bundle, one per output bundle."""
        inputs = [list(bits) for bits in inputs]
        check(len(inputs) == len(self.inputs), "wrong number of input bundles")
        raw = [0] * self.wire_count
        for bundle, bits in zip(self.inputs, inputs):
            check(len(bits) == len(bundle), "input bundle has the wrong number of bits")
            for wire, bit in zip(bundle, bits):
                raw[wire] = int(bool(bit))

        pending = iter(self.prints)
        next_print = next(pending, None)
        for pos, gate in enumerate(self.gates):
            while next_print is not None and next_print[0] <= pos:
                self._emit(next_print[1], raw)
                next_print = next(pending, None)
            if gate.is_copy:
                src, length = gate.inputs
                raw[gate.output:gate.output + length] = raw[src:src + length]
            else:
                a, b = gate.inputs
                raw[gate.output] = gate.gate_type.eval(raw[a], raw[b])
        while next_print is not None:
            self._emit(next_print[1], raw)
            next_print = next(pending, None)

        return [
            [self._logical(raw, w, self.wire_flags[w]) for w in bundle]
            for bundle in self.outputs
        ]