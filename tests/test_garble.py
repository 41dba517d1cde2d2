import itertools
import random

import pytest

from trishare.checks import ProtocolError
from trishare.circuit import Bundle, Circuit, GateType
from trishare.garble import GarbledGate, evaluate, garble, sub_gate

NONLINEAR = [
    GateType.AND, GateType.OR, GateType.NAND, GateType.NOR,
    GateType.NA_AND, GateType.NB_AND, GateType.NA_OR, GateType.NB_OR,
]


def _setup(cir, seed=7):
    rng = random.Random(seed)
    offset = rng.getrandbits(128) | 1
    zero = [0] * cir.wire_count
    for bundle in cir.inputs:
        for w in bundle:
            zero[w] = rng.getrandbits(128)
    return offset, zero


def _run(cir, garbled_wires, gates, offset, zero, inputs, tweak):
    active = [0] * cir.wire_count
    for bundle, bits in zip(cir.inputs, inputs):
        for w, bit in zip(bundle, bits):
            active[w] = zero[w] ^ (offset if bit else 0)
    labels, _ = evaluate(cir, active, gates, tweak)
    result = []
    for bundle in cir.outputs:
        bits = []
        for w in bundle:
            assert labels[w] in (garbled_wires[w], garbled_wires[w] ^ offset)
            bits.append(int(labels[w] != garbled_wires[w]))
        result.append(bits)
    return result


def _single(gate_type):
    cir = Circuit()
    a, b, c = Bundle(1), Bundle(1), Bundle(1)
    cir.add_input_bundle(a)
    cir.add_input_bundle(b)
    cir.add_output_bundle(c)
    cir.add_gate(a[0], b[0], gate_type, c[0])
    return cir


def test_sub_gate_meanings():
    assert sub_gate(True, 0, 0, GateType.AND) == 0
    assert sub_gate(True, 0, 1, GateType.AND) == 2
    assert sub_gate(True, 0, 1, GateType.OR) == 3
    assert sub_gate(True, 0, 1, GateType.NAND) == 1
    assert sub_gate(False, 1, 0, GateType.OR) == 3
    assert sub_gate(False, 1, 0, GateType.XOR) == 2


@pytest.mark.parametrize("gate_type", NONLINEAR + [GateType.XOR, GateType.NXOR])
def test_single_gate_round_trip(gate_type):
    cir = _single(gate_type)
    offset, zero = _setup(cir)
    wires, gates, _ = garble(cir, zero, 3, offset)
    assert len(gates) == cir.nonlinear_gate_count
    for x, y in itertools.product((0, 1), repeat=2):
        assert _run(cir, wires, gates, offset, zero, [[x], [y]], 3) == cir.evaluate([[x], [y]])


def _mixed_circuit():
    cir = Circuit()
    x, y, z = Bundle(4), Bundle(4), Bundle(5)
    cir.add_input_bundle(x)
    cir.add_input_bundle(y)
    cir.add_output_bundle(z)
    t = Bundle(2)
    cir.add_temp_wire_bundle(t)
    cir.add_gate(x[0], y[0], GateType.AND, z[0])
    cir.add_gate(x[1], y[1], GateType.OR, z[1])
    cir.add_invert(z[1], z[1])
    cir.add_gate(x[2], y[2], GateType.XOR, t[0])
    cir.add_gate(t[0], x[3], GateType.NAND, z[2])
    cir.add_invert(x[0], t[1])
    cir.add_gate(t[1], y[3], GateType.AND, z[3])
    cir.add_gate(z[0], z[2], GateType.NXOR, z[4])
    return cir


def test_mixed_circuit_round_trip():
    cir = _mixed_circuit()
    offset, zero = _setup(cir, seed=11)
    wires, gates, _ = garble(cir, zero, 0, offset)
    for bits in itertools.product((0, 1), repeat=8):
        inputs = [list(bits[:4]), list(bits[4:])]
        assert _run(cir, wires, gates, offset, zero, inputs, 0) == cir.evaluate(inputs)


def test_tweak_advances_per_nonlinear_gate():
    cir = _mixed_circuit()
    offset, zero = _setup(cir)
    _, gates, g_tweak = garble(cir, zero, 5, offset)
    _, e_tweak = evaluate(cir, zero, gates, 5)
    assert g_tweak == e_tweak
    assert g_tweak - 5 == cir.nonlinear_gate_count


def test_xor_only_circuit_has_no_tables():
    cir = _single(GateType.XOR)
    offset, zero = _setup(cir)
    wires, gates, tweak = garble(cir, zero, 9, offset)
    assert gates == []
    assert tweak == 9
    assert wires[cir.outputs[0][0]] == zero[cir.inputs[0][0]] ^ zero[cir.inputs[1][0]]


def test_wrong_tweak_breaks_decoding():
    cir = _single(GateType.AND)
    offset, zero = _setup(cir)
    wires, gates, _ = garble(cir, zero, 1, offset)
    active = [zero[0] ^ offset, zero[1] ^ offset, 0]
    labels, _ = evaluate(cir, active, gates, 2)
    out = cir.outputs[0][0]
    assert labels[out] not in (wires[out], wires[out] ^ offset)


def test_even_offset_rejected():
    cir = _single(GateType.AND)
    with pytest.raises(ProtocolError):
        garble(cir, [0, 0, 0], 0, 2)


def test_missing_garbled_gates():
    cir = _single(GateType.AND)
    with pytest.raises(ProtocolError):
        evaluate(cir, [0, 0, 0], [], 0)


def test_garbled_gate_holds_table():
    cir = _single(GateType.AND)
    offset, zero = _setup(cir)
    _, gates, _ = garble(cir, zero, 0, offset)
    assert isinstance(gates[0], GarbledGate)
    assert len(gates[0].table) == 2
    assert all(0 <= v < (1 << 128) for v in gates[0].table)