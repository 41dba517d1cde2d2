import io
import random

import pytest

from trishare.checks import ProtocolError
from trishare.circuit import Bundle, Circuit
from trishare.circuit_library import (
    CircuitLibrary,
    add_build,
    extract_bit_build,
    less_than_build,
    multiplex_build,
)


def to_bits(value, n):
    value %= 1 << n
    return [(value >> k) & 1 for k in range(n)]


def from_bits(bits):
    return sum(bit << k for k, bit in enumerate(bits))


def to_signed(value, n):
    return value - (1 << n) if value >= 1 << (n - 1) else value


def two_input_circuit(n, out_size=None):
    circuit = Circuit()
    a, b, out = Bundle(n), Bundle(n), Bundle(out_size or n)
    circuit.add_input_bundle(a)
    circuit.add_input_bundle(b)
    circuit.add_output_bundle(out)
    return circuit, a, b, out


@pytest.mark.parametrize("x, y", [(0, 0), (1, 255), (200, 100), (127, 1), (37, 91)])
def test_add_build_sums_modulo_width(x, y):
    circuit, a, b, out = two_input_circuit(8)
    temp = Bundle(3)
    circuit.add_temp_wire_bundle(temp)
    add_build(circuit, a, b, out, temp)
    (result,) = circuit.evaluate([to_bits(x, 8), to_bits(y, 8)])
    assert from_bits(result) == (x + y) % 256


def test_add_build_uses_one_and_per_carry():
    circuit, a, b, out = two_input_circuit(8)
    temp = Bundle(3)
    circuit.add_temp_wire_bundle(temp)
    add_build(circuit, a, b, out, temp)
    assert circuit.nonlinear_gate_count == 8 - 1


def test_add_build_rejects_mismatched_inputs():
    circuit = Circuit()
    a, b, out, temp = Bundle(4), Bundle(5), Bundle(4), Bundle(3)
    for bundle in (a, b):
        circuit.add_input_bundle(bundle)
    circuit.add_output_bundle(out)
    circuit.add_temp_wire_bundle(temp)
    with pytest.raises(ProtocolError):
        add_build(circuit, a, b, out, temp)


def test_less_than_build_is_signed_comparison():
    circuit, a, b, out = two_input_circuit(4, out_size=1)
    less_than_build(circuit, a, b, out)
    for x in range(-8, 8):
        for y in range(-8, 8):
            (result,) = circuit.evaluate([to_bits(x, 4), to_bits(y, 4)])
            assert result == [int(x < y)], (x, y)


@pytest.mark.parametrize("choice", [0, 1])
@pytest.mark.parametrize("x, y", [(3, 12), (0, 15), (9, 9)])
def test_multiplex_build_selects(choice, x, y):
    circuit = Circuit()
    a, b, c, out, temp = Bundle(4), Bundle(4), Bundle(1), Bundle(4), Bundle(3)
    for bundle in (a, b, c):
        circuit.add_input_bundle(bundle)
    circuit.add_output_bundle(out)
    circuit.add_temp_wire_bundle(temp)
    multiplex_build(circuit, a, b, c, out, temp)
    (result,) = circuit.evaluate([to_bits(x, 4), to_bits(y, 4), [choice]])
    assert from_bits(result) == (x if choice else y)


@pytest.mark.parametrize("bit", [0, 1, 3, 5])
def test_extract_bit_build_matches_sum_bit(bit):
    circuit, a, b, out = two_input_circuit(6, out_size=1)
    temp = Bundle(12)
    circuit.add_temp_wire_bundle(temp)
    extract_bit_build(circuit, a, b, out, temp, bit)
    rng = random.Random(bit)
    for _ in range(30):
        x, y = rng.randrange(64), rng.randrange(64)
        (result,) = circuit.evaluate([to_bits(x, 6), to_bits(y, 6)])
        assert result == [((x + y) >> bit) & 1]


def test_extract_bit_build_rejects_bad_index():
    circuit, a, b, out = two_input_circuit(4, out_size=1)
    temp = Bundle(8)
    circuit.add_temp_wire_bundle(temp)
    with pytest.raises(ProtocolError):
        extract_bit_build(circuit, a, b, out, temp, 4)


def test_preproc_build_adds_full_and_truncated_words():
    dec = 16
    circuit = Circuit()
    CircuitLibrary.preproc_build(circuit, dec)
    assert circuit.nonlinear_gate_count == 2 * (64 - 1) - dec
    rng = random.Random(7)
    for _ in range(5):
        a, b0, b1 = rng.getrandbits(64), rng.getrandbits(64), rng.getrandbits(48)
        c0, c1 = circuit.evaluate([to_bits(a, 64), to_bits(b0, 64), to_bits(b1, 48)])
        assert from_bits(c0) == (a + b0) % (1 << 64)
        assert from_bits(c1) == ((a >> dec) + b1) % (1 << 48)


def test_preproc_build_rejects_full_word_shift():
    with pytest.raises(ProtocolError):
        CircuitLibrary.preproc_build(Circuit(), 64)


def share_inputs(values, size, rng):
    inputs = []
    for v in values:
        s0 = rng.getrandbits(size)
        inputs.append(to_bits(s0, size))
        inputs.append(to_bits(v - s0, size))
    return inputs


@pytest.mark.parametrize(
    "values",
    [[3, -5, 17, 17, 2], [-1, -2], [-7, 4], [10, 20, 30], [50, 1, 2, 3, 4, 5, 6]],
)
def test_argmax_build_finds_first_maximum(values):
    dec = 56
    size = 64 - dec
    circuit = Circuit()
    CircuitLibrary.argmax_build(circuit, dec, len(values))
    rng = random.Random(len(values))
    (result,) = circuit.evaluate(share_inputs(values, size, rng))
    assert from_bits(result) == values.index(max(values))


def test_argmax_build_prints_values_when_stream_set():
    circuit = Circuit()
    CircuitLibrary.argmax_build(circuit, 56, 3)
    circuit.print_stream = io.StringIO()
    rng = random.Random(1)
    (result,) = circuit.evaluate(share_inputs([1, 2, 3], 8, rng))
    assert from_bits(result) == 2
    assert "a[0] = " in circuit.print_stream.getvalue()


def test_argmax_build_needs_two_values():
    with pytest.raises(ProtocolError):
        CircuitLibrary.argmax_build(Circuit(), 56, 1)


@pytest.mark.parametrize("b_value", [-50, -11, -10, 0, 9, 10, 100])
def test_piecewise_helper_marks_region(b_value):
    lib = CircuitLibrary()
    thresholds = [-10, 10]
    circuit = lib.int_piecewise_helper(8, len(thresholds))
    inputs = [to_bits(-t, 8) for t in thresholds] + [to_bits(b_value, 8)]
    outputs = circuit.evaluate(inputs)
    region = sum(1 for t in thresholds if b_value >= t)
    assert [bits[0] for bits in outputs] == [int(i == region) for i in range(3)]


def test_piecewise_single_threshold_is_complementary():
    lib = CircuitLibrary()
    circuit = lib.int_piecewise_helper(8, 1)
    for b_value in (-3, 0, 5):
        below, above = circuit.evaluate([to_bits(0, 8), to_bits(b_value, 8)])
        assert below[0] == int(b_value < 0)
        assert below[0] + above[0] == 1


def test_piecewise_helper_is_cached():
    lib = CircuitLibrary()
    first = lib.int_piecewise_helper(8, 2)
    assert lib.int_piecewise_helper(8, 2) is first
    assert lib.int_piecewise_helper(16, 2) is not first


def test_piecewise_build_rejects_wrong_region_count():
    circuit = Circuit()
    aa, b = [Bundle(4)], Bundle(4)
    circuit.add_input_bundle(aa[0])
    circuit.add_input_bundle(b)
    cc = [Bundle(1)]
    circuit.add_output_bundle(cc[0])
    with pytest.raises(ProtocolError):
        CircuitLibrary.piecewise_build(circuit, aa, b, cc)


def test_convert_arith_to_bin_adds_each_element():
    lib = CircuitLibrary()
    n, bits = 3, 8
    circuit = lib.convert_arith_to_bin(n, bits)
    rng = random.Random(3)
    values = [rng.randrange(256) for _ in range(n)]
    shares0 = [rng.randrange(256) for _ in range(n)]
    shares1 = [(v - s) % 256 for v, s in zip(values, shares0)]
    left = [bit for s in shares0 for bit in to_bits(s, bits)]
    right = [bit for s in shares1 for bit in to_bits(s, bits)]
    (result,) = circuit.evaluate([left, right])
    decoded = [from_bits(result[i * bits:(i + 1) * bits]) for i in range(n)]
    assert decoded == values
    assert lib.convert_arith_to_bin(n, bits) is circuit


def test_convert_arith_to_bin_rejects_zero_width():
    with pytest.raises(ProtocolError):
        CircuitLibrary().convert_arith_to_bin(2, 0)