"""Arithmetic building blocks and cached circuits for the secure engine."""

from __future__ import annotations

from collections.abc import Sequence

from trishare.checks import check
from trishare.circuit import Bundle, Circuit, GateType

_WORD_BITS = 64


def _log2ceil(value: int) -> int:
    return (value - 1).bit_length()


def _carry_step(circuit: Circuit, a_i: int, b_i: int, carry: int, w1: int, w2: int) -> None:
    """Advance ``carry`` to ``maj(a_i, b_i, carry)`` using one AND gate."""
    circuit.add_gate(a_i, carry, GateType.XOR, w1)
    circuit.add_gate(b_i, carry, GateType.XOR, w2)
    circuit.add_gate(w1, w2, GateType.AND, w1)
    circuit.add_gate(carry, w1, GateType.XOR, carry)


def add_build(circuit: Circuit, a: Bundle, b: Bundle, out: Bundle, temp: Bundle) -> None:
    """Ripple-carry ``out = a + b`` modulo ``2 ** len(out)``, with ``len(out) - 1`` AND gates."""
    n = len(out)
    check(len(a) == len(b), "adder inputs must have the same size")
    check(1 <= n <= len(a), "adder output must hold between one bit and the input size")
    needed = 0 if n == 1 else (2 if n == 2 else 3)
    check(len(temp) >= needed, f"adder needs {needed} temporary wires")

    if n == 1:
        circuit.add_gate(a[0], b[0], GateType.XOR, out[0])
        return

    carry, w1 = temp[0], temp[1]
    # The carry is taken before out[0] is written, so out may share wires with a or b.
    circuit.add_gate(a[0], b[0], GateType.AND, carry)
    circuit.add_gate(a[0], b[0], GateType.XOR, out[0])
    for i in range(1, n - 1):
        w2 = temp[2]
        circuit.add_gate(a[i], carry, GateType.XOR, w1)
        circuit.add_gate(b[i], carry, GateType.XOR, w2)
        circuit.add_gate(w1, b[i], GateType.XOR, out[i])
        circuit.add_gate(w1, w2, GateType.AND, w1)
        circuit.add_gate(carry, w1, GateType.XOR, carry)
    last = n - 1
    circuit.add_gate(a[last], carry, GateType.XOR, w1)
    circuit.add_gate(w1, b[last], GateType.XOR, out[last])


def less_than_build(circuit: Circuit, a: Bundle, b: Bundle, out: Bundle) -> None:
    """Set ``out[0]`` to the two's-complement comparison ``a < b``."""
    n = len(a)
    check(n >= 1 and n == len(b), "comparison inputs must be non-empty and the same size")
    check(len(out) >= 1, "comparison needs an output wire")
    temp = Bundle(3)
    circuit.add_temp_wire_bundle(temp)
    borrow, w1, w2 = temp

    # borrow_{i+1} = maj(~a_i, b_i, borrow_i); the final borrow is unsigned a < b.
    circuit.add_gate(a[0], b[0], GateType.NA_AND, borrow)
    for i in range(1, n):
        circuit.add_gate(a[i], borrow, GateType.NXOR, w1)
        circuit.add_gate(b[i], borrow, GateType.XOR, w2)
        circuit.add_gate(w1, w2, GateType.AND, w1)
        circuit.add_gate(borrow, w1, GateType.XOR, borrow)
    circuit.add_gate(a[n - 1], b[n - 1], GateType.XOR, w1)
    circuit.add_gate(w1, borrow, GateType.XOR, out[0])


def multiplex_build(
    circuit: Circuit, a: Bundle, b: Bundle, choice: Bundle, out: Bundle, temp: Bundle
) -> None:
    """Set ``out = a`` where ``choice[0]`` is one and ``out = b`` otherwise."""
    n = len(out)
    check(len(a) == n and len(b) == n, "multiplexer bundles must have the same size")
    check(len(choice) >= 1, "multiplexer needs a choice wire")
    check(len(temp) >= 1, "multiplexer needs a temporary wire")
    select = choice[0]
    check(select != temp[0], "choice wire must not be the temporary wire")
    if select in list(out):
        check(len(temp) >= 2, "multiplexer needs two temporary wires when choice is overwritten")
        circuit.add_copy(select, temp[1])
        select = temp[1]
    w = temp[0]
    for a_j, b_j, o_j in zip(a, b, out):
        circuit.add_gate(a_j, b_j, GateType.XOR, w)
        circuit.add_gate(w, select, GateType.AND, w)
        circuit.add_gate(b_j, w, GateType.XOR, o_j)


def extract_bit_build(
    circuit: Circuit, a: Bundle, b: Bundle, out: Bundle, temp: Bundle, bit: int
) -> None:
    """Set ``out[0]`` to bit ``bit`` of ``a + b``."""
    check(len(a) == len(b), "inputs must have the same size")
    check(0 <= bit < len(a), "bit index is outside the inputs")
    check(len(out) >= 1, "bit extraction needs an output wire")
    if bit == 0:
        circuit.add_gate(a[0], b[0], GateType.XOR, out[0])
        return
    needed = 2 if bit == 1 else 3
    check(len(temp) >= needed, f"bit extraction needs {needed} temporary wires")
    carry, w1 = temp[0], temp[1]
    circuit.add_gate(a[0], b[0], GateType.AND, carry)
    for i in range(1, bit):
        _carry_step(circuit, a[i], b[i], carry, w1, temp[2])
    circuit.add_gate(a[bit], carry, GateType.XOR, w1)
    circuit.add_gate(w1, b[bit], GateType.XOR, out[0])


class CircuitLibrary:
    """Builds circuits used by the engine and caches the parameterised ones."""

    def __init__(self) -> None:
        self.circuits: dict[tuple, Circuit] = {}

    def int_piecewise_helper(self, size: int, num_thresholds: int) -> Circuit:
        """Circuit mapping ``num_thresholds`` shifted inputs and a value to one-hot regions."""
        check(size >= 1 and num_thresholds >= 1, "size and threshold count must be positive")
        key = ("piecewise", size, num_thresholds)
        circuit = self.circuits.get(key)
        if circuit is None:
            circuit = Circuit()
            aa = [Bundle(size) for _ in range(num_thresholds)]
            for bundle in aa:
                circuit.add_input_bundle(bundle)
            b = Bundle(size)
            circuit.add_input_bundle(b)
            cc = [Bundle(1) for _ in range(num_thresholds + 1)]
            for bundle in cc:
                circuit.add_output_bundle(bundle)
            self.piecewise_build(circuit, aa, b, cc)
            self.circuits[key] = circuit
        return circuit

    def convert_arith_to_bin(self, n: int, bits: int) -> Circuit:
        """Circuit adding two shares of ``n`` packed ``bits``-bit integers element by element."""
        check(n >= 1 and bits >= 1, "element count and width must be positive")
        key = ("convert_arith_to_bin", n, bits)
        circuit = self.circuits.get(key)
        if circuit is None:
            circuit = Circuit()
            left, right, outputs = Bundle(bits * n), Bundle(bits * n), Bundle(bits * n)
            circuit.add_input_bundle(left)
            circuit.add_input_bundle(right)
            circuit.add_output_bundle(outputs)
            for i in range(n):
                part = slice(i * bits, (i + 1) * bits)
                temp = Bundle(bits * 2)
                circuit.add_temp_wire_bundle(temp)
                add_build(
                    circuit,
                    Bundle(wires=left[part]),
                    Bundle(wires=right[part]),
                    Bundle(wires=outputs[part]),
                    temp,
                )
            self.circuits[key] = circuit
        return circuit

    @staticmethod
    def piecewise_build(
        circuit: Circuit, aa: Sequence[Bundle], b: Bundle, cc: Sequence[Bundle]
    ) -> None:
        """Mark which region between consecutive thresholds ``b`` falls in.

        ``aa[t]`` holds the negated threshold ``t``; the sign of ``aa[t] + b``
        tells whether ``b`` lies below it. ``cc`` gets one bit per region.
        """
        aa = list(aa)
        cc = list(cc)
        check(len(aa) >= 1, "at least one threshold is required")
        check(len(cc) == len(aa) + 1, "there must be one region more than thresholds")
        check(len(b) >= 1, "value bundle must not be empty")

        temps = []
        for _ in aa:
            temp = Bundle(len(b) * 2)
            circuit.add_temp_wire_bundle(temp)
            temps.append(temp)
        thresholds = [cc[0]]
        for _ in aa[1:]:
            bundle = Bundle(1)
            circuit.add_temp_wire_bundle(bundle)
            thresholds.append(bundle)

        for a_t, threshold, temp in zip(aa, thresholds, temps):
            check(len(a_t) == len(b), "threshold and value must have the same size")
            extract_bit_build(circuit, a_t, b, threshold, temp, len(b) - 1)

        for t in range(1, len(thresholds)):
            circuit.add_gate(
                thresholds[t - 1][0], thresholds[t][0], GateType.NA_AND, cc[t][0]
            )
        circuit.add_invert(thresholds[-1][0], cc[len(thresholds)][0])

    @staticmethod
    def preproc_build(circuit: Circuit, dec: int) -> None:
        """Add ``a + b0`` and ``(a >> dec) + b1`` over 64-bit words."""
        check(0 <= dec < _WORD_BITS, "decimal bits must be below the word size")
        size = _WORD_BITS
        a, b0, c0 = Bundle(size), Bundle(size), Bundle(size)
        b1, c1 = Bundle(size - dec), Bundle(size - dec)
        circuit.add_input_bundle(a)
        circuit.add_input_bundle(b0)
        circuit.add_input_bundle(b1)
        circuit.add_output_bundle(c0)
        circuit.add_output_bundle(c1)

        temp = Bundle(3)
        circuit.add_temp_wire_bundle(temp)
        add_build(circuit, a, b0, c0, temp)
        shifted = Bundle(wires=a.wires[dec:])
        add_build(circuit, shifted, b1, c1, temp)

        check(
            circuit.nonlinear_gate_count == 2 * (size - 1) - dec,
            "unexpected number of nonlinear gates",
        )

    @staticmethod
    def argmax_build(circuit: Circuit, dec: int, num_args: int) -> None:
        """Output the index of the largest of ``num_args`` shared values.

        Each value arrives as two additive shares of ``64 - dec`` bits; ties
        keep the earlier index.
        """
        check(0 <= dec < _WORD_BITS, "decimal bits must be below the word size")
        check(num_args >= 2, "arg-max needs at least two values")
        size = _WORD_BITS - dec
        index_bits = _log2ceil(num_args)

        a0 = [Bundle(size) for _ in range(num_args)]
        a1 = [Bundle(size) for _ in range(num_args)]
        values = [Bundle(size) for _ in range(num_args)]
        for left, right in zip(a0, a1):
            circuit.add_input_bundle(left)
            circuit.add_input_bundle(right)

        arg_max = Bundle(index_bits)
        circuit.add_output_bundle(arg_max)
        for wire in arg_max:
            circuit.add_const(wire, 0)

        temp = Bundle(3)
        circuit.add_temp_wire_bundle(temp)
        for i, (left, right, value) in enumerate(zip(a0, a1, values)):
            circuit.add_temp_wire_bundle(value)
            add_build(circuit, left, right, value, temp)
            circuit.add_print(f"a[{i}] = ")
            circuit.add_print(value)
            circuit.add_print("\n")

        # max_pointer is one when the right-hand side is greater.
        max_pointer = Bundle(wires=[arg_max[0]])
        current_max = values[0]
        less_than_build(circuit, current_max, values[1], max_pointer)

        for i in range(2, num_args):
            multiplex_build(circuit, values[i - 1], current_max, max_pointer, current_max, temp)

            circuit.add_print(f"max({{0, ...,{i - 1} }}) = ")
            circuit.add_print(current_max)
            circuit.add_print(" @ ")
            circuit.add_print(arg_max)
            circuit.add_print(" * ")
            circuit.add_print(max_pointer)
            circuit.add_print("\n")

            circuit.add_temp_wire_bundle(max_pointer)
            less_than_build(circuit, current_max, values[i], max_pointer)

            index = Bundle(index_bits)
            circuit.add_const_bundle(index, [(i >> k) & 1 for k in range(index_bits)])
            multiplex_build(circuit, index, arg_max, max_pointer, arg_max, temp)

        circuit.add_print(f"max({{0, ...,{num_args} }}) = _____ @ ")
        circuit.add_print(arg_max)
        circuit.add_print("\n")