"""Cleartext engine exposing the same operations as the secure engine."""

from __future__ import annotations

import sys
from typing import TextIO

import numpy as np


class PlainML:
    """Evaluates model arithmetic directly on numpy arrays."""

    def __init__(self, print_enabled: bool = True, stream: TextIO | None = None) -> None:
        self.print_enabled = print_enabled
        self.stream = stream

    def mul(self, left, right) -> np.ndarray:
        return np.asarray(left) @ np.asarray(right)

    def mul_truncate(self, left, right, shift: int) -> np.ndarray:
        """Multiply and divide the product by ``2 ** shift``."""
        return (np.asarray(left) @ np.asarray(right)) / float(1 << shift)

    def logistic_func(self, x) -> np.ndarray:
        """Apply the sigmoid elementwise, returning a new array."""
        return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=float)))

    def reveal(self, value):
        """Return a cleartext copy: a float for scalars, a new float array otherwise."""
        arr = np.array(value, dtype=float)
        if arr.ndim == 0:
            return float(arr)
        return arr

    def party_idx(self) -> int:
        return 0

    def write(self, *args) -> "PlainML":
        """Print ``args`` without separators or newline when printing is on."""
        if self.print_enabled:
            out = self.stream if self.stream is not None else sys.stdout
            out.write("".join(str(a) for a in args))
        return self