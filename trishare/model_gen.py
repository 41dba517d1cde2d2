"""Synthetic data generators for linear, logistic and neural models."""

from __future__ import annotations

import numpy as np

_LINEAR_SEED = 1
_LOGISTIC_SEED = 234345


def _as_column_model(model) -> np.ndarray:
    arr = np.array(model, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2 or arr.shape[1] != 1:
        raise ValueError("model must be a single column of weights")
    return arr


class _NormalSampler:
    """Shared state of the linear and logistic generators."""

    _seed = _LINEAR_SEED

    def __init__(self) -> None:
        self.model: np.ndarray | None = None
        self.noise = 1.0
        self.sd = 1.0

    def _store_model(self, model, noise: float, sd: float) -> None:
        self.model = _as_column_model(model)
        self.noise = float(noise)
        self.sd = float(sd)

    def _draw(self, rows: int) -> tuple[np.ndarray, np.ndarray]:
        if self.model is None:
            raise ValueError("set_model must be called before sampling")
        if rows < 0:
            raise ValueError("row count must not be negative")
        dim = self.model.shape[0]
        rng = np.random.default_rng(self._seed)
        # Each row draws its features first and then its noise term.
        draws = rng.normal(self.noise, self.sd, size=(rows, dim + 1))
        x = draws[:, :dim].copy()
        noise = draws[:, dim:].copy()
        return x, x @ self.model + noise


class LinearModelGen(_NormalSampler):
    """Samples ``(X, Y)`` with ``Y = X @ model + noise``."""

    _seed = _LINEAR_SEED

    def set_model(self, model, noise: float = 1, sd: float = 1) -> None:
        """Store the true weights and the mean and deviation of the normal draws."""
        self._store_model(model, noise, sd)

    def sample(self, rows: int) -> tuple[np.ndarray, np.ndarray]:
        """Return ``rows`` feature rows and their targets."""
        return self._draw(rows)


class LogisticModelGen(_NormalSampler):
    """Samples ``(X, Y)`` with ``Y = 1`` where ``X @ model + noise > 0``, else ``0``."""

    _seed = _LOGISTIC_SEED

    def set_model(self, model, noise: float = 1, sd: float = 1) -> None:
        """Store the true weights and the mean and deviation of the normal draws."""
        self._store_model(model, noise, sd)

    def sample(self, rows: int, verbose: bool = False) -> tuple[np.ndarray, np.ndarray]:
        """Return ``rows`` feature rows and their 0/1 labels; optionally print each row."""
        x, raw = self._draw(rows)
        y = (raw > 0).astype(float)
        if verbose:
            for features, label, value in zip(x, y[:, 0], raw[:, 0]):
                cells = "".join(f"{v} " for v in features)
                print(f"{cells}-> {label:g} ({value})")
        return x, y


class NeuralModelGen:
    """Holds the per-level weight matrices of a neural model."""

    def __init__(self) -> None:
        self.model: list[np.ndarray] = []

    def sample_model(self, dimensions: int, levels: int, out_dimension: int) -> list[np.ndarray]:
        """Allocate ``levels`` square ``dimensions`` x ``dimensions`` weight matrices."""
        if dimensions < 0 or levels < 0:
            raise ValueError("dimensions and levels must not be negative")
        self.model = [np.zeros((dimensions, dimensions)) for _ in range(levels)]
        return self.model