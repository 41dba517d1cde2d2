"""Mini-batch gradient descent for linear and logistic models, and prediction."""

from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass

import numpy as np

_BATCH_SEED = 234543234


@dataclass
class RegressionParam:
    """Training settings."""

    iterations: int
    batch_size: int
    learning_rate: float


class BatchSampler:
    """Draws indices without replacement, reshuffling whenever the pool runs out."""

    def __init__(self, size: int, seed: int = _BATCH_SEED) -> None:
        self.pool = list(range(size))
        self._rng = random.Random(seed)
        self._pos = len(self.pool)

    def next_batch(self, size: int) -> list[int]:
        if size > 0 and not self.pool:
            raise ValueError("cannot draw from an empty pool")
        batch: list[int] = []
        while len(batch) < size:
            step = min(len(self.pool) - self._pos, size - len(batch))
            batch.extend(self.pool[self._pos:self._pos + step])
            self._pos += step
            if self._pos == len(self.pool):
                self._rng.shuffle(self.pool)
                self._pos = 0
        return batch


def extract_batch(x, y, indices) -> tuple[np.ndarray, np.ndarray]:
    """Return the rows of ``x`` and ``y`` named by ``indices``."""
    idx = list(indices)
    return np.asarray(x)[idx], np.asarray(y)[idx]


def test_linear_model(engine, w, x, y) -> float:
    """Mean squared error of ``x @ w`` against ``y``."""
    error = engine.mul(x, w) - y
    l2 = engine.mul(error.T, error)
    return float(engine.reveal(l2[0, 0])) / y.shape[0]


def test_logistic_model(engine, w, x, y) -> tuple[float, float]:
    """Mean squared error and accuracy of the sigmoid predictions."""
    fxw = engine.logistic_func(engine.mul(x, w))
    error = fxw - y
    l2 = engine.mul(error.T, error)
    predicted = np.asarray(engine.reveal(fxw)).ravel() > 0.5
    actual = np.asarray(engine.reveal(y)).ravel() > 0.5
    correct = int(np.count_nonzero(predicted == actual))
    rows = y.shape[0]
    return float(engine.reveal(l2[0, 0])) / rows, correct / rows


def _prepare(params: RegressionParam, x, y, x_test, y_test) -> int:
    if x.shape[0] != y.shape[0] or y.shape[1] != 1:
        raise ValueError("labels must be one column with a row per sample")
    if (x_test is None) != (y_test is None):
        raise ValueError("test data and test labels must be given together")
    if params.learning_rate <= 0 or params.batch_size <= 0:
        raise ValueError("learning rate and batch size must be positive")
    shift = int(math.log2(1 / (params.learning_rate / params.batch_size)))
    if shift < 0:
        raise ValueError("learning rate divided by batch size must not exceed 1")
    return shift


def _rate(i: int, start: float) -> float:
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    return (i + 1) * 1000.0 / elapsed_ms if elapsed_ms else math.inf


def sgd_linear(params: RegressionParam, engine, x, y, w, x_test=None, y_test=None):
    """Train linear weights ``w`` by mini-batch SGD and return the new weights."""
    shift = _prepare(params, x, y, x_test, y_test)
    sampler = BatchSampler(x.shape[0])
    start = time.perf_counter()
    for i in range(params.iterations):
        xx, yy = extract_batch(x, y, sampler.next_batch(params.batch_size))
        error = engine.mul(xx, w) - yy
        update = engine.mul_truncate(xx.T, error, shift)
        w = w - update
        if x_test is not None and i % 1000 == 0:
            score = test_linear_model(engine, w, x_test, y_test)
            if engine.party_idx() == 0:
                print(f"{i} @ {_rate(i, start)} iters/s {score}")
    return w


def sgd_logistic(params: RegressionParam, engine, x, y, w, x_test=None, y_test=None):
    """Train logistic weights ``w`` by mini-batch SGD and return the new weights."""
    shift = _prepare(params, x, y, x_test, y_test)
    sampler = BatchSampler(x.shape[0])
    start = time.perf_counter()
    for i in range(params.iterations):
        xx, yy = extract_batch(x, y, sampler.next_batch(params.batch_size))
        fxw = engine.logistic_func(engine.mul(xx, w))
        error = fxw - yy
        update = engine.mul_truncate(xx.T, error, shift)
        w = w - update
        if x_test is not None and i % 10 == 0:
            l2, percent = test_logistic_model(engine, w, x_test, y_test)
            print(f"{i} @ {_rate(i, start)} iters/s  {l2} {percent}")
    return w


def pred_neural(engine, x, weights):
    """Run ``x`` through ReLU layers and return the arg-max of the last layer."""
    if not weights:
        raise ValueError("at least one weight matrix is required")
    xi = x
    for layer in weights[:-1]:
        xi = engine.relu_func(engine.mul(xi, layer))
    return engine.arg_max(engine.mul(xi, weights[-1]))


def pred_linear(engine, x, w):
    return engine.mul(x, w)


def pred_logistic(engine, x, w):
    return engine.extract_sign(engine.mul(x, w))