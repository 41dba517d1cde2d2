"""Command-line drivers that train linear and logistic models in the clear."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

import numpy as np

from trishare.model_gen import LinearModelGen, LogisticModelGen
from trishare.plain_ml import PlainML
from trishare.regression import RegressionParam, sgd_linear, sgd_logistic

_MODEL_SEED = 1
_LINEAR_LEARNING_RATE = 1.0 / (1 << 10)
_LOGISTIC_LEARNING_RATE = 1.0 / (1 << 3)


def _sample_true_model(dim: int) -> np.ndarray:
    """Draw integer weights in ``-9..9``: a signed 32-bit draw reduced modulo 10."""
    if dim < 0:
        raise ValueError("dimension must not be negative")
    rng = np.random.default_rng(_MODEL_SEED)
    draws = rng.integers(-(2**31), 2**31, size=dim, dtype=np.int64)
    # fmod truncates toward zero, so negative draws give negative weights.
    return np.fmod(draws, 10).astype(float).reshape(-1, 1)


def _report(model: np.ndarray, weights: np.ndarray) -> None:
    for i, (true_w, learned_w) in enumerate(zip(model[:, 0], weights[:, 0])):
        print(f"{i} {true_w:g} {learned_w}")


def linear_plain_main(
    n: int = 10000,
    dim: int = 1000,
    batch: int = 128,
    iterations: int = 10000,
    test_n: int = 1000,
) -> tuple[np.ndarray, np.ndarray]:
    """Train a linear model on synthetic data; return the true and learned weights."""
    gen = LinearModelGen()
    gen.set_model(_sample_true_model(dim))

    train_data, train_label = gen.sample(n)
    test_data, test_label = gen.sample(test_n)

    print("training __")
    params = RegressionParam(
        iterations=iterations, batch_size=batch, learning_rate=_LINEAR_LEARNING_RATE
    )
    weights = sgd_linear(
        params, PlainML(), train_data, train_label, np.zeros((dim, 1)), test_data, test_label
    )
    _report(gen.model, weights)
    return gen.model, weights


def logistic_plain_main(
    n: int = 10000,
    dim: int = 1000,
    batch: int = 128,
    iterations: int = 10000,
    test_n: int = 1000,
) -> tuple[np.ndarray, np.ndarray]:
    """Train a logistic model on synthetic data; return the true and learned weights."""
    model = _sample_true_model(dim)
    print("".join(f"{v:g} " for v in model[:, 0]))

    gen = LogisticModelGen()
    gen.set_model(model)

    train_data, train_label = gen.sample(n)
    test_data, test_label = gen.sample(test_n)

    print("training __")
    params = RegressionParam(
        iterations=iterations, batch_size=batch, learning_rate=_LOGISTIC_LEARNING_RATE
    )
    weights = sgd_logistic(
        params, PlainML(), train_data, train_label, np.zeros((dim, 1)), test_data, test_label
    )
    _report(gen.model, weights)
    return gen.model, weights


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trishare", description="Train a model on synthetic data in the clear."
    )
    parser.add_argument("mode", choices=("linear", "logistic"), help="model to train")
    parser.add_argument("-N", dest="n", type=int, default=10000, help="training rows")
    parser.add_argument("-D", dest="dim", type=int, default=1000, help="feature count")
    parser.add_argument("-B", dest="batch", type=int, default=128, help="batch size")
    parser.add_argument("-I", dest="iterations", type=int, default=10000, help="iterations")
    parser.add_argument("-testN", dest="test_n", type=int, default=1000, help="test rows")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv`` and run the selected trainer."""
    args = _parser().parse_args(argv)
    runner = linear_plain_main if args.mode == "linear" else logistic_plain_main
    runner(args.n, args.dim, args.batch, args.iterations, args.test_n)
    return 0