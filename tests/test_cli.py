import numpy as np
import pytest

from trishare.cli import linear_plain_main, logistic_plain_main, main
from trishare.model_gen import LinearModelGen, LogisticModelGen
from trishare.plain_ml import PlainML
from trishare.regression import test_linear_model as linear_score
from trishare.regression import test_logistic_model as logistic_score


def test_linear_returns_shapes_and_integer_model(capsys):
    model, weights = linear_plain_main(40, 3, 8, 5, 10)
    assert model.shape == (3, 1)
    assert weights.shape == (3, 1)
    assert np.all(model == np.round(model))
    assert np.all(np.abs(model) <= 9)
    assert "training __" in capsys.readouterr().out


def test_linear_is_deterministic(capsys):
    m1, w1 = linear_plain_main(40, 3, 8, 20, 10)
    m2, w2 = linear_plain_main(40, 3, 8, 20, 10)
    assert np.array_equal(m1, m2)
    assert np.array_equal(w1, w2)


def test_linear_training_reduces_error(capsys):
    model, weights = linear_plain_main(200, 3, 16, 3000, 50)
    gen = LinearModelGen()
    gen.set_model(model)
    x, y = gen.sample(200)
    engine = PlainML()
    trained = linear_score(engine, weights, x, y)
    untrained = linear_score(engine, np.zeros((3, 1)), x, y)
    assert trained < untrained


def test_linear_prints_one_line_per_weight(capsys):
    linear_plain_main(30, 4, 8, 2, 10)
    lines = capsys.readouterr().out.splitlines()
    report = [line for line in lines if line.split(" ")[0] in {"0", "1", "2", "3"}
              and len(line.split(" ")) == 3]
    assert [line.split(" ")[0] for line in report[-4:]] == ["0", "1", "2", "3"]


def test_logistic_training_reduces_error(capsys):
    model, weights = logistic_plain_main(200, 3, 16, 300, 50)
    gen = LogisticModelGen()
    gen.set_model(model)
    x, y = gen.sample(200)
    engine = PlainML()
    trained_l2, trained_acc = logistic_score(engine, weights, x, y)
    untrained_l2, _ = logistic_score(engine, np.zeros((3, 1)), x, y)
    assert trained_l2 < untrained_l2
    assert 0.0 <= trained_acc <= 1.0


def test_logistic_shares_model_with_linear(capsys):
    linear_model, _ = linear_plain_main(20, 5, 4, 1, 5)
    logistic_model, _ = logistic_plain_main(20, 5, 4, 1, 5)
    assert np.array_equal(linear_model, logistic_model)


def test_main_runs_linear(capsys):
    code = main(["linear", "-N", "30", "-D", "2", "-B", "8", "-I", "3", "-testN", "10"])
    assert code == 0
    assert "training __" in capsys.readouterr().out


def test_main_runs_logistic(capsys):
    code = main(["logistic", "-N", "30", "-D", "2", "-B", "8", "-I", "3", "-testN", "10"])
    assert code == 0
    assert "training __" in capsys.readouterr().out


def test_main_rejects_unknown_mode(capsys):
    with pytest.raises(SystemExit):
        main(["quadratic"])


def test_empty_training_set_raises(capsys):
    with pytest.raises(ValueError):
        linear_plain_main(0, 2, 4, 1, 5)


def test_negative_dimension_raises():
    with pytest.raises(ValueError):
        logistic_plain_main(10, -1, 4, 1, 5)