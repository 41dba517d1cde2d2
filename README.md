# trishare

Building blocks for three-party secure computation, and a plaintext
engine that trains linear and logistic regression models by mini-batch
gradient descent.

## Modules

- `trishare.checks` – `ProtocolError`, raised whenever a protocol or
  bookkeeping invariant fails, and `check(condition, message)`.
- `trishare.scheduler` – a dependency-tracking task scheduler.
  `Scheduler.add_task(task_type, deps)` adds a task of type
  `TaskType.ROUND` or `TaskType.CONTINUATION`; tasks without pending
  dependencies are queued as ready. When a task is removed
  (`pop_task`, `remove_task`), its round-type successors move to the next
  round and continuation successors become ready at once.
  `add_closure(deps)` adds a continuation that completes after its
  dependencies and their successors. `describe()` returns a text dump of
  the queue and all tasks.
- `trishare.shared_ot` – helper-assisted oblivious transfer. A sender and a
  helper seeded with the same 16-byte AES key (`SharedOT.set_seed`) derive
  the same pads; the sender sends both masked messages of each pair
  (`send`), the helper sends the pad for each receiver choice (`help`), and
  the receiver unmasks one message per pair with `SharedOT.recv` or, in a
  background thread, `SharedOT.recv_async`, which returns a
  `concurrent.futures.Future`. Messages are pairs of signed 64-bit
  integers. `make_channel_pair()` returns two connected `LocalChannel`
  ends backed by in-process queues.
- `trishare.circuit` – boolean circuits made of wire `Bundle`s. `Circuit`
  folds constants and inversions as gates are added (`add_gate`,
  `add_invert`, `add_const`, `add_const_bundle`), counts nonlinear gates,
  records `add_print` entries that are written to `print_stream` during
  evaluation, and evaluates in the clear with `evaluate(inputs)`.
  `GateType` encodes each two-input gate as its truth table.
- `trishare.garble` – free-XOR, half-gates garbling over a fixed-key AES
  hash: `garble(circuit, wires, tweak, free_xor_offset)` returns every
  wire's zero-label, the `GarbledGate` tables and the next tweak;
  `evaluate(circuit, wires, garbled_gates, tweak)` returns the active
  labels and the next tweak. `sub_gate` describes a gate with one constant
  input.
- `trishare.circuit_library` – builders for ripple-carry addition
  (`add_build`), two's-complement comparison (`less_than_build`),
  multiplexing (`multiplex_build`) and extraction of one sum bit
  (`extract_bit_build`). `CircuitLibrary` caches the circuits from
  `int_piecewise_helper` (one-hot region of a value between thresholds)
  and `convert_arith_to_bin` (element-wise addition of two shares), and
  offers `piecewise_build`, `preproc_build` and `argmax_build`.
- `trishare.model_gen` – synthetic data. `LinearModelGen.sample(rows)`
  returns `X` and `Y = X @ model + noise`; `LogisticModelGen.sample` returns
  0/1 labels for `X @ model + noise > 0`. Features and noise are normal
  draws whose mean and deviation are set with `set_model(model, noise, sd)`.
  Each generator uses a fixed seed, so repeated calls give the same draws.
  `NeuralModelGen.sample_model` allocates zero weight matrices.
- `trishare.plain_ml` – `PlainML`, a cleartext engine on numpy arrays with
  `mul`, `mul_truncate` (product divided by `2 ** shift`),
  `logistic_func` (sigmoid), `reveal`, `party_idx` and `write`.
- `trishare.regression` – `RegressionParam`, `BatchSampler` (indices
  without replacement, reshuffled when the pool runs out), `sgd_linear` and
  `sgd_logistic` (return the trained weights, printing test scores when
  test data is given), `test_linear_model`, `test_logistic_model`, and
  the prediction helpers `pred_linear`, `pred_logistic` and `pred_neural`.
  The last two need an engine with `extract_sign`, `relu_func` and
  `arg_max`, which `PlainML` does not provide.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import numpy as np

from trishare.model_gen import LinearModelGen
from trishare.plain_ml import PlainML
from trishare.regression import RegressionParam, sgd_linear

gen = LinearModelGen()
gen.set_model(np.arange(4, dtype=float).reshape(4, 1), 1.0, 1.0)
x, y = gen.sample(1000)

params = RegressionParam(iterations=500, batch_size=32, learning_rate=1 / 1024)
w = sgd_linear(params, PlainML(), x, y, np.zeros((4, 1)), None, None)
```

## Command line

```
trishare linear
trishare logistic -N 2000 -D 10 -B 64 -I 500 -testN 200
```

The first argument picks the model. `-N` sets the training rows, `-D` the
feature count, `-B` the batch size, `-I` the iterations and `-testN` the
test rows (defaults 10000, 1000, 128, 10000 and 1000). The command samples
true integer weights, generates data, trains with `PlainML`, prints test
scores during training and finally each weight index with its true and
learned value. See `trishare --help`.

## What it does not do

There is no secret-sharing engine here: no networked three-party runtime,
no share encryption or reveal between parties, and no secure training or
prediction. The command trains only in the clear. `LocalChannel` connects
parties inside one process and carries no data over a network.