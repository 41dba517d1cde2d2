"""Three-party computation building blocks (scheduling, shared OT, boolean and garbled circuits) and plaintext regression training."""

__version__ = "0.1.0"

__all__ = [
    "checks",
    "scheduler",
    "shared_ot",
    "model_gen",
    "plain_ml",
    "regression",
    "circuit",
    "garble",
    "circuit_library",
    "cli",
]