"""Error type and a small assertion helper for protocol invariants."""

from __future__ import annotations


class ProtocolError(RuntimeError):
    """Raised when a protocol or bookkeeping invariant is violated."""


def check(condition: object, message: str) -> None:
    """Raise :class:`ProtocolError` with ``message`` unless ``condition`` is truthy."""
    if not condition:
        raise ProtocolError(message)