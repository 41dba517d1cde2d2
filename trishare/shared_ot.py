"""Three-party oblivious transfer where a helper shares the sender's pads."""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterable, Sequence
from concurrent.futures import Future
from typing import Any

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from trishare.checks import ProtocolError, check

_UNSEEDED = -1


class LocalChannel:
    """One end of an in-process, message-oriented duplex channel."""

    def __init__(self, inbox: queue.Queue, outbox: queue.Queue) -> None:
        self._inbox = inbox
        self._outbox = outbox

    def send(self, message: Any) -> None:
        self._outbox.put(message)

    def recv(self, timeout: float | None = None) -> Any:
        try:
            return self._inbox.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError("no message received before the timeout") from None


def make_channel_pair() -> tuple[LocalChannel, LocalChannel]:
    """Return two connected channel ends."""
    a_to_b: queue.Queue = queue.Queue()
    b_to_a: queue.Queue = queue.Queue()
    return LocalChannel(b_to_a, a_to_b), LocalChannel(a_to_b, b_to_a)


class SharedOT:
    """Sender/helper side of a shared-seed OT.

    Sender and helper hold the same AES key and counter. The sender masks both
    messages of each pair with the pads; the helper sends the pad the receiver
    chose, so the receiver can unmask exactly one message per pair.
    """

    def __init__(self) -> None:
        self._encryptor = None
        self.idx = _UNSEEDED

    def set_seed(self, seed: bytes, seed_idx: int = 0) -> None:
        check(len(seed) == 16, "seed must be 16 bytes")
        self._encryptor = Cipher(algorithms.AES(bytes(seed)), modes.ECB()).encryptor()
        self.idx = seed_idx

    def _pads(self, count: int) -> list[tuple[int, int]]:
        check(self.idx != _UNSEEDED, "SharedOT used before set_seed")
        counters = b"".join((self.idx + i).to_bytes(16, "little") for i in range(count))
        stream = self._encryptor.update(counters)
        self.idx += count
        return [
            (
                int.from_bytes(stream[off:off + 8], "little", signed=True),
                int.from_bytes(stream[off + 8:off + 16], "little", signed=True),
            )
            for off in range(0, len(stream), 16)
        ]

    def send(self, channel: LocalChannel, messages: Sequence[tuple[int, int]]) -> None:
        """Send both messages of each pair, masked with the shared pads."""
        pads = self._pads(len(messages))
        masked = [(p0 ^ m0, p1 ^ m1) for (p0, p1), (m0, m1) in zip(pads, messages)]
        channel.send(masked)

    def help(self, channel: LocalChannel, choices: Iterable[bool]) -> None:
        """Send the receiver the pad matching each of its choice bits."""
        choices = [bool(c) for c in choices]
        pads = self._pads(len(choices))
        channel.send([pad[choice] for pad, choice in zip(pads, choices)])

    @staticmethod
    def recv(
        sender: LocalChannel, helper: LocalChannel, choices: Iterable[bool]
    ) -> list[int]:
        """Receive the chosen message of each pair."""
        choices = [bool(c) for c in choices]
        masked = sender.recv()
        pads = helper.recv()
        check(
            len(masked) == len(choices) and len(pads) == len(choices),
            "message count does not match the number of choices",
        )
        return [pair[c] ^ pad for pair, pad, c in zip(masked, pads, choices)]

    @staticmethod
    def recv_async(
        sender: LocalChannel, helper: LocalChannel, choices: Iterable[bool]
    ) -> Future:
        """Start receiving in the background; the future yields the chosen messages."""
        choices = [bool(c) for c in choices]
        future: Future = Future()

        def run() -> None:
            try:
                future.set_result(SharedOT.recv(sender, helper, choices))
            except BaseException as exc:  # handed to the future's consumer
                future.set_exception(exc)

        threading.Thread(target=run, daemon=True).start()
        return future