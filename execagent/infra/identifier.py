"""Monotonic, time-ordered identifiers.

Format: ``<prefix>_<12 hex><14 base62>``. The hex field encodes
``timestamp_ms * 4096 + counter`` (low 48 bits, big-endian), so ascending ids
minted in call order sort lexicographically in that order. Descending ids
invert the field. The random suffix never takes part in ordering.
"""

from __future__ import annotations

import secrets
import threading
import time
from enum import StrEnum

_BASE62 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
_ID_LENGTH = 26
_TIME_HEX_LENGTH = 12
_TIME_MASK = (1 << 48) - 1
_COUNTER_SPACE = 0x1000


class Prefix(StrEnum):
    session = "ses"
    message = "msg"
    permission = "per"
    user = "usr"
    part = "prt"


def _random_base62(length: int) -> str:
    return "".join(secrets.choice(_BASE62) for _ in range(length))


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class IdentifierGenerator:
    """Owns the (last_timestamp, counter) pair. Safe to share across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_timestamp = 0
        self._counter = 0

    def _next_counter(self, timestamp: int) -> int:
        with self._lock:
            if timestamp != self._last_timestamp:
                self._last_timestamp = timestamp
                self._counter = 1
            else:
                self._counter += 1
            return self._counter

    def create(self, prefix: Prefix | str, descending: bool, timestamp: int | None = None) -> str:
        current = _now_ms() if timestamp is None else timestamp
        counter = self._next_counter(current)

        value = current * _COUNTER_SPACE + counter
        if descending:
            value = ~value
        time_hex = format(value & _TIME_MASK, f"0{_TIME_HEX_LENGTH}x")

        return f"{Prefix(prefix)}_{time_hex}{_random_base62(_ID_LENGTH - _TIME_HEX_LENGTH)}"

    def ascending(self, prefix: Prefix | str, given: str | None = None) -> str:
        if given is not None:
            return _check_prefix(prefix, given)
        return self.create(prefix, descending=False)

    def descending(self, prefix: Prefix | str, given: str | None = None) -> str:
        if given is not None:
            return _check_prefix(prefix, given)
        return self.create(prefix, descending=True)


def _check_prefix(prefix: Prefix | str, given: str) -> str:
    expected = str(Prefix(prefix))
    if not given.startswith(expected):
        raise ValueError(f"ID {given} does not start with {expected}")
    return given


_generator = IdentifierGenerator()


def create(prefix: Prefix | str, descending: bool = False, timestamp: int | None = None) -> str:
    """Mint an id from the process-wide generator."""
    return _generator.create(prefix, descending, timestamp)


def ascending(prefix: Prefix | str, given: str | None = None) -> str:
    return _generator.ascending(prefix, given)


def descending(prefix: Prefix | str, given: str | None = None) -> str:
    return _generator.descending(prefix, given)
