"""Tests for monotonic identifier generation."""

from __future__ import annotations

import re
import threading

import pytest

from execagent.infra import identifier
from execagent.infra.identifier import IdentifierGenerator, Prefix

_ID_RE = re.compile(r"^(ses|msg|per|usr|prt)_[0-9a-f]{12}[0-9A-Za-z]{14}$")


class TestFormat:
    @pytest.mark.parametrize("prefix", list(Prefix))
    def test_shape(self, prefix: Prefix) -> None:
        value = identifier.ascending(prefix)
        assert _ID_RE.match(value)
        assert value.startswith(f"{prefix}_")

    def test_accepts_plain_prefix_string(self) -> None:
        assert identifier.ascending("ses").startswith("ses_")

    def test_unknown_prefix_rejected(self) -> None:
        with pytest.raises(ValueError):
            identifier.ascending("xyz")

    def test_hex_encodes_timestamp_and_counter(self) -> None:
        gen = IdentifierGenerator()
        value = gen.create(Prefix.message, descending=False, timestamp=1)
        # 1 * 4096 + counter 1
        assert value[4:16] == "000000001001"


class TestOrdering:
    def test_ascending_same_millisecond(self) -> None:
        gen = IdentifierGenerator()
        a = gen.create(Prefix.session, descending=False, timestamp=5_000)
        b = gen.create(Prefix.session, descending=False, timestamp=5_000)
        assert a < b

    def test_ascending_across_milliseconds(self) -> None:
        gen = IdentifierGenerator()
        a = gen.create(Prefix.session, descending=False, timestamp=5_000)
        b = gen.create(Prefix.session, descending=False, timestamp=5_001)
        assert a < b

    def test_counter_resets_on_new_timestamp(self) -> None:
        gen = IdentifierGenerator()
        gen.create(Prefix.part, descending=False, timestamp=7)
        gen.create(Prefix.part, descending=False, timestamp=7)
        value = gen.create(Prefix.part, descending=False, timestamp=8)
        assert value[4:16] == format(8 * 4096 + 1, "012x")

    def test_descending_reverses_order(self) -> None:
        gen = IdentifierGenerator()
        a = gen.create(Prefix.message, descending=True, timestamp=5_000)
        b = gen.create(Prefix.message, descending=True, timestamp=5_000)
        c = gen.create(Prefix.message, descending=True, timestamp=5_001)
        assert a > b > c

    def test_sequential_ascending_on_real_clock(self) -> None:
        values = [identifier.ascending(Prefix.session) for _ in range(50)]
        assert all(a < b for a, b in zip(values, values[1:]))

    def test_sequential_descending_on_real_clock(self) -> None:
        values = [identifier.descending(Prefix.message) for _ in range(50)]
        assert all(a > b for a, b in zip(values, values[1:]))

    def test_unique_under_threads(self) -> None:
        gen = IdentifierGenerator()
        results: list[str] = []
        lock = threading.Lock()

        def mint() -> None:
            local = [gen.create(Prefix.part, descending=False, timestamp=42) for _ in range(200)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=mint) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        hex_parts = {r[4:16] for r in results}
        assert len(hex_parts) == 800


class TestGivenIds:
    def test_given_id_returned_unchanged(self) -> None:
        assert identifier.ascending(Prefix.session, "ses_custom") == "ses_custom"
        assert identifier.descending(Prefix.message, "msg_custom") == "msg_custom"

    def test_wrong_prefix_raises(self) -> None:
        with pytest.raises(ValueError, match="does not start with ses"):
            identifier.ascending(Prefix.session, "msg_123")

    def test_wrong_prefix_raises_descending(self) -> None:
        with pytest.raises(ValueError, match="does not start with prt"):
            identifier.descending(Prefix.part, "ses_123")
