"""Tests for order identity generation."""

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

import pytest
from ordering.errors import ConflictError
from ordering.order.identity import MAX_DAILY_SEQUENCE, OrderIdentityGenerator, format_order_id
from protean.exceptions import ValidationError

OCT_19 = datetime(2026, 10, 19, 9, 30, tzinfo=UTC)


def _generator(stored=None):
    stored = stored or {}
    return OrderIdentityGenerator(loader=lambda day: stored.get(day, 0), clock=lambda: OCT_19)


class TestFormat:
    def test_zero_padded_sequence(self):
        assert format_order_id("20261019", 7) == "ORD-20261019-0007"

    def test_first_id_of_the_day(self):
        assert _generator().next_id() == "ORD-20261019-0001"

    def test_matches_pattern(self):
        assert re.match(r"^ORD-\d{8}-\d{4}$", _generator().next_id())


class TestSequencing:
    def test_continues_after_stored_orders(self):
        generator = _generator({"20261019": 41})
        assert generator.next_id() == "ORD-20261019-0042"
        assert generator.next_id() == "ORD-20261019-0043"

    def test_sequence_restarts_each_day(self):
        generator = _generator({"20261019": 12})
        generator.next_id()
        assert generator.next_id(at=datetime(2026, 10, 20, tzinfo=UTC)) == "ORD-20261020-0001"

    def test_loader_consulted_once_per_day(self):
        calls = []

        def loader(day):
            calls.append(day)
            return 0

        generator = OrderIdentityGenerator(loader=loader, clock=lambda: OCT_19)
        generator.next_id()
        generator.next_id()
        assert calls == ["20261019"]

    def test_concurrent_callers_get_distinct_ids(self):
        generator = _generator()
        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(lambda _: generator.next_id(), range(200)))

        assert len(set(ids)) == 200
        assert max(ids) == "ORD-20261019-0200"

    def test_exhausted_day_is_a_conflict(self):
        generator = _generator({"20261019": MAX_DAILY_SEQUENCE})
        with pytest.raises(ConflictError):
            generator.next_id()


class TestReserve:
    def test_reserved_identity_is_never_handed_out(self):
        generator = _generator()
        generator.reserve("ORD-20261019-0010")
        assert generator.next_id() == "ORD-20261019-0011"

    def test_lower_reservation_does_not_rewind(self):
        generator = _generator({"20261019": 20})
        generator.reserve("ORD-20261019-0005")
        assert generator.next_id() == "ORD-20261019-0021"

    def test_other_days_are_independent(self):
        generator = _generator()
        generator.reserve("ORD-20261001-0300")
        assert generator.next_id() == "ORD-20261019-0001"

    def test_malformed_identity_rejected(self):
        with pytest.raises(ValidationError):
            _generator().reserve("ORD-19-1")
