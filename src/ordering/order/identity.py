"""Order identity generation: ``ORD-<YYYYMMDD>-<NNNN>`` per-day sequences.

Identities are handed out from an in-process counter per day, guarded by a
lock, so concurrent checkouts never read the same sequence. Each day's counter
is seeded lazily from the highest sequence already stored for that day, and
identities that arrive from elsewhere (client ledgers) are registered with
``reserve`` so the counter always stays ahead of them.
"""

import threading
from datetime import UTC, datetime

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.errors import ConflictError
from ordering.order.order import ORDER_ID_PATTERN, Order

logger = structlog.get_logger(__name__)

MAX_DAILY_SEQUENCE = 9999


def format_order_id(day: str, sequence: int) -> str:
    return f"ORD-{day}-{sequence:04d}"


def highest_stored_sequence(day: str) -> int:
    """Highest sequence already persisted for ``day`` (0 when none)."""
    repo = current_domain.repository_for(Order)
    latest = (
        repo._dao.query.filter(order_id__contains=f"ORD-{day}-")
        .order_by("-order_id")
        .limit(1)
        .all()
        .first
    )
    if latest is None:
        return 0
    return int(ORDER_ID_PATTERN.match(latest.order_id).group(2))


class OrderIdentityGenerator:
    def __init__(self, loader=highest_stored_sequence, clock=None):
        self._lock = threading.Lock()
        self._counters: dict[str, int] = {}
        self._loader = loader
        self._clock = clock or (lambda: datetime.now(UTC))

    def _current(self, day: str) -> int:
        # Caller holds the lock
        if day not in self._counters:
            self._counters[day] = self._loader(day)
        return self._counters[day]

    def next_id(self, at: datetime | None = None) -> str:
        """Hand out the next identity for the day of ``at`` (default: now)."""
        day = (at or self._clock()).strftime("%Y%m%d")
        with self._lock:
            sequence = self._current(day) + 1
            if sequence > MAX_DAILY_SEQUENCE:
                logger.error("Order identities exhausted for the day", day=day)
                raise ConflictError(f"No order identities left for {day}")
            self._counters[day] = sequence
        return format_order_id(day, sequence)

    def reserve(self, order_id: str) -> None:
        """Register an identity minted elsewhere so it is never handed out again."""
        match = ORDER_ID_PATTERN.match(order_id or "")
        if match is None:
            raise ValidationError({"order_id": [f"Invalid order identifier: {order_id}"]})

        day, sequence = match.group(1), int(match.group(2))
        with self._lock:
            if sequence > self._current(day):
                self._counters[day] = sequence

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()


_generator_instance = None
_generator_guard = threading.Lock()


def get_identity_generator() -> OrderIdentityGenerator:
    """Return the process-wide identity generator (singleton)."""
    global _generator_instance
    with _generator_guard:
        if _generator_instance is None:
            _generator_instance = OrderIdentityGenerator()
        return _generator_instance


def reset_identity_generator():
    """Reset the generator singleton (useful for testing)."""
    global _generator_instance
    with _generator_guard:
        _generator_instance = None
