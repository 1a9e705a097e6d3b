"""Per-order locks serializing read-modify-write cycles on a single order.

Order ids are hashed onto a fixed pool of lock stripes, so memory stays
bounded however many orders the process touches. Two orders may share a
stripe; callers never hold more than one order lock at a time.
"""

import threading
import zlib
from contextlib import contextmanager

LOCK_STRIPES = 64

_stripes: tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def _lock_for(order_id: str) -> threading.Lock:
    return _stripes[zlib.crc32(order_id.encode("utf-8")) % LOCK_STRIPES]


@contextmanager
def order_lock(order_id: str):
    """Hold the lock for ``order_id`` across load, mutation and commit."""
    with _lock_for(str(order_id)):
        yield


def reset_order_locks():
    global _stripes
    _stripes = tuple(threading.Lock() for _ in range(LOCK_STRIPES))
