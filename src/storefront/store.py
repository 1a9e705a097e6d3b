"""Reducer-driven state container with a durable mirror.

A store owns one piece of client state. Every change goes through
``dispatch``: the reducer computes the next state, the storage document is
rewritten, and subscribers are notified, all under the store's lock. If the
write fails the state does not change, so memory and disk never disagree
after a completed dispatch.
"""

import threading
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import ValidationError

logger = structlog.get_logger(__name__)


class StateStore:
    """Base store; subclasses name their storage key and how to (de)serialize."""

    storage_key: str

    def __init__(self, storage, reducer: Callable[[Any, Any], Any], initial_state):
        self._lock = threading.RLock()
        self._storage = storage
        self._reducer = reducer
        self._state = initial_state
        self._subscribers: list[Callable[[Any], None]] = []
        self._restore()

    def _restore(self):
        raw = self._storage.get(self.storage_key)
        if raw is None:
            return
        try:
            action = self._load_action(raw)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Discarding invalid cached state", key=self.storage_key, error=str(e))
            self._storage.remove(self.storage_key)
            return
        self.dispatch(action)

    def _load_action(self, raw):
        raise NotImplementedError

    def _encode(self, state):
        raise NotImplementedError

    @property
    def state(self):
        return self._state

    def dispatch(self, action):
        with self._lock:
            new_state = self._reducer(self._state, action)
            if new_state == self._state:
                return self._state
            self._storage.set(self.storage_key, self._encode(new_state))
            self._state = new_state
            for subscriber in list(self._subscribers):
                subscriber(new_state)
            return new_state

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Call ``callback`` with the new state after every change.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe
