"""Background work for fire-and-forget client effects.

Callers get a ``Future`` back; tests wait on it, the UI usually does not.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

import structlog

logger = structlog.get_logger(__name__)


class BackgroundTasks:
    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="storefront")

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        return self._executor.submit(fn, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        logger.debug("Shutting down background tasks", wait=wait)
        self._executor.shutdown(wait=wait)
