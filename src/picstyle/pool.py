"""Off-loop execution of the CPU-bound pixel pipeline.

Route handlers hand decode/transform/encode work to a fixed set of worker
threads sized by ``max_concurrent``; an asyncio semaphore of the same size
gates entry. Conversions never share buffers, so workers need no locking of
their own. A request that cannot get a worker within the timeout fails with
``TimeoutError``, which the app reports as 503.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from picstyle.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

QUEUE_TIMEOUT_SECONDS: float = 5.0


class ConversionPool:
    """Bounded worker pool for thumbnail, outline and illustration jobs."""

    def __init__(self, settings: Settings, timeout: float = QUEUE_TIMEOUT_SECONDS) -> None:
        self._semaphore = asyncio.Semaphore(settings.max_concurrent)
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_concurrent,
            thread_name_prefix="picstyle-pipeline",
        )
        self._timeout = timeout
        self._active_count: int = 0
        self._queue_depth: int = 0
        self._counter_lock = threading.Lock()

    async def run(self, func: Callable[..., T], *args: object, **kwargs: object) -> T:
        """Run ``func(*args, **kwargs)`` on a worker thread and await its result.

        Waits up to the pool timeout for a free worker. Whatever ``func``
        raises (decode, dimension or encode errors) reaches the caller as is.

        Raises:
            TimeoutError: If the semaphore cannot be acquired within the timeout.
        """
        with self._counter_lock:
            self._queue_depth += 1
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self._timeout)
        except TimeoutError:
            logger.warning("Pipeline pool saturated; gave up after %.1fs", self._timeout)
            raise
        finally:
            with self._counter_lock:
                self._queue_depth -= 1

        with self._counter_lock:
            self._active_count += 1
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, partial(func, *args, **kwargs))
        finally:
            self._semaphore.release()
            with self._counter_lock:
                self._active_count -= 1

    @property
    def active_count(self) -> int:
        """Jobs currently executing on a worker."""
        with self._counter_lock:
            return self._active_count

    @property
    def queue_depth(self) -> int:
        """Jobs waiting for a free worker."""
        with self._counter_lock:
            return self._queue_depth

    def shutdown(self) -> None:
        """Wait for running jobs, then stop the worker threads."""
        self._executor.shutdown(wait=True)
