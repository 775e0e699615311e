"""
Single serial worker for all detection, pose and tracking work
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable


class VisionQueue:
    """
    FIFO serial executor

    Jobs run one at a time on a dedicated worker thread in submission
    order. ``run_sync`` called from the worker itself runs the job inline,
    so components sharing one queue can call each other's synchronous
    entry points from inside a queued job.
    """

    def __init__(self, name: str = "vision"):
        self.name = name
        self.logger = logging.getLogger(__name__)
        self._local = threading.local()
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix=name,
            initializer=self._mark_worker
        )

    def _mark_worker(self):
        self._local.is_worker = True

    def on_worker(self) -> bool:
        """True when called from this queue's worker thread"""
        return getattr(self._local, 'is_worker', False)

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """Queue a job without waiting; failures are logged"""
        future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(self._log_failure)
        return future

    def run_sync(self, fn: Callable, *args, **kwargs) -> Any:
        """Run a job after everything already queued and return its result"""
        if self.on_worker():
            return fn(*args, **kwargs)
        return self._executor.submit(fn, *args, **kwargs).result()

    def drain(self):
        """Block until every job queued so far has finished"""
        self.run_sync(lambda: None)

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    def _log_failure(self, future: Future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self.logger.error(f"{self.name} job failed: {error}", exc_info=error)
