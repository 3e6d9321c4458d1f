"""
Background work queue for fire-and-forget tasks (bonus roadmaps).

Tasks run on a small thread pool. A task's failure never reaches the code
that submitted it: it is logged to the `fitness_wizard.background` logger
and recorded on `failures` so tests and operators can observe it.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set

from .logger import get_logger

log = get_logger('fitness_wizard.background')


@dataclass
class TaskFailure:
    name: str
    error: BaseException


class BackgroundQueue:
    """Thread-pool queue with its own error sink."""

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='wizard-bg')
        self._lock = threading.Lock()
        self._pending: Set[Future] = set()
        self.failures: List[TaskFailure] = []

    def submit(self, name: str, fn: Callable[..., Any], *args, **kwargs) -> Future:
        """Schedule fn(*args, **kwargs) and return immediately."""
        future = self._executor.submit(self._run, name, fn, args, kwargs)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        log.debug("Task queued", task=name)
        return future

    def _run(self, name: str, fn: Callable[..., Any], args, kwargs) -> Any:
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            log.exception(f"Background task failed: {e}", task=name)
            with self._lock:
                self.failures.append(TaskFailure(name=name, error=e))
            return None
        log.info("Background task finished", task=name, result=result)
        return result

    def _forget(self, future: Future):
        with self._lock:
            self._pending.discard(future)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every pending task is done. False on timeout."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
