"""
Asynchronous task execution on a bounded pool of worker threads.

The analysis posts fire-and-forget units of work (processing a reachable
unit, rebuilding a unit's parsed graph after a cache hit) to a TaskExecutor.
Posting never blocks the caller. A task that raises is isolated: the
exception is logged and recorded on the executor, it never propagates to the
thread that posted the task.
"""

__all__ = ["TaskExecutor", "TaskFailure"]

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

LOG = logging.getLogger(__name__)


class TaskFailure(object):
    """Record of a task that raised.

    Attributes:
        name: Name of the failed task (the callable's __name__).
        exception: The exception raised by the task.
    """

    __slots__ = "name", "exception"

    def __init__(self, name, exception):
        self.name = name
        self.exception = exception

    def __repr__(self):
        return "TaskFailure(%s, %r)" % (self.name, self.exception)


class TaskExecutor(object):
    """Runs posted tasks on worker threads and tracks their completion.

    Tasks may post further tasks. quiesce() waits until no task is pending,
    including the ones posted while waiting.

    When `enabled` is False tasks run synchronously on the posting thread,
    with the same failure isolation. This keeps tests deterministic.

    Attributes:
        workers: Maximum number of concurrently running tasks.
        enabled: If False, execute tasks inline.
        failures: List of TaskFailure for every task that raised.

    Example:
        with TaskExecutor(workers=4) as executor:
            executor.postTask(process, unit)
            executor.quiesce()
    """

    def __init__(self, workers=4, enabled=True):
        self.workers = workers
        self.enabled = enabled
        self.failures = []

        self._pool = None
        self._pending = 0
        self._condition = threading.Condition()

        if enabled:
            self._pool = ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="summarycache-worker"
            )

    def postTask(self, func, *args, **kargs):
        """Schedule func(*args, **kargs) and return immediately.

        Args:
            func: Callable to run.
            *args: Positional arguments for func.
            **kargs: Keyword arguments for func.
        """
        with self._condition:
            self._pending += 1

        if self.enabled:
            self._pool.submit(self._run, func, args, kargs)
        else:
            self._run(func, args, kargs)

    def _run(self, func, args, kargs):
        try:
            func(*args, **kargs)
        except Exception as e:
            name = getattr(func, "__name__", repr(func))
            LOG.exception("Task %s failed", name)
            with self._condition:
                self.failures.append(TaskFailure(name, e))
        finally:
            with self._condition:
                self._pending -= 1
                if self._pending == 0:
                    self._condition.notify_all()

    @property
    def pending(self):
        """Number of posted tasks that have not completed yet."""
        with self._condition:
            return self._pending

    def quiesce(self, timeout=None):
        """Block until every posted task has completed.

        Args:
            timeout: Optional maximum number of seconds to wait.

        Returns:
            bool: True if the executor is idle, False if the wait timed out.
        """
        with self._condition:
            return self._condition.wait_for(lambda: self._pending == 0, timeout)

    def shutdown(self, wait=True):
        if self._pool is not None:
            self._pool.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, type, value, tb):
        self.shutdown()
