"""Background task scheduler with a drain-and-wait shutdown.

Request handlers hand fire-and-forget work (cache warmers, audit writes)
to the scheduler instead of spawning bare tasks. Shutdown then waits for
that work instead of abandoning it mid-flight::

    async with BackgroundTaskScheduler() as scheduler:
        dependencies.register(scheduler)
        ...
        scheduler.add_task(warm_cache)      # from any request
        ...
        await scheduler.wait_and_shutdown()

Leaving the ``async with`` block also drains, so the explicit
``wait_and_shutdown()`` call is optional.

Thread safety:
    The pending set is the one structure here written from two sides:
    ``add_task`` inserts, job completion removes. Both go through a Lock.
"""

from __future__ import annotations

import inspect
import itertools
import logging
import threading
from dataclasses import dataclass, field
from types import TracebackType

import anyio
from anyio.abc import TaskGroup

from wren._internal.types import Job
from wren.errors import InvalidStateForNewTasks

DEFAULT_POLL_INTERVAL = 5.0

_ids = itertools.count(1)


@dataclass(slots=True)
class PendingTask:
    """An in-flight job: identity plus completion signal."""

    job: Job
    id: int = field(default_factory=lambda: next(_ids))
    finished: anyio.Event = field(default_factory=anyio.Event)

    @property
    def name(self) -> str:
        return getattr(self.job, "__qualname__", repr(self.job))


class BackgroundTaskScheduler:
    """Tracks background jobs so shutdown can wait for them.

    Jobs run concurrently in the scheduler's anyio task group, which is
    open while the scheduler is used as an async context manager. A job
    that raises is logged and counts as finished; it never takes the task
    group (or other jobs) down with it.
    """

    __slots__ = (
        "_lock",
        "_logger",
        "_pending",
        "_should_terminate",
        "_task_group",
        "poll_interval",
    )

    def __init__(
        self,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        logger: logging.Logger | None = None,
    ) -> None:
        self.poll_interval = poll_interval
        self._logger = logger or logging.getLogger("wren.tasks")
        self._lock = threading.Lock()
        self._pending: dict[int, PendingTask] = {}
        self._should_terminate = False
        self._task_group: TaskGroup | None = None

    async def __aenter__(self) -> BackgroundTaskScheduler:
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        if exc_type is None:
            await self.wait_and_shutdown()
        else:
            self._should_terminate = True
        task_group, self._task_group = self._task_group, None
        assert task_group is not None
        return await task_group.__aexit__(exc_type, exc, tb)

    @property
    def accepting(self) -> bool:
        """True while new tasks may be added."""
        return not self._should_terminate

    @property
    def pending_count(self) -> int:
        """Number of jobs that have not finished yet."""
        with self._lock:
            return len(self._pending)

    def add_task(self, job: Job) -> PendingTask:
        """Start *job* in the background and track it until it finishes.

        *job* is a zero-argument callable, sync or async. Sync jobs run in
        a worker thread.

        Raises:
            InvalidStateForNewTasks: shutdown has been requested.
            RuntimeError: the scheduler is not running (not entered).
        """
        if self._should_terminate:
            self._logger.error("Trying to add a task when we should terminate")
            raise InvalidStateForNewTasks()
        if self._task_group is None:
            msg = "BackgroundTaskScheduler is not running; use it with 'async with'"
            raise RuntimeError(msg)

        task = PendingTask(job)
        with self._lock:
            self._pending[task.id] = task
        self._task_group.start_soon(self._run, task, name=f"background-task-{task.id}")
        self._logger.debug("Task %d (%s) scheduled", task.id, task.name)
        return task

    async def wait_and_shutdown(self) -> None:
        """Stop accepting tasks, then wait until every pending task finished.

        Polls every ``poll_interval`` seconds and logs progress, so the
        shutdown latency follows the slowest outstanding job.
        """
        self._should_terminate = True

        while True:
            count = self.pending_count
            if count == 0:
                self._logger.info("All background tasks have finished.")
                return
            self._logger.info("Waiting for background tasks to finish. %d remaining...", count)
            await anyio.sleep(self.poll_interval)

    async def _run(self, task: PendingTask) -> None:
        try:
            if inspect.iscoroutinefunction(task.job):
                await task.job()
            else:
                # Sync jobs run in a worker thread.
                result = await anyio.to_thread.run_sync(task.job)  # type: ignore[union-attr]
                if inspect.isawaitable(result):
                    await result
        except Exception:
            self._logger.exception("Background task %d (%s) failed", task.id, task.name)
        finally:
            task.finished.set()
            self._logger.debug("Task finished. Entering lock to remove from cleanup queue...")
            with self._lock:
                if self._pending.pop(task.id, None) is None:
                    self._logger.warning("Task %d not found in the cleanup queue.", task.id)
                else:
                    self._logger.debug("Task %d removed from the cleanup queue.", task.id)
