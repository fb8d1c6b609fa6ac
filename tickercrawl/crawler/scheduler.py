"""
Scheduler - Pending task queue with a bounded number of in-flight fetches
"""

import asyncio
import logging
from collections import deque
from itertools import islice
from typing import Awaitable, Callable, Deque, Iterable, Optional, Set

from .task import Task

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Holds pending tasks and dispatches them while capacity remains

    ``submit`` may be called at any time, including from a running worker.
    Only ``run`` pulls tasks off the queue: popping a task, counting it as in
    flight and starting its worker happen without a suspension point in
    between, so a task is always either queued, in flight or completed.
    """

    def __init__(self, max_concurrent: int = 100, max_tasks: Optional[int] = None):
        self.max_concurrent = max_concurrent
        self.max_tasks = max_tasks

        self.pending: Deque[Task] = deque()
        self.in_flight = 0
        self.active: Set[asyncio.Future] = set()

        # Statistics
        self.submitted = 0
        self.dispatched = 0
        self.dropped = 0
        self.peak_in_flight = 0

    def submit(self, task: Task) -> bool:
        """Queue a task; returns False when the task cap drops it"""
        if self.max_tasks is not None and self.submitted >= self.max_tasks:
            self._drop(1)
            logger.debug("Dropped task %s (%s)", task.location, task.stage.name)
            return False

        self.pending.append(task)
        self.submitted += 1
        return True

    def submit_all(self, tasks: Iterable[Task], total: Optional[int] = None) -> int:
        """
        Queue tasks in order until the task cap is reached

        Tasks past the cap are counted as dropped without being iterated, using
        ``total`` or ``len(tasks)``. Returns the number of tasks queued.
        """
        if total is None:
            total = len(tasks)
        if self.max_tasks is not None:
            tasks = islice(tasks, max(self.max_tasks - self.submitted, 0))

        queued = 0
        for task in tasks:
            self.pending.append(task)
            self.submitted += 1
            queued += 1

        if total > queued:
            self._drop(total - queued)
            logger.debug("Dropped %d tasks past the task limit", total - queued)
        return queued

    def _drop(self, count: int):
        if self.dropped == 0:
            logger.warning(f"Task limit of {self.max_tasks} reached, dropping further tasks")
        self.dropped += count

    def has_capacity(self) -> bool:
        return self.in_flight < self.max_concurrent

    def is_idle(self) -> bool:
        """True once nothing is queued and nothing is in flight"""
        return self.in_flight == 0 and not self.pending

    def complete(self) -> None:
        """Mark one in-flight task as finished"""
        if self.in_flight <= 0:
            raise RuntimeError("complete() called with no task in flight")
        self.in_flight -= 1

    def dispatch(self, worker: Callable[[Task], Awaitable[None]]) -> int:
        """Start workers for queued tasks up to the concurrency limit"""
        started = 0
        while self.pending and self.has_capacity():
            task = self.pending.popleft()
            self.in_flight += 1
            self.active.add(asyncio.ensure_future(worker(task)))
            started += 1

        self.dispatched += started
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        return started

    async def run(self, worker: Callable[[Task], Awaitable[None]]) -> None:
        """
        Dispatch until the queue is empty and no task is in flight

        The worker must call ``complete()`` exactly once, after it has
        submitted everything it discovered.
        """
        while True:
            self.dispatch(worker)
            if self.is_idle():
                break

            if not self.active:
                raise RuntimeError(f"{self.in_flight} tasks in flight but no worker is running")

            done, self.active = await asyncio.wait(self.active, return_when=asyncio.FIRST_COMPLETED)
            for future in done:
                if future.exception() is not None:
                    logger.error(f"Worker crashed: {future.exception()!r}")

        # Workers only finish after their last completion, gather any stragglers
        if self.active:
            await asyncio.gather(*self.active, return_exceptions=True)
            self.active.clear()
