"""
Recurring job scheduler

Runs each recurring callback in its own asyncio task on the running event
loop. Jobs are independent: cancelling one never touches another.
"""
import asyncio
import logging
from asyncio import Task
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class ScheduledJob:
    """Cancellation handle for one recurring callback"""

    def __init__(self, name: str, interval_seconds: float):
        self.name = name
        self.interval_seconds = interval_seconds
        self.task: Optional[Task] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        """Stop the job. Safe to call any number of times."""
        if self._cancelled:
            return
        self._cancelled = True
        if self.task and not self.task.done():
            self.task.cancel()


class Scheduler(Protocol):
    def every(self, interval_seconds: float, callback: Callable[[], None], name: str = "") -> ScheduledJob:
        ...

    def cancel(self, job: ScheduledJob) -> None:
        ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop"""

    def every(self, interval_seconds: float, callback: Callable[[], None], name: str = "") -> ScheduledJob:
        """
        Call `callback` every `interval_seconds` until the job is cancelled.

        Must be called from inside a running event loop. Firing times are
        anchored to the loop clock so a slow callback does not push later
        ticks back.

        Args:
            interval_seconds: Period between calls
            callback: Zero-argument function
            name: Label used in logs

        Returns:
            ScheduledJob handle for cancel()
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        loop = asyncio.get_running_loop()
        job = ScheduledJob(name or getattr(callback, "__name__", "job"), interval_seconds)
        job.task = loop.create_task(self._run(job, callback))
        return job

    def cancel(self, job: ScheduledJob) -> None:
        job.cancel()

    async def _run(self, job: ScheduledJob, callback: Callable[[], None]):
        loop = asyncio.get_running_loop()
        next_at = loop.time() + job.interval_seconds
        try:
            while not job.cancelled:
                await asyncio.sleep(max(0.0, next_at - loop.time()))
                next_at += job.interval_seconds
                if job.cancelled:
                    break
                try:
                    callback()
                except Exception as e:
                    logger.error(f"Scheduled job {job.name} failed: {e}", exc_info=True)
        except asyncio.CancelledError:
            logger.debug(f"Scheduled job {job.name} cancelled")
