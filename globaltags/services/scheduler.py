"""Fixed-rate periodic jobs on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

log = logging.getLogger(__name__)


class Job:
    """A registered periodic callable and its running task."""

    def __init__(self, name: str, interval_ms: int, fn: Callable[[], None]) -> None:
        self.name = name
        self.interval_ms = interval_ms
        self.fn = fn
        self.task: asyncio.Task | None = None


class Scheduler:
    """Runs registered jobs every ``interval_ms`` until stopped.

    One instance can be shared by several caches. Jobs registered before
    ``start()`` begin when it is called; jobs registered on a running
    scheduler begin immediately. The first run happens one interval after
    the job starts.
    """

    def __init__(self) -> None:
        self._jobs: list[Job] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def jobs(self) -> list[Job]:
        return list(self._jobs)

    def every(self, interval_ms: int, fn: Callable[[], None], name: str = "") -> Job | None:
        """Register ``fn``. A negative interval disables it and returns None."""
        if interval_ms < 0:
            log.debug("Job %s disabled", name or fn)
            return None
        if interval_ms == 0:
            raise ValueError("interval must be positive")
        job = Job(name=name or getattr(fn, "__name__", "job"), interval_ms=interval_ms, fn=fn)
        self._jobs.append(job)
        if self._running:
            self._start_job(job)
        return job

    def start(self) -> None:
        """Start all registered jobs. Must be called with a running event loop."""
        asyncio.get_running_loop()
        if self._running:
            return
        self._running = True
        for job in self._jobs:
            self._start_job(job)
        log.info("Scheduler started with %d job(s)", len(self._jobs))

    async def stop(self) -> None:
        """Cancel all job tasks and wait for them to finish."""
        self._running = False
        tasks = [job.task for job in self._jobs if job.task is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        for job in self._jobs:
            job.task = None
        log.info("Scheduler stopped")

    def _start_job(self, job: Job) -> None:
        if job.task is None or job.task.done():
            job.task = asyncio.get_running_loop().create_task(self._run(job))

    async def _run(self, job: Job) -> None:
        loop = asyncio.get_running_loop()
        period = job.interval_ms / 1000
        next_run = loop.time() + period
        while True:
            await asyncio.sleep(max(0.0, next_run - loop.time()))
            try:
                job.fn()
            except Exception:
                log.exception("Scheduled job %s failed", job.name)
            next_run += period
