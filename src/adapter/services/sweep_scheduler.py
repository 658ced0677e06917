"""
Sweep scheduler

Runs each periodic job in its own asyncio loop. A job whose previous run is
still in flight is skipped rather than stacked.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from libs.result import Result
from src.app.use_cases.sweeps import SweepReport

logger = logging.getLogger(__name__)


@dataclass
class ScheduledJob:
    name: str
    interval: float
    run: Callable[[], Awaitable[Result[SweepReport]]]


class JobAlreadyRunningError(Exception):
    pass


class SweepScheduler:
    def __init__(self, jobs: List[ScheduledJob]):
        self.jobs: Dict[str, ScheduledJob] = {job.name: job for job in jobs}
        self._running: set = set()
        self._loops: List[asyncio.Task] = []

    @property
    def started(self) -> bool:
        return bool(self._loops)

    def is_running(self, name: str) -> bool:
        return name in self._running

    async def run_job(self, name: str) -> SweepReport:
        """
        Run one job now.

        Raises KeyError for unknown jobs and JobAlreadyRunningError when the
        previous run has not finished.
        """
        job = self.jobs[name]
        if name in self._running:
            raise JobAlreadyRunningError(name)

        self._running.add(name)
        try:
            result = await job.run()
        finally:
            self._running.discard(name)
        return result.value

    async def _loop(self, job: ScheduledJob) -> None:
        while True:
            await asyncio.sleep(job.interval)
            try:
                report = await self.run_job(job.name)
            except JobAlreadyRunningError:
                logger.warning(f"Skipping {job.name} sweep, previous run still in progress")
                continue
            except Exception:
                logger.exception(f"{job.name} sweep failed")
                continue
            if report.failed:
                logger.warning(f"{job.name} sweep finished with failures: {report.failed}")

    def start(self) -> None:
        if self._loops:
            return
        for job in self.jobs.values():
            self._loops.append(asyncio.create_task(self._loop(job), name=f"sweep-{job.name}"))
        logger.info(f"Scheduler started with jobs: {', '.join(self.jobs)}")

    async def stop(self, timeout: Optional[float] = None) -> None:
        loops, self._loops = self._loops, []
        for task in loops:
            task.cancel()
        if loops:
            await asyncio.wait(loops, timeout=timeout)
        logger.info("Scheduler stopped")
