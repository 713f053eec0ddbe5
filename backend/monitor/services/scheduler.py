"""Periodic task scheduler for the monitoring cycles.

Each registered task gets its own ticker. A tick starts the job as a
separate asyncio task, so a slow job never delays the ticker or other
tasks. If the previous run of the same job is still in flight the tick
is skipped rather than queued.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


@dataclass
class PeriodicTask:
    """A job fired every ``interval`` seconds."""

    name: str
    interval: float
    job: Job
    align_to_calendar: bool = False
    runs: int = 0
    skipped: int = 0
    failures: int = 0
    last_started: datetime | None = None
    last_error: str | None = None
    current: asyncio.Task | None = field(default=None, repr=False)

    @property
    def running(self) -> bool:
        return self.current is not None and not self.current.done()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "interval": self.interval,
            "align_to_calendar": self.align_to_calendar,
            "running": self.running,
            "runs": self.runs,
            "skipped": self.skipped,
            "failures": self.failures,
            "last_started": self.last_started.isoformat() if self.last_started else None,
            "last_error": self.last_error,
        }


def seconds_until_boundary(now_ts: float, interval: float) -> float:
    """Delay until the next multiple of ``interval`` since the epoch.

    With a daily interval this is the next UTC midnight, with an hourly
    one the top of the next hour.
    """
    remaining = interval - (now_ts % interval)
    return remaining if remaining > 0 else interval


class MonitorScheduler:
    """Run independent periodic jobs with at most one run per job in flight."""

    def __init__(self, shutdown_grace: float = 10.0):
        self.shutdown_grace = shutdown_grace
        self._tasks: dict[str, PeriodicTask] = {}
        self._tickers: dict[str, asyncio.Task] = {}
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def tasks(self) -> list[PeriodicTask]:
        return list(self._tasks.values())

    def add_task(
        self,
        name: str,
        interval: float,
        job: Job,
        align_to_calendar: bool = False,
    ) -> PeriodicTask:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if name in self._tasks:
            raise ValueError(f"Task '{name}' already registered")

        task = PeriodicTask(
            name=name,
            interval=interval,
            job=job,
            align_to_calendar=align_to_calendar,
        )
        self._tasks[name] = task
        if self._running:
            self._tickers[name] = asyncio.create_task(self._tick_loop(task))
        return task

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        for task in self._tasks.values():
            self._tickers[task.name] = asyncio.create_task(self._tick_loop(task))
        logger.info(
            "Scheduler started: "
            + ", ".join(f"{t.name}={t.interval:g}s" for t in self._tasks.values())
        )

    async def stop(self) -> None:
        """Stop ticking, give in-flight runs a grace period, then cancel them."""
        if not self._running:
            return
        self._running = False

        for ticker in self._tickers.values():
            ticker.cancel()
        await asyncio.gather(*self._tickers.values(), return_exceptions=True)
        self._tickers.clear()

        in_flight = [t.current for t in self._tasks.values() if t.running]
        if in_flight:
            logger.info(f"Waiting for {len(in_flight)} in-flight job(s)")
            _, pending = await asyncio.wait(in_flight, timeout=self.shutdown_grace)
            for job in pending:
                job.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
                logger.warning(f"Abandoned {len(pending)} job(s) at shutdown")

        logger.info("Scheduler stopped")

    def fire(self, name: str) -> bool:
        """Start a run of ``name`` now.

        Returns:
            False if the previous run is still in flight and this one was skipped
        """
        task = self._tasks[name]
        if task.running:
            task.skipped += 1
            logger.warning(f"Skipping {name}: previous run still in progress")
            return False

        task.last_started = datetime.now(timezone.utc)
        task.current = asyncio.create_task(self._run_job(task))
        return True

    async def _run_job(self, task: PeriodicTask) -> None:
        try:
            await task.job()
            task.runs += 1
            task.last_error = None
        except asyncio.CancelledError:
            raise
        except Exception as e:
            task.failures += 1
            task.last_error = str(e)
            logger.error(f"Task {task.name} failed: {e}", exc_info=True)

    def _next_delay(self, task: PeriodicTask) -> float:
        if task.align_to_calendar:
            return seconds_until_boundary(time.time(), task.interval)
        return task.interval

    async def _tick_loop(self, task: PeriodicTask) -> None:
        while True:
            await asyncio.sleep(self._next_delay(task))
            self.fire(task.name)
