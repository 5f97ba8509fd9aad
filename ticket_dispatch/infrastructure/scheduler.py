"""APScheduler wrapper that runs the SLA scan on a fixed interval."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)

JOB_ID = "sla_monitor"


class SlaScheduler:
    """Owns the scheduler lifecycle; at most one scan runs at a time."""

    def __init__(self, interval_seconds: int = 900):
        self.interval_seconds = interval_seconds
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self, job_func: Callable[[], Awaitable[object]]) -> None:
        if self._scheduler is not None:
            logger.warning("SLA scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=self.interval_seconds,
            id=JOB_ID,
            name="SLA monitor scan",
            misfire_grace_time=60,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("SLA scheduler started (every %d s)", self.interval_seconds)

    def stop(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("SLA scheduler stopped")
