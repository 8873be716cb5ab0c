"""
Recurring trigger for ingestion cycles.

The scheduler owns no pipeline state: it hands each trigger timestamp to
a single job coroutine. Cycles never overlap because the next sleep only
starts after the previous job returned.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, tzinfo
import logging
from typing import Awaitable, Callable

from .logging_utils import get_logger

Job = Callable[[datetime], Awaitable[object]]


class DailyScheduler:
    """Runs a job immediately and then every `interval_hours`."""

    def __init__(
        self,
        interval_hours: float,
        location: tzinfo,
        logger: logging.Logger | None = None,
    ):
        if interval_hours <= 0:
            raise ValueError("interval_hours must be positive")
        self.interval_seconds = interval_hours * 3600
        self.location = location
        self.logger = logger or get_logger("scheduler")
        self._stopped = asyncio.Event()

    async def run(self, job: Job, max_runs: int | None = None) -> int:
        """Trigger the job until stopped. Returns the number of runs.

        A failing job is logged and the schedule continues.
        """
        runs = 0
        self._stopped.clear()
        while not self._stopped.is_set():
            trigger = datetime.now(self.location)
            try:
                await job(trigger)
            except asyncio.CancelledError:
                raise
            except Exception:  # noqa: BLE001
                self.logger.exception("Scheduled cycle failed", extra={"trigger": trigger.isoformat()})
            runs += 1
            if max_runs is not None and runs >= max_runs:
                break
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue
        return runs

    def stop(self) -> None:
        self._stopped.set()
