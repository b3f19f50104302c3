"""APScheduler adapter - runs fire-and-forget jobs in the background."""

import logging
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """
    One-off background jobs on an APScheduler BackgroundScheduler.

    Implements Dispatcher protocol. Jobs submitted before start() run once
    the scheduler starts.
    """

    def __init__(self, scheduler: BackgroundScheduler | None = None, timezone: str = "UTC"):
        self.scheduler = scheduler or BackgroundScheduler(timezone=timezone)

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Background dispatcher started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Background dispatcher stopped")

    def submit(self, func: Callable, *args) -> None:
        # No trigger means a single run right away
        self.scheduler.add_job(func, args=list(args), misfire_grace_time=None)
