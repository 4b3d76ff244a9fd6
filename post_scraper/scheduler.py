from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import LoggingConfig, ScraperConfig
from .crawler.machine import CrawlStateMachine

LOGGER = logging.getLogger(__name__)


class CrawlScheduler:
    def __init__(
        self,
        *,
        machine: CrawlStateMachine,
        scraper_config: ScraperConfig,
        logging_config: LoggingConfig,
    ) -> None:
        self._machine = machine
        self._config = scraper_config
        self._scheduler = AsyncIOScheduler(timezone=logging_config.timezone)
        self._job = None

    @property
    def job(self):
        return self._job

    async def start(self) -> None:
        self._scheduler.start()
        await self.refresh_schedule()

    async def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    async def refresh_schedule(self) -> None:
        schedule = self._config.cron_schedule
        if not schedule:
            if self._job is not None:
                self._job.remove()
                self._job = None
            LOGGER.warning("Config time schedule for your cron; crawl job not scheduled")
            return
        trigger = CronTrigger.from_crontab(schedule, timezone=self._scheduler.timezone)
        if self._job is None:
            # One instance at a time: a tick that lands mid-crawl is dropped
            self._job = self._scheduler.add_job(
                self.run_crawl,
                trigger=trigger,
                max_instances=1,
                coalesce=True,
            )
            LOGGER.info("Crawl job scheduled", extra={"schedule": schedule})
            if self._config.run_on_start:
                await self.run_crawl()
        else:
            self._job.reschedule(trigger=trigger)
            LOGGER.info("Crawl job rescheduled", extra={"schedule": schedule})

    async def run_crawl(self) -> None:
        LOGGER.info("Running scheduled crawl", extra={"schedule": self._config.cron_schedule})
        try:
            await self._machine.run_crawl()
        except Exception:  # pragma: no cover - keep the scheduler alive
            LOGGER.exception("Error during crawl")
