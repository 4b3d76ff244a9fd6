from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

from post_scraper.config import LoggingConfig, ScraperConfig
from post_scraper.scheduler import CrawlScheduler


def _scheduler(schedule: str, *, run_on_start: bool) -> tuple[CrawlScheduler, SimpleNamespace]:
    machine = SimpleNamespace(run_crawl=AsyncMock())
    scheduler = CrawlScheduler(
        machine=machine,  # type: ignore[arg-type]
        scraper_config=ScraperConfig(
            base_url="https://thecodinglove.com",
            cron_schedule=schedule,
            run_on_start=run_on_start,
        ),
        logging_config=LoggingConfig(level="INFO", timezone="UTC"),
    )
    return scheduler, machine


def test_cron_job_is_scheduled_and_run_once_on_start() -> None:
    async def _run() -> None:
        scheduler, machine = _scheduler("*/5 * * * *", run_on_start=True)
        await scheduler.start()
        try:
            assert scheduler.job is not None
            assert scheduler.job.max_instances == 1
            machine.run_crawl.assert_awaited_once()
        finally:
            await scheduler.shutdown()

    asyncio.run(_run())


def test_no_immediate_run_when_disabled() -> None:
    async def _run() -> None:
        scheduler, machine = _scheduler("0 * * * *", run_on_start=False)
        await scheduler.start()
        try:
            assert scheduler.job is not None
            machine.run_crawl.assert_not_awaited()
        finally:
            await scheduler.shutdown()

    asyncio.run(_run())


def test_empty_schedule_schedules_nothing() -> None:
    async def _run() -> None:
        scheduler, machine = _scheduler("", run_on_start=True)
        await scheduler.start()
        try:
            assert scheduler.job is None
            machine.run_crawl.assert_not_awaited()
        finally:
            await scheduler.shutdown()

    asyncio.run(_run())
