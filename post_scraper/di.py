from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from .api.app import ApiServer, create_app
from .config import AppConfig
from .crawler.extractor import PostExtractor
from .crawler.fetcher import PageFetcher
from .crawler.machine import CrawlStateMachine
from .crawler.persister import DedupPersister
from .db.repo import Repository, init_db
from .scheduler import CrawlScheduler

LOGGER = logging.getLogger(__name__)


class Container:
    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.engine = create_async_engine(config.database.url, echo=False, future=True)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        self.repository = Repository(self.session_factory)
        self.fetcher = PageFetcher(config.scraper)
        self.machine = CrawlStateMachine(
            fetcher=self.fetcher,
            extractor=PostExtractor(config.scraper.selectors),
            persister=DedupPersister(self.repository),
            base_url=config.scraper.base_url,
            max_steps=config.scraper.max_steps,
        )
        self.scheduler = CrawlScheduler(
            machine=self.machine,
            scraper_config=config.scraper,
            logging_config=config.logging,
        )
        self.api: ApiServer | None = None
        if config.api.enabled:
            self.api = ApiServer(create_app(self.repository), host=config.api.host, port=config.api.port)

    async def init_database(self) -> None:
        await init_db(self.engine)

    async def shutdown(self) -> None:
        try:
            await self.fetcher.shutdown()
        finally:
            await self.engine.dispose()
