from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Protocol

from .fetcher import page_url
from .outcomes import (
    AlreadyExists,
    CandidateRecord,
    Created,
    EntryNotFound,
    ExtractOutcome,
    FetchFailure,
    FetchOutcome,
    PersistOutcome,
)
from .state import STOP_REASONS, CrawlPosition, CrawlState, ErrorKind, StopReason, debounce

LOGGER = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, page: int) -> FetchOutcome: ...


class Extractor(Protocol):
    def extract(self, content: str | None, index: int) -> ExtractOutcome: ...


class Persister(Protocol):
    async def persist(self, record: CandidateRecord) -> PersistOutcome: ...


@dataclass(frozen=True, slots=True)
class StepResult:
    state: CrawlState
    stop: StopReason | None = None
    created: Created | None = None


@dataclass(frozen=True, slots=True)
class CrawlResult:
    reason: StopReason
    steps: int
    created: int
    position: CrawlPosition


class CrawlStateMachine:
    """Walks the listing page by page, post by post, until a debounce rule trips.

    Each failure kind is retried once; the same kind showing up again on the
    very next attempt ends the crawl. For missing entries and duplicates that
    repeat is the normal way a crawl finishes.
    """

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        extractor: Extractor,
        persister: Persister,
        base_url: str,
        max_steps: int = 0,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._persister = persister
        self._base_url = base_url
        self._max_steps = max(max_steps, 0)
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run_crawl(self) -> CrawlResult:
        if self._lock.locked():
            LOGGER.warning("Crawl already in progress, skipping this run")
            return CrawlResult(reason=StopReason.ALREADY_RUNNING, steps=0, created=0, position=CrawlPosition())
        async with self._lock:
            return await self._crawl()

    async def _crawl(self) -> CrawlResult:
        state = CrawlState()
        steps = 0
        created = 0
        LOGGER.info("Starting crawl", extra={"base_url": self._base_url, "max_steps": self._max_steps})
        while True:
            if self._max_steps and steps >= self._max_steps:
                LOGGER.warning(
                    "Step budget exhausted, stopping crawl",
                    extra={"steps": steps, "page": state.position.page, "post": state.position.post_index},
                )
                return self._finish(StopReason.STEP_BUDGET_EXHAUSTED, steps, created, state)
            steps += 1
            result = await self.step(state)
            state = result.state
            if result.created is not None:
                created += 1
            if result.stop is not None:
                return self._finish(result.stop, steps, created, state)

    async def step(self, state: CrawlState) -> StepResult:
        if state.pending is not None:
            return await self._persist(state, state.pending)

        position = state.position
        if state.content is None:
            LOGGER.info(
                "Fetching post %s at page %s",
                position.post_index,
                position.page,
                extra={"url": page_url(self._base_url, position.page)},
            )
            page = await self._fetcher.fetch(position.page)
            if isinstance(page, FetchFailure):
                return self._on_fetch_failure(state, page)
            state = replace(state.resolve(ErrorKind.FETCH_FAILURE), content=page)

        candidate = self._extractor.extract(state.content, position.post_index)
        if isinstance(candidate, EntryNotFound):
            return self._on_entry_not_found(state, candidate)
        state = state.resolve(ErrorKind.ENTRY_NOT_FOUND)
        return await self._persist(state, candidate)

    def _on_fetch_failure(self, state: CrawlState, failure: FetchFailure) -> StepResult:
        memo, stop = debounce(state.memo, ErrorKind.FETCH_FAILURE)
        if stop:
            LOGGER.error("Fetch failed twice in a row, stopping crawl", extra={"url": failure.url})
            return StepResult(state=state.with_memo(memo), stop=StopReason.FETCH_OUTAGE)
        LOGGER.warning(failure.message, extra={"page": failure.page})
        return StepResult(state=state.with_memo(memo))

    def _on_entry_not_found(self, state: CrawlState, missing: EntryNotFound) -> StepResult:
        memo, stop = debounce(state.memo, ErrorKind.ENTRY_NOT_FOUND)
        if stop:
            LOGGER.info("There are no more posts, stopping crawl", extra={"page": state.position.page})
            return StepResult(state=state.with_memo(memo), stop=StopReason.END_OF_LISTING)
        LOGGER.info(missing.message, extra={"page": state.position.page})
        return StepResult(state=state.with_memo(memo).advance_page())

    async def _persist(self, state: CrawlState, candidate: CandidateRecord) -> StepResult:
        outcome = await self._persister.persist(candidate)
        if isinstance(outcome, Created):
            LOGGER.info("Scraped post with id: %s", outcome.external_id, extra={"record_id": outcome.id})
            return StepResult(state=state.advance_post(), created=outcome)

        if isinstance(outcome, AlreadyExists):
            kind = ErrorKind.RECORD_EXISTS
            message = f"Post {outcome.external_id} is already stored"
        else:
            kind = ErrorKind.PERSIST_FAILURE
            message = outcome.message
        memo, stop = debounce(state.memo, kind)
        if stop:
            if kind is ErrorKind.RECORD_EXISTS:
                LOGGER.info("Database is up-to-date, stopping crawl", extra={"post_id": candidate.external_id})
            else:
                LOGGER.error("Persisting failed twice in a row, stopping crawl", extra={"post_id": candidate.external_id})
            return StepResult(state=replace(state, memo=memo, pending=None), stop=STOP_REASONS[kind])
        LOGGER.log(
            logging.INFO if kind is ErrorKind.RECORD_EXISTS else logging.WARNING,
            message,
            extra={"post_id": candidate.external_id},
        )
        return StepResult(state=replace(state, memo=memo, pending=candidate))

    @staticmethod
    def _finish(reason: StopReason, steps: int, created: int, state: CrawlState) -> CrawlResult:
        LOGGER.info(
            "Crawl finished",
            extra={"reason": reason.value, "steps": steps, "created": created, "page": state.position.page},
        )
        return CrawlResult(reason=reason, steps=steps, created=created, position=state.position)
