from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace

from .outcomes import CandidateRecord


class ErrorKind(str, enum.Enum):
    FETCH_FAILURE = "fetch_failure"
    ENTRY_NOT_FOUND = "entry_not_found"
    RECORD_EXISTS = "record_exists"
    PERSIST_FAILURE = "persist_failure"


class StopReason(str, enum.Enum):
    CAUGHT_UP = "caught_up"
    END_OF_LISTING = "end_of_listing"
    FETCH_OUTAGE = "fetch_outage"
    PERSIST_OUTAGE = "persist_outage"
    STEP_BUDGET_EXHAUSTED = "step_budget_exhausted"
    ALREADY_RUNNING = "already_running"


STOP_REASONS: dict[ErrorKind, StopReason] = {
    ErrorKind.FETCH_FAILURE: StopReason.FETCH_OUTAGE,
    ErrorKind.ENTRY_NOT_FOUND: StopReason.END_OF_LISTING,
    ErrorKind.RECORD_EXISTS: StopReason.CAUGHT_UP,
    ErrorKind.PERSIST_FAILURE: StopReason.PERSIST_OUTAGE,
}


@dataclass(frozen=True, slots=True)
class CrawlPosition:
    page: int = 1
    post_index: int = 0

    def next_post(self) -> "CrawlPosition":
        return CrawlPosition(page=self.page, post_index=self.post_index + 1)

    def next_page(self) -> "CrawlPosition":
        return CrawlPosition(page=self.page + 1, post_index=0)


@dataclass(frozen=True, slots=True)
class CrawlState:
    position: CrawlPosition = field(default_factory=CrawlPosition)
    memo: ErrorKind | None = None
    # Markup of ``position.page``; None until fetched or after a page advance
    content: str | None = None
    # Candidate awaiting a persist retry
    pending: CandidateRecord | None = None

    def with_memo(self, memo: ErrorKind | None) -> "CrawlState":
        return replace(self, memo=memo)

    def resolve(self, kind: ErrorKind) -> "CrawlState":
        """Clear the memo if it holds ``kind``; other kinds are left pending."""
        if self.memo is kind:
            return replace(self, memo=None)
        return self

    def advance_page(self) -> "CrawlState":
        return replace(self, position=self.position.next_page(), content=None, pending=None)

    def advance_post(self) -> "CrawlState":
        return replace(self, position=self.position.next_post(), memo=None, pending=None)


def debounce(memo: ErrorKind | None, kind: ErrorKind) -> tuple[ErrorKind | None, bool]:
    """Record once, give up on an immediate repeat.

    Returns the new memo and whether the crawl should stop. A repeat of the
    same kind clears the memo; anything else replaces it with ``kind``.
    """
    if memo is kind:
        return None, True
    return kind, False
