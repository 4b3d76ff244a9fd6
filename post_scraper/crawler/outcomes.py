"""Values passed across the crawler component boundaries.

Every component returns one of these instead of raising, so the state machine
only ever branches on types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class CandidateRecord:
    external_id: str
    title: str
    source_url: str
    image_url: str
    author: str | None = None


@dataclass(frozen=True, slots=True)
class FetchFailure:
    page: int
    url: str
    message: str


@dataclass(frozen=True, slots=True)
class EntryNotFound:
    index: int
    message: str


@dataclass(frozen=True, slots=True)
class Created:
    id: int
    external_id: str


@dataclass(frozen=True, slots=True)
class AlreadyExists:
    external_id: str


@dataclass(frozen=True, slots=True)
class PersistFailure:
    external_id: str
    message: str


FetchOutcome = Union[str, FetchFailure]
ExtractOutcome = Union[CandidateRecord, EntryNotFound]
PersistOutcome = Union[Created, AlreadyExists, PersistFailure]
