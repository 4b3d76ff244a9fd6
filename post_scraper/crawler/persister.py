from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from ..db.repo import PostRecord
from .outcomes import AlreadyExists, CandidateRecord, Created, PersistFailure, PersistOutcome

LOGGER = logging.getLogger(__name__)


class PostStore(Protocol):
    async def find_by_external_id(self, external_id: str) -> PostRecord | None: ...

    async def insert(self, record: CandidateRecord) -> PostRecord: ...


class DedupPersister:
    """Inserts a candidate unless a post with the same natural key is stored.

    Lookup-then-insert without isolation: only safe with one crawl in flight.
    """

    def __init__(self, store: PostStore) -> None:
        self._store = store

    async def persist(self, record: CandidateRecord) -> PersistOutcome:
        if record.external_id:
            try:
                existing = await self._store.find_by_external_id(record.external_id)
            except (SQLAlchemyError, OSError) as exc:
                return PersistFailure(
                    external_id=record.external_id,
                    message=f"Error while looking up post {record.external_id}: {exc!r}",
                )
            if existing is not None:
                return AlreadyExists(external_id=existing.external_id)
        else:
            LOGGER.warning("Post has no id in its URL; storing without dedup", extra={"url": record.source_url})

        try:
            stored = await self._store.insert(record)
        except (SQLAlchemyError, OSError) as exc:
            return PersistFailure(
                external_id=record.external_id,
                message=f"Error while saving post {record.external_id}: {exc!r}",
            )
        return Created(id=stored.id, external_id=record.external_id)
