from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..crawler.outcomes import CandidateRecord
from .models import Base, Post


@dataclass(slots=True)
class PostRecord:
    id: int
    external_id: str
    title: str
    source_url: str
    image_url: str
    author: str | None
    created_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "post_id": self.external_id,
            "title": self.title,
            "url": self.source_url,
            "img": self.image_url,
            "author": self.author,
            "created_at": self.created_at.isoformat(),
        }


class Repository:
    """Post storage. Lookups and inserts raise SQLAlchemy errors as-is."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_external_id(self, external_id: str) -> PostRecord | None:
        if not external_id:
            return None
        async with self._session_factory() as session:
            post = await session.scalar(select(Post).where(Post.post_id == external_id).limit(1))
            return _to_record(post) if post is not None else None

    async def insert(self, record: CandidateRecord) -> PostRecord:
        async with self._session_factory() as session:
            post = Post(
                post_id=record.external_id or None,
                title=record.title,
                url=record.source_url,
                img=record.image_url,
                author=record.author,
            )
            session.add(post)
            await session.commit()
            return _to_record(post)

    async def list_posts(self, *, limit: int | None = None, offset: int = 0) -> list[PostRecord]:
        async with self._session_factory() as session:
            stmt = select(Post).order_by(Post.id.asc()).offset(offset)
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = (await session.execute(stmt)).scalars().all()
            return [_to_record(row) for row in rows]

    async def random_post(self) -> PostRecord | None:
        async with self._session_factory() as session:
            post = await session.scalar(select(Post).order_by(func.random()).limit(1))
            return _to_record(post) if post is not None else None

    async def count_posts(self) -> int:
        async with self._session_factory() as session:
            return int(await session.scalar(select(func.count(Post.id))) or 0)


def _to_record(post: Post) -> PostRecord:
    return PostRecord(
        id=post.id,
        external_id=post.post_id or "",
        title=post.title,
        source_url=post.url,
        image_url=post.img,
        author=post.author,
        created_at=post.created_at,
    )


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
