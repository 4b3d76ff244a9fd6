from __future__ import annotations

import logging
import re
from typing import Any

from bs4 import BeautifulSoup

from ..config import EntrySelectors
from .outcomes import CandidateRecord, EntryNotFound, ExtractOutcome

LOGGER = logging.getLogger(__name__)
POST_ID_PATTERN = re.compile(r"post/(\d+)")


def extract_id(url: str | None) -> str:
    """Digits following ``post/`` in ``url``, or "" when there are none."""
    match = POST_ID_PATTERN.search(url or "")
    return match.group(1) if match else ""


class PostExtractor:
    def __init__(self, selectors: EntrySelectors | None = None) -> None:
        self._selectors = selectors or EntrySelectors()

    def extract(self, content: str | None, index: int) -> ExtractOutcome:
        if index < 0:
            return EntryNotFound(index=index, message=f"Negative entry index {index}")
        if not content:
            return EntryNotFound(index=index, message="Page content is empty")
        try:
            soup = BeautifulSoup(content, "lxml")
            entries = soup.select(self._selectors.entry)
        except Exception as exc:  # pragma: no cover - lxml is tolerant of broken markup
            LOGGER.exception("Failed to parse page content")
            return EntryNotFound(index=index, message=f"Unparsable page content: {exc!r}")
        if index >= len(entries):
            return EntryNotFound(
                index=index,
                message=f"Cannot find {self._selectors.entry!r} entry #{index}, page has {len(entries)}",
            )
        return self._to_record(entries[index])

    def _to_record(self, entry: Any) -> CandidateRecord:
        heading = entry.select_one(self._selectors.title)
        title = heading.get_text(strip=True) if heading else ""
        link = heading.find("a") if heading else None
        source_url = (link.get("href") or "").strip() if link else ""
        image = entry.select_one(self._selectors.image)
        image_url = (image.get("src") or "").strip() if image else ""
        author_el = entry.select_one(self._selectors.author)
        # No byline element means None; an empty one stays ""
        author = author_el.get_text(strip=True) if author_el is not None else None
        return CandidateRecord(
            external_id=extract_id(source_url),
            title=title,
            source_url=source_url,
            image_url=image_url,
            author=author,
        )
