from __future__ import annotations

import asyncio
import logging

import aiohttp

from ..config import ScraperConfig
from .outcomes import FetchFailure, FetchOutcome

LOGGER = logging.getLogger(__name__)

# The origin answers past-the-end pages with a 404 body that simply has no posts.
NOT_FOUND = 404


def page_url(base_url: str, page: int) -> str:
    """Listing URL for ``page``.

    Page 1 is the bare base URL: the site redirects ``/page/1`` to ``/`` and
    that redirect must not be part of the request.
    """
    if page < 1:
        raise ValueError("Page index must start from 1")
    base = base_url.rstrip("/")
    if page == 1:
        return base
    return f"{base}/page/{page}"


class PageFetcher:
    def __init__(self, config: ScraperConfig, session: aiohttp.ClientSession | None = None) -> None:
        self._config = config
        self._session = session
        self._owns_session = session is None
        # Set by shutdown(); fetches after that fail instead of reopening a session
        self._closed = False

    async def startup(self) -> None:
        self._closed = False
        if self._session is not None:
            return
        timeout = aiohttp.ClientTimeout(total=self._config.http_timeout_seconds)
        headers = {
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/125.0 Safari/537.36",
            "Accept": "text/html",
        }
        self._session = aiohttp.ClientSession(timeout=timeout, headers=headers)
        self._owns_session = True

    async def shutdown(self) -> None:
        self._closed = True
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def fetch(self, page: int) -> FetchOutcome:
        url = page_url(self._config.base_url, page)
        if self._closed:
            return FetchFailure(page=page, url=url, message=f"Fetcher is shut down, not requesting {url}")
        session = await self._ensure_session()
        LOGGER.debug("Fetching page", extra={"url": url, "page": page})
        try:
            async with session.get(url) as response:
                if response.status >= 400 and response.status != NOT_FOUND:
                    return FetchFailure(page=page, url=url, message=f"Unexpected status {response.status} from {url}")
                # Bytes that do not match the declared charset are replaced, not fatal
                return await response.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeError) as exc:
            return FetchFailure(page=page, url=url, message=f"Error while requesting {url}: {exc!r}")

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            await self.startup()
        if self._session is None:  # pragma: no cover
            raise RuntimeError("HTTP session is not initialized")
        return self._session
