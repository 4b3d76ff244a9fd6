"""Read-only HTTP endpoints over the stored posts."""

from __future__ import annotations

import logging
from typing import Any

import orjson
from aiohttp import web

from ..db.repo import Repository

LOGGER = logging.getLogger(__name__)

REPOSITORY_KEY = web.AppKey("repository", Repository)
PROJECT_URL = "https://github.com/Krbz/node-thecodinglove-scraper"
AUTHOR_URL = "https://github.com/Krbz"
MAX_PAGE_SIZE = 500


def _json(data: Any, *, status: int = 200) -> web.Response:
    return web.json_response(data, status=status, dumps=lambda obj: orjson.dumps(obj).decode())


def _non_negative_int(request: web.Request, name: str, default: int | None) -> int | None:
    raw = request.query.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise web.HTTPBadRequest(text=f"{name} must be an integer") from None
    if value < 0:
        raise web.HTTPBadRequest(text=f"{name} must be >= 0")
    return value


async def index(request: web.Request) -> web.Response:
    return _json({"success": PROJECT_URL, "author": AUTHOR_URL})


async def get_posts(request: web.Request) -> web.Response:
    repo = request.app[REPOSITORY_KEY]
    limit = _non_negative_int(request, "limit", None)
    offset = _non_negative_int(request, "offset", 0) or 0
    if limit is not None:
        limit = min(limit, MAX_PAGE_SIZE)
    posts = await repo.list_posts(limit=limit, offset=offset)
    total = await repo.count_posts()
    return _json({"posts": [post.to_dict() for post in posts], "total": total})


async def get_random(request: web.Request) -> web.Response:
    repo = request.app[REPOSITORY_KEY]
    post = await repo.random_post()
    if post is None:
        return _json({"error": "No posts stored yet"}, status=404)
    return _json(post.to_dict())


def create_app(repository: Repository) -> web.Application:
    app = web.Application()
    app[REPOSITORY_KEY] = repository
    app.router.add_post("/", index)
    app.router.add_get("/posts", get_posts)
    app.router.add_get("/random", get_random)
    return app


class ApiServer:
    def __init__(self, app: web.Application, *, host: str, port: int) -> None:
        self._runner = web.AppRunner(app)
        self._host = host
        self._port = port
        self._started = False

    async def start(self) -> None:
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._host, self._port)
        await site.start()
        self._started = True
        LOGGER.info("HTTP API listening", extra={"host": self._host, "port": self._port})

    async def shutdown(self) -> None:
        if self._started:
            await self._runner.cleanup()
            self._started = False
