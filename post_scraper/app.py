from __future__ import annotations

import asyncio
import logging

from .config import load_config
from .di import Container
from .logging_config import configure_logging
from .util.signals import install_shutdown_handlers

LOGGER = logging.getLogger(__name__)


async def main() -> None:
    config = load_config()
    configure_logging(config.logging.level)
    container = Container(config)
    await container.init_database()
    await container.fetcher.startup()

    stop_event = asyncio.Event()
    shutdown_called = False

    async def shutdown() -> None:
        nonlocal shutdown_called
        if shutdown_called:
            return
        shutdown_called = True
        await container.scheduler.shutdown()
        if container.api is not None:
            try:
                await container.api.shutdown()
            except Exception:  # pragma: no cover
                LOGGER.exception("Failed to stop HTTP API")
        await container.shutdown()
        stop_event.set()

    install_shutdown_handlers(shutdown)

    try:
        if container.api is not None:
            await container.api.start()
        await container.scheduler.start()
        await stop_event.wait()
    finally:
        await shutdown()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
