from __future__ import annotations

import asyncio
import logging
import signal
from typing import Awaitable, Callable

LOGGER = logging.getLogger(__name__)
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def install_shutdown_handlers(shutdown: Callable[[], Awaitable[None]]) -> set[asyncio.Task[None]]:
    """Run ``shutdown`` on SIGINT/SIGTERM.

    Returns the set that keeps the spawned shutdown tasks referenced until
    they finish.
    """
    loop = asyncio.get_running_loop()
    pending: set[asyncio.Task[None]] = set()

    async def _on_signal(sig: signal.Signals) -> None:
        LOGGER.info("Received signal, shutting down", extra={"signal": sig.name})
        await shutdown()

    def _spawn(sig: signal.Signals) -> None:
        task = loop.create_task(_on_signal(sig))
        pending.add(task)
        task.add_done_callback(pending.discard)

    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, _spawn, sig)
        except NotImplementedError:  # pragma: no cover - Windows
            signal.signal(sig, lambda _signum, _frame, s=sig: loop.call_soon_threadsafe(_spawn, s))
    return pending
