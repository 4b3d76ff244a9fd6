from __future__ import annotations

import asyncio
import os
import signal
import sys

import pytest

from post_scraper.util.signals import install_shutdown_handlers


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
def test_sigterm_runs_shutdown_once() -> None:
    async def _run() -> int:
        calls = 0
        done = asyncio.Event()

        async def shutdown() -> None:
            nonlocal calls
            calls += 1
            done.set()

        loop = asyncio.get_running_loop()
        install_shutdown_handlers(shutdown)
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            await asyncio.wait_for(done.wait(), timeout=5)
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
        return calls

    assert asyncio.run(_run()) == 1
