from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from typing import Any, Coroutine, Optional, TypeVar

from .logging_utils import _scraper_event

T = TypeVar("T")


class BackgroundLoop:
    """
    Event loop running on a daemon thread.

    IMPORTANT:
    - The shared browser session is bound to this loop, so every lookup
      started from a synchronous caller (Flask views) must go through it.
    - The loop is started once and lives as long as the process.
    """

    def __init__(self) -> None:
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _ensure_started(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="cnrlookup-loop", daemon=True
                )
                thread.start()
                self._loop = loop
                self._thread = thread
                _scraper_event("state", phase="background_loop", kind="started")
            return self._loop

    def submit(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        return asyncio.run_coroutine_threadsafe(coro, self._ensure_started())

    def run(self, coro: Coroutine[Any, Any, T], timeout: Optional[float] = None) -> T:
        return self.submit(coro).result(timeout=timeout)


_BACKGROUND_LOOP = BackgroundLoop()


def get_background_loop() -> BackgroundLoop:
    return _BACKGROUND_LOOP


__all__ = ["BackgroundLoop", "get_background_loop"]
