"""Process-wide Playwright browser session shared by every CNR lookup."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from . import config
from .logging_utils import _scraper_event


def build_launch_options() -> Dict[str, Any]:
    """Return Chromium launch options for the current host."""

    if config.is_constrained_host():
        _scraper_event("session", step="launch_mode", mode="packaged")
        options: Dict[str, Any] = {
            "headless": True,
            "args": list(config.LOCAL_BROWSER_ARGS),
        }
        if config.BROWSER_EXECUTABLE:
            options["executable_path"] = config.BROWSER_EXECUTABLE
        return options

    _scraper_event("session", step="launch_mode", mode="local", channel=config.BROWSER_CHANNEL)
    options = {
        "headless": config.BROWSER_HEADLESS,
        "args": list(config.LOCAL_BROWSER_ARGS),
    }
    if config.BROWSER_CHANNEL:
        options["channel"] = config.BROWSER_CHANNEL
    return options


class BrowserSession:
    """One browser process and one browsing context, started on first use.

    Concurrent first callers wait on a lock so the browser is launched once.
    Pages handed out by :meth:`new_page` belong to the caller, who must close
    them.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.launch_count = 0

    @property
    def started(self) -> bool:
        return self._context is not None

    async def context(self) -> BrowserContext:
        if self._context is not None:
            return self._context
        async with self._lock:
            if self._context is None:
                await self._start()
        return self._context

    async def _start(self) -> None:
        options = build_launch_options()
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(**options)
            context = await browser.new_context(
                user_agent=config.USER_AGENT,
                ignore_https_errors=config.is_constrained_host(),
            )
        except Exception as exc:
            _scraper_event("error", phase="session", step="launch_failed", error=str(exc))
            await playwright.stop()
            raise
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self.launch_count += 1
        _scraper_event("session", step="started", launch_count=self.launch_count)

    async def new_page(self) -> Page:
        context = await self.context()
        return await context.new_page()

    async def close(self) -> None:
        """Shut the browser down; only used by the CLI and tests."""

        async with self._lock:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
            if self._playwright is not None:
                await self._playwright.stop()
            self._context = None
            self._browser = None
            self._playwright = None
            _scraper_event("session", step="closed")


_SESSION: Optional[BrowserSession] = None


def get_session() -> BrowserSession:
    """Return the process-scoped session handle (not yet started)."""

    global _SESSION
    if _SESSION is None:
        _SESSION = BrowserSession()
    return _SESSION


async def acquire_session() -> BrowserSession:
    """Return the shared session with its browser and context running."""

    session = get_session()
    await session.context()
    return session


__all__ = ["BrowserSession", "acquire_session", "build_launch_options", "get_session"]
