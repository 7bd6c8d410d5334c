"""Playwright-driven CNR lookup against the case-status portal.

One attempt:

- open a fresh page from the shared browser session and block fonts,
  stylesheets and media;
- open the CNR tab, type the CNR, screenshot the captcha image and read it
  with the digit OCR pipeline;
- submit, wait for the result container and classify what came back.

Anything short of a result table or an explicit "record not found" closes the
page and starts over with a new one. With the default configuration this
repeats until it succeeds or the caller's time-box cancels it.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Awaitable, Optional

from bs4 import BeautifulSoup
from playwright.async_api import Error as PWError, Page, Route, TimeoutError as PWTimeout

from . import captcha, config
from .error_codes import AttemptError, ErrorCode, ScrapeFailedError
from .extractor import CaseStatusExtractor
from .logging_utils import _scraper_event
from .models import ScrapeResult
from .retry_policy import compute_backoff_seconds, decide_retry
from .selectors_case_status import (
    CASE_STATUS_MARKERS,
    CASE_STATUS_SELECTORS,
    CaseStatusMarkers,
    CaseStatusSelectors,
)
from .session import BrowserSession
from .utils import log_line


class Classification(str, Enum):
    INVALID_CAPTCHA = "invalid_captcha"
    SPINNER = "spinner"
    NOT_FOUND = "record_not_found"
    PARSED = "parsed"
    NO_DATA = "no_data_found"
    SPINNER_TIMEOUT = "spinner_timeout"


def has_results_table(result_html: str) -> bool:
    return BeautifulSoup(result_html or "", "html5lib").find("table") is not None


def _is_not_found(result_html: str, markers: CaseStatusMarkers) -> bool:
    lowered = (result_html or "").lower()
    return any(marker in lowered for marker in markers.not_found)


def classify_result(
    page_text: str,
    result_html: str,
    markers: CaseStatusMarkers = CASE_STATUS_MARKERS,
) -> Classification:
    """Classify the page after submission; earlier checks win."""

    if any(marker in (page_text or "") for marker in markers.invalid_captcha):
        return Classification.INVALID_CAPTCHA
    if markers.spinner in (result_html or ""):
        return Classification.SPINNER
    if _is_not_found(result_html, markers):
        return Classification.NOT_FOUND
    if has_results_table(result_html):
        return Classification.PARSED
    return Classification.NO_DATA


def classify_after_spinner(
    result_html: str,
    markers: CaseStatusMarkers = CASE_STATUS_MARKERS,
) -> Classification:
    if _is_not_found(result_html, markers):
        return Classification.NOT_FOUND
    if has_results_table(result_html):
        return Classification.PARSED
    return Classification.SPINNER_TIMEOUT


async def block_heavy_resources(route: Route) -> None:
    """Abort font, stylesheet and media requests; the captcha image must load."""

    if route.request.resource_type in config.BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


async def _wait_quietly(awaitable: Awaitable[Any]) -> None:
    try:
        await awaitable
    except PWError:
        pass


async def _wait_for_result(page: Page, selectors: CaseStatusSelectors) -> None:
    """Return once a result table or error shows up, or after the fallback delay."""

    waiters = [
        asyncio.ensure_future(
            page.wait_for_selector(
                selectors.result_table, state="visible", timeout=config.RESULT_TIMEOUT_MS
            )
        ),
        asyncio.ensure_future(
            page.wait_for_selector(
                selectors.result_error, state="visible", timeout=config.RESULT_TIMEOUT_MS
            )
        ),
        asyncio.ensure_future(asyncio.sleep(config.RESULT_FALLBACK_MS / 1000)),
    ]
    try:
        await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            if not waiter.done():
                waiter.cancel()
        await asyncio.gather(*waiters, return_exceptions=True)

    await _wait_quietly(
        page.wait_for_selector(
            selectors.result_container,
            state="attached",
            timeout=config.RESULT_CONTAINER_TIMEOUT_MS,
        )
    )


async def _capture_captcha(page: Page, selectors: CaseStatusSelectors) -> bytes:
    element = await page.query_selector(selectors.captcha_image)
    if element is None:
        raise AttemptError(ErrorCode.ELEMENT_NOT_FOUND, "Captcha image not found")

    await page.wait_for_function(
        """(selector) => {
            const img = document.querySelector(selector);
            return !!img && img.complete && img.naturalWidth > 0;
        }""",
        arg=selectors.captcha_image,
        timeout=config.CAPTCHA_LOAD_TIMEOUT_MS,
    )
    await page.wait_for_timeout(config.CAPTCHA_SETTLE_MS)
    return await element.screenshot()


async def _resolve_spinner(
    page: Page,
    cnr: str,
    selectors: CaseStatusSelectors,
    markers: CaseStatusMarkers,
) -> tuple[Classification, str]:
    _scraper_event("classify", step="spinner_wait", cnr=cnr)
    try:
        await page.wait_for_selector(
            selectors.result_spinner, state="detached", timeout=config.SPINNER_TIMEOUT_MS
        )
    except PWTimeout as exc:
        raise AttemptError(
            ErrorCode.SPINNER_TIMEOUT, f"Timeout waiting for spinner: {exc}"
        ) from exc
    result_html = await page.inner_html(selectors.result_container)
    return classify_after_spinner(result_html, markers), result_html


async def run_attempt(
    page: Page,
    cnr: str,
    *,
    extractor: CaseStatusExtractor,
    selectors: CaseStatusSelectors = CASE_STATUS_SELECTORS,
    markers: CaseStatusMarkers = CASE_STATUS_MARKERS,
) -> ScrapeResult:
    """Drive one attempt on ``page``; raise :class:`AttemptError` to retry."""

    await page.route("**/*", block_heavy_resources)

    _scraper_event("nav", step="goto", cnr=cnr, url=config.PORTAL_URL)
    await page.goto(config.PORTAL_URL, wait_until="domcontentloaded", timeout=config.NAV_TIMEOUT_MS)

    await page.click(selectors.cnr_tab)
    await page.wait_for_selector(
        selectors.cnr_input, state="visible", timeout=config.FIELD_TIMEOUT_MS
    )
    await page.fill(selectors.cnr_input, cnr)

    image_bytes = await _capture_captcha(page, selectors)
    digits = await captcha.solve(image_bytes)
    _scraper_event("ocr", step="recognised", cnr=cnr, text=digits)
    if not captcha.is_acceptable(digits):
        raise AttemptError(ErrorCode.BAD_OCR, f"Bad OCR: {digits!r}")

    await page.fill(selectors.captcha_input, digits)
    await page.click(selectors.submit_button)

    await _wait_for_result(page, selectors)

    result_html = await page.inner_html(selectors.result_container)
    page_text = await page.inner_text("body")

    outcome = classify_result(page_text, result_html, markers)
    if outcome is Classification.SPINNER:
        outcome, result_html = await _resolve_spinner(page, cnr, selectors, markers)
    _scraper_event("classify", step="outcome", cnr=cnr, outcome=outcome.value)

    if outcome is Classification.NOT_FOUND:
        return ScrapeResult(cnr=cnr, html=result_html, record=None)
    if outcome is Classification.PARSED:
        return ScrapeResult(cnr=cnr, html=result_html, record=extractor.extract(result_html))
    if outcome is Classification.INVALID_CAPTCHA:
        raise AttemptError(ErrorCode.INVALID_CAPTCHA, "Invalid Captcha")
    if outcome is Classification.SPINNER_TIMEOUT:
        raise AttemptError(ErrorCode.SPINNER_TIMEOUT, "Spinner cleared without a result")
    raise AttemptError(ErrorCode.NO_DATA_FOUND, "No data found (Retry)")


def _error_code_for(exc: Exception) -> str:
    if isinstance(exc, AttemptError):
        return exc.error_code
    if isinstance(exc, PWTimeout):
        return ErrorCode.TIMEOUT
    if isinstance(exc, PWError):
        return ErrorCode.BROWSER_ERROR
    return ErrorCode.INTERNAL


async def _close_page(page: Optional[Page], cnr: str) -> None:
    if page is None:
        return
    try:
        await page.close()
    except Exception as exc:  # noqa: BLE001
        _scraper_event("error", phase="page_close", cnr=cnr, error=str(exc))


async def scrape_status(
    cnr: str,
    session: BrowserSession,
    *,
    max_attempts: Optional[int] = None,
    backoff: Optional[bool] = None,
    extractor: Optional[CaseStatusExtractor] = None,
    selectors: CaseStatusSelectors = CASE_STATUS_SELECTORS,
    markers: CaseStatusMarkers = CASE_STATUS_MARKERS,
) -> ScrapeResult:
    """Look up ``cnr`` until the portal returns a record or says there is none.

    Raises :class:`ScrapeFailedError` only when ``max_attempts`` (or the
    configured cap) is positive and has been used up.
    """

    cnr = cnr.strip()
    cap = config.MAX_ATTEMPTS if max_attempts is None else max_attempts
    use_backoff = config.RETRY_BACKOFF if backoff is None else backoff
    extractor = extractor or CaseStatusExtractor()

    attempt = 0
    while True:
        attempt += 1
        log_line(f"[SCRAPER] Attempt {attempt} for CNR: {cnr}")
        page: Optional[Page] = None
        try:
            page = await session.new_page()
            result = await run_attempt(
                page, cnr, extractor=extractor, selectors=selectors, markers=markers
            )
            _scraper_event(
                "state",
                phase="lookup",
                cnr=cnr,
                attempt=attempt,
                not_found=result.not_found,
            )
            return result
        except Exception as exc:  # noqa: BLE001
            error_code = _error_code_for(exc)
            _scraper_event(
                "retry",
                cnr=cnr,
                attempt=attempt,
                error_code=error_code,
                message=str(exc)[:200],
            )
        finally:
            await _close_page(page, cnr)

        if not decide_retry(attempt, cap, error_code=error_code):
            raise ScrapeFailedError(cnr, attempt, error_code)
        if use_backoff:
            await asyncio.sleep(compute_backoff_seconds(attempt))


__all__ = [
    "Classification",
    "block_heavy_resources",
    "classify_after_spinner",
    "classify_result",
    "has_results_table",
    "run_attempt",
    "scrape_status",
]
