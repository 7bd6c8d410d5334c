"""Batch CNR lookups with bounded concurrency, pacing and a per-CNR time-box."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from . import config
from .error_codes import ScrapeFailedError
from .logging_utils import _scraper_event
from .run import scrape_status
from .session import BrowserSession, acquire_session
from .utils import log_line

LookupResult = Dict[str, Any]


def _failure(cnr: str, message: str) -> LookupResult:
    return {"cnr": cnr, "success": False, "error": message}


async def lookup_one(
    cnr: str,
    session: BrowserSession,
    *,
    timeout_seconds: Optional[float] = None,
    include_html: bool = True,
) -> LookupResult:
    """Scrape one CNR and fold every outcome into the batch result shape."""

    limit = config.LOOKUP_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
    try:
        result = await asyncio.wait_for(scrape_status(cnr, session), timeout=limit or None)
    except asyncio.TimeoutError:
        _scraper_event("error", phase="lookup", cnr=cnr, error="time_box_expired", timeout=limit)
        return _failure(cnr, f"Lookup timed out after {limit:g}s")
    except ScrapeFailedError as exc:
        _scraper_event(
            "error",
            phase="lookup",
            cnr=cnr,
            error="attempts_exhausted",
            error_code=exc.error_code,
            attempts=exc.attempts,
        )
        return _failure(cnr, str(exc))
    except Exception as exc:  # noqa: BLE001
        _scraper_event("error", phase="lookup", cnr=cnr, error="unexpected", message=str(exc))
        return _failure(cnr, str(exc) or type(exc).__name__)

    payload: LookupResult = {"cnr": cnr, "success": True, "data": result.data()}
    if include_html:
        payload["html"] = result.html
    return payload


async def lookup_batch(
    cnrs: Sequence[str],
    *,
    session: Optional[BrowserSession] = None,
    concurrency: Optional[int] = None,
    pace_seconds: Optional[float] = None,
    timeout_seconds: Optional[float] = None,
    include_html: bool = True,
) -> List[LookupResult]:
    """Look up every CNR and return results in input order."""

    cleaned = [str(cnr).strip() for cnr in cnrs]
    max_workers = max(1, config.MAX_CONCURRENT_LOOKUPS if concurrency is None else concurrency)
    pace = config.DISPATCH_PACE_SECONDS if pace_seconds is None else pace_seconds

    try:
        if session is None:
            session = await acquire_session()
        else:
            await session.context()
    except Exception as exc:  # noqa: BLE001
        log_line(f"[DISPATCH] Browser session unavailable: {exc}")
        _scraper_event("error", phase="dispatch", error="session_unavailable", message=str(exc))
        return [_failure(cnr, str(exc) or type(exc).__name__) for cnr in cleaned]

    log_line(f"[DISPATCH] Looking up {len(cleaned)} CNR(s) with concurrency={max_workers}")
    semaphore = asyncio.Semaphore(max_workers)

    async def _run(cnr: str) -> LookupResult:
        try:
            return await lookup_one(
                cnr, session, timeout_seconds=timeout_seconds, include_html=include_html
            )
        finally:
            semaphore.release()

    tasks: List[asyncio.Task[LookupResult]] = []
    try:
        for index, cnr in enumerate(cleaned):
            if index and pace > 0:
                await asyncio.sleep(pace)
            await semaphore.acquire()
            tasks.append(asyncio.create_task(_run(cnr)))
        results = list(await asyncio.gather(*tasks))
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    succeeded = sum(1 for item in results if item["success"])
    _scraper_event(
        "state",
        phase="dispatch",
        kind="summary",
        total=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
    )
    return results


__all__ = ["lookup_batch", "lookup_one", "LookupResult"]
