from __future__ import annotations

from typing import Optional

from .error_codes import ErrorCode
from .logging_utils import _scraper_event

BACKOFF_CAP_SECONDS = 30

# Only labels the logged retry decision; every cause is retried until the cap.
# A CNR the portal does not know comes back as a "record not found" success,
# so no attempt-level cause is permanent.
RETRYABLE_ERROR_CODES = frozenset(
    {
        ErrorCode.ELEMENT_NOT_FOUND,
        ErrorCode.TIMEOUT,
        ErrorCode.BAD_OCR,
        ErrorCode.INVALID_CAPTCHA,
        ErrorCode.SPINNER_TIMEOUT,
        ErrorCode.NO_DATA_FOUND,
        ErrorCode.BROWSER_ERROR,
        ErrorCode.INTERNAL,
    }
)


def compute_backoff_seconds(attempt_index: int) -> float:
    """Return 1, 2, 4 ... seconds for attempts 1, 2, 3 ..., capped at 30."""

    return float(min(2 ** max(0, attempt_index - 1), BACKOFF_CAP_SECONDS))


def decide_retry(
    attempt_index: int,
    max_attempts: int,
    *,
    error_code: Optional[str] = None,
) -> bool:
    """Return ``True`` when another attempt should follow failed attempt ``attempt_index``.

    ``max_attempts`` of zero or less leaves the loop unbounded.
    """

    code = (error_code or "").strip() or None
    exhausted = 0 < max_attempts <= attempt_index
    if exhausted:
        kind = "capped"
    elif code in RETRYABLE_ERROR_CODES:
        kind = "retryable"
    else:
        kind = "unknown"

    _scraper_event(
        "state",
        phase="retry_decision",
        kind=kind,
        attempt=attempt_index,
        max_attempts=max_attempts,
        error_code=code,
        will_retry=not exhausted,
    )
    return not exhausted


__all__ = ["BACKOFF_CAP_SECONDS", "RETRYABLE_ERROR_CODES", "compute_backoff_seconds", "decide_retry"]
