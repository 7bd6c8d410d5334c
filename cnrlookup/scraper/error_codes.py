from __future__ import annotations

"""Error code taxonomy for failed lookup attempts.

Every attempt that does not end in a success record is tagged with one of
these codes. They appear in the structured scraper log and, when an attempt
cap is configured, in the terminal failure handed back to the caller.
"""


class ErrorCode:
    ELEMENT_NOT_FOUND = "element_not_found"
    TIMEOUT = "timeout"
    BAD_OCR = "bad_ocr"
    INVALID_CAPTCHA = "invalid_captcha"
    SPINNER_TIMEOUT = "spinner_timeout"
    NO_DATA_FOUND = "no_data_found"
    BROWSER_ERROR = "browser_error"
    INTERNAL = "internal_error"


class AttemptError(Exception):
    """Raised inside a single attempt; the orchestrator always retries it."""

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class ScrapeFailedError(Exception):
    """Raised when a configured attempt cap is exhausted for one CNR."""

    def __init__(self, cnr: str, attempts: int, last_error_code: str | None) -> None:
        super().__init__(
            f"Gave up on {cnr} after {attempts} attempts (last: {last_error_code or 'unknown'})"
        )
        self.error_code = last_error_code or ErrorCode.INTERNAL
        self.cnr = cnr
        self.attempts = attempts


__all__ = ["ErrorCode", "AttemptError", "ScrapeFailedError"]
