from __future__ import annotations

from typing import Literal

from . import config
from .logging_utils import _scraper_event
from .utils import log_line

Entrypoint = Literal["api", "cli", "tests"]

_POSITIVE_TIMEOUTS = (
    "NAV_TIMEOUT_MS",
    "FIELD_TIMEOUT_MS",
    "CAPTCHA_LOAD_TIMEOUT_MS",
    "RESULT_TIMEOUT_MS",
    "SPINNER_TIMEOUT_MS",
)


def _fail(message: str, *, error: str, entrypoint: Entrypoint) -> None:
    _scraper_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def _clamp_concurrency(entrypoint: Entrypoint) -> None:
    if config.MAX_CONCURRENT_LOOKUPS >= 1:
        return
    _scraper_event(
        "state",
        phase="config",
        context="runtime_validation",
        kind="config_adjustment",
        field="MAX_CONCURRENT_LOOKUPS",
        value=config.MAX_CONCURRENT_LOOKUPS,
        adjusted=1,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] MAX_CONCURRENT_LOOKUPS={config.MAX_CONCURRENT_LOOKUPS}; using 1.")
    config.MAX_CONCURRENT_LOOKUPS = 1


def validate_runtime_config(entrypoint: Entrypoint) -> None:
    """Check the lookup settings before a batch starts.

    Raises ``ValueError`` on the first blocking problem. A concurrency below
    one is clamped to one and logged instead.
    """

    if not config.PORTAL_URL.startswith(("http://", "https://")):
        _fail("PORTAL_URL must be an http(s) URL.", error="portal_url_invalid", entrypoint=entrypoint)

    _clamp_concurrency(entrypoint)

    if config.MAX_ATTEMPTS < 0:
        _fail(
            "MAX_ATTEMPTS must be zero (unbounded) or positive.",
            error="max_attempts_invalid",
            entrypoint=entrypoint,
        )

    if min(config.DISPATCH_PACE_SECONDS, config.LOOKUP_TIMEOUT_SECONDS) < 0:
        _fail(
            "Dispatcher pacing and time-box must be non-negative.",
            error="dispatch_timing_invalid",
            entrypoint=entrypoint,
        )

    for name in _POSITIVE_TIMEOUTS:
        if getattr(config, name) <= 0:
            _fail(f"{name} must be greater than zero.", error="invalid_timeout", entrypoint=entrypoint)


__all__ = ["Entrypoint", "validate_runtime_config"]
