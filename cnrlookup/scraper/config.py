"""Configuration constants for the CNR case-status lookup service."""
from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("CNRLOOKUP_DATA_DIR", "data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"

PORTAL_URL: str = os.getenv(
    "CNRLOOKUP_PORTAL_URL", "https://hcmadras.tn.gov.in/case_status_mas.php"
)

USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)


def _parse_int(env_var: str, default: int, *, minimum: int | None = None) -> int:
    """Parse an integer from the environment, falling back to ``default``."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    if minimum is not None:
        return max(minimum, value)
    return value


def _parse_float(env_var: str, default: float) -> float:
    try:
        return float(os.getenv(env_var, str(default)))
    except ValueError:
        return default


def _parse_flag(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off", ""}


# Browser launch. Constrained hosts (serverless) ship their own Chromium build.
BROWSER_HEADLESS: bool = _parse_flag("CNRLOOKUP_HEADLESS", True)
BROWSER_CHANNEL: str | None = os.getenv("CNRLOOKUP_BROWSER_CHANNEL") or None
BROWSER_EXECUTABLE: str | None = os.getenv("CNRLOOKUP_BROWSER_EXECUTABLE") or None
LOCAL_BROWSER_ARGS: list[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]
BLOCKED_RESOURCE_TYPES: frozenset[str] = frozenset({"font", "stylesheet", "media"})


def is_constrained_host() -> bool:
    """Return ``True`` when running on a serverless host or with a packaged binary."""

    return bool(
        os.getenv("VERCEL")
        or os.getenv("AWS_LAMBDA_FUNCTION_NAME")
        or BROWSER_EXECUTABLE
    )


# Playwright timeouts (milliseconds, matching the Playwright API).
NAV_TIMEOUT_MS: int = _parse_int("CNRLOOKUP_NAV_TIMEOUT_MS", 300_000)
FIELD_TIMEOUT_MS: int = _parse_int("CNRLOOKUP_FIELD_TIMEOUT_MS", 5_000)
CAPTCHA_LOAD_TIMEOUT_MS: int = _parse_int("CNRLOOKUP_CAPTCHA_LOAD_TIMEOUT_MS", 5_000)
CAPTCHA_SETTLE_MS: int = _parse_int("CNRLOOKUP_CAPTCHA_SETTLE_MS", 200)
RESULT_TIMEOUT_MS: int = _parse_int("CNRLOOKUP_RESULT_TIMEOUT_MS", 5_000)
RESULT_FALLBACK_MS: int = _parse_int("CNRLOOKUP_RESULT_FALLBACK_MS", 2_000)
RESULT_CONTAINER_TIMEOUT_MS: int = _parse_int("CNRLOOKUP_RESULT_CONTAINER_TIMEOUT_MS", 2_000)
SPINNER_TIMEOUT_MS: int = _parse_int("CNRLOOKUP_SPINNER_TIMEOUT_MS", 300_000)

# CAPTCHA pipeline
CAPTCHA_TARGET_HEIGHT: int = _parse_int("CNRLOOKUP_CAPTCHA_HEIGHT", 100, minimum=1)
CAPTCHA_THRESHOLD: int = _parse_int("CNRLOOKUP_CAPTCHA_THRESHOLD", 128)
CAPTCHA_MIN_DIGITS: int = 4
TESSERACT_CMD: str | None = os.getenv("CNRLOOKUP_TESSERACT_CMD") or None
TESSERACT_CONFIG: str = os.getenv(
    "CNRLOOKUP_TESSERACT_CONFIG", "--psm 7 -c tessedit_char_whitelist=0123456789"
)

# Retry policy. 0 attempts means retry until success or an outer time-box.
MAX_ATTEMPTS: int = _parse_int("CNRLOOKUP_MAX_ATTEMPTS", 0)
RETRY_BACKOFF: bool = _parse_flag("CNRLOOKUP_RETRY_BACKOFF", False)

# Dispatcher
MAX_CONCURRENT_LOOKUPS: int = _parse_int("CNRLOOKUP_MAX_CONCURRENT", 2)
DISPATCH_PACE_SECONDS: float = _parse_float("CNRLOOKUP_DISPATCH_PACE_SECONDS", 1.0)
LOOKUP_TIMEOUT_SECONDS: float = _parse_float("CNRLOOKUP_LOOKUP_TIMEOUT_SECONDS", 500.0)
