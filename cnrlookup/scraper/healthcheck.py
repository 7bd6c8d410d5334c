from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from . import captcha, config
from .config_validation import Entrypoint, validate_runtime_config
from .logging_utils import _scraper_event
from .session import get_session
from .utils import get_current_log_path, log_line

Check = dict[str, Any]


@dataclass
class HealthResult:
    ok: bool
    checks: dict[str, Check]


def _check_config(entrypoint: Entrypoint) -> Check:
    try:
        validate_runtime_config(entrypoint)
    except ValueError as exc:
        return {"ok": False, "error": str(exc)}
    return {
        "ok": True,
        "portal_url": config.PORTAL_URL,
        "log_file": str(get_current_log_path()),
    }


def _check_ocr() -> Check:
    try:
        engine = captcha.get_engine()
    except Exception as exc:  # noqa: BLE001
        return {"ok": False, "error": str(exc)}
    return {"ok": True, "tesseract_version": engine.version}


def _check_browser() -> Check:
    # Launching is left to the first lookup; only report what is running.
    return {
        "ok": True,
        "started": get_session().started,
        "packaged": config.is_constrained_host(),
    }


def run_health_checks(entrypoint: Entrypoint = "cli") -> HealthResult:
    probes: dict[str, Callable[[], Check]] = {
        "config": lambda: _check_config(entrypoint or "cli"),
        "ocr": _check_ocr,
        "browser": _check_browser,
    }
    checks = {name: probe() for name, probe in probes.items()}
    overall_ok = all(check["ok"] for check in checks.values())

    _scraper_event(
        "state" if overall_ok else "error",
        phase="health",
        context="healthcheck",
        ok=overall_ok,
        checks=checks,
    )
    return HealthResult(ok=overall_ok, checks=checks)


if __name__ == "__main__":  # pragma: no cover
    result = run_health_checks(entrypoint="cli")
    for name, info in result.checks.items():
        log_line(f"[HEALTH] {name}: {'OK' if info['ok'] else 'FAIL'} {info}")
    raise SystemExit(0 if result.ok else 1)
