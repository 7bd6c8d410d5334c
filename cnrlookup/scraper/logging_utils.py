"""Structured ``[SCRAPER][LABEL] key=value`` lines on the shared logger."""
from __future__ import annotations

from typing import Any, Mapping

from .utils import log_line


def _render(fields: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}={value!r}" for key, value in sorted(fields.items()))


def _scraper_event(label: str = "", *, phase: str | None = None, **fields: Any) -> None:
    """Log one scraper event.

    ``phase`` stands in for the label when no label is given; with both, it is
    kept as an ordinary field. Logging failures are dropped so a full disk or
    an odd ``repr`` cannot abort a lookup.
    """

    if phase and label:
        fields.setdefault("phase", phase)
    tag = (label or phase or "").upper()
    try:
        log_line(f"[SCRAPER][{tag}] {_render(fields)}")
    except Exception:  # noqa: BLE001
        return


__all__ = ["_scraper_event"]
