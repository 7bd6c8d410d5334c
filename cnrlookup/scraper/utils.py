from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Optional

from . import config

LOGGER = logging.getLogger("cnrlookup")
_LOG_PATH: Optional[Path] = None

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _handlers_for(log_path: Path) -> list[logging.Handler]:
    formatter = logging.Formatter("[%(asctime)s] %(message)s", "%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _configure_logger(log_path: Path) -> None:
    """Send the ``cnrlookup`` logger to stdout and ``log_path``, replacing old handlers."""

    global _LOG_PATH

    log_path.parent.mkdir(parents=True, exist_ok=True)
    while LOGGER.handlers:
        LOGGER.handlers.pop().close()
    for handler in _handlers_for(log_path):
        LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.INFO)
    LOGGER.propagate = False
    _LOG_PATH = log_path


def get_current_log_path() -> Path:
    if _LOG_PATH is None:
        _configure_logger(config.LOG_FILE)
    return _LOG_PATH


def log_line(message: str) -> None:
    """Write one timestamped line; the logger is set up on first use."""

    if _LOG_PATH is None:
        _configure_logger(config.LOG_FILE)
    LOGGER.info(message)


def clean_text(text: str | None) -> str:
    """Collapse whitespace runs to a single space and trim the ends."""

    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def normalize_key(text: str | None) -> str:
    """
    Turn a table header into a dictionary key.

    ``"Case No."`` and ``"case no"`` both become ``"case_no"``; applying the
    function to its own output returns it unchanged.
    """
    if not text:
        return ""
    return _NON_ALNUM.sub("_", text.lower()).strip("_")
