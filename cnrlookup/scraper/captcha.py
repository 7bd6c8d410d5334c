"""Digit CAPTCHA recognition: Pillow clean-up followed by Tesseract OCR."""
from __future__ import annotations

import asyncio
import re
import threading
from io import BytesIO
from typing import Optional

import pytesseract
from PIL import Image, ImageFilter

from . import config
from .logging_utils import _scraper_event

_NON_DIGITS = re.compile(r"\D+")


def preprocess(image_bytes: bytes) -> Image.Image:
    """Scale to the target height, binarise and despeckle a captcha image."""

    with Image.open(BytesIO(image_bytes)) as img:
        img.load()
        height = config.CAPTCHA_TARGET_HEIGHT
        width = max(1, round(img.width * height / img.height))
        resized = img.convert("RGB").resize((width, height), Image.LANCZOS)

    gray = resized.convert("L")
    cutoff = config.CAPTCHA_THRESHOLD
    binary = gray.point(lambda p: 255 if p >= cutoff else 0)
    return binary.filter(ImageFilter.MedianFilter(size=3))


def digits_only(text: Optional[str]) -> str:
    return _NON_DIGITS.sub("", text or "").strip()


def is_acceptable(digits: Optional[str]) -> bool:
    """Return ``True`` when a recognised string is long enough to submit."""

    return bool(digits) and len(digits) >= config.CAPTCHA_MIN_DIGITS


class DigitOcrEngine:
    """Tesseract configured to recognise nothing but the digits 0-9."""

    def __init__(self, tesseract_cmd: Optional[str] = None, ocr_config: Optional[str] = None) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.ocr_config = ocr_config or config.TESSERACT_CONFIG
        # Fails fast when the tesseract binary is missing.
        self.version = str(pytesseract.get_tesseract_version())

    def recognize(self, image: Image.Image) -> str:
        return pytesseract.image_to_string(image, config=self.ocr_config)


_ENGINE: Optional[DigitOcrEngine] = None
_ENGINE_LOCK = threading.Lock()


def get_engine() -> DigitOcrEngine:
    """Return the process-wide OCR engine, creating it on first use."""

    global _ENGINE
    if _ENGINE is not None:
        return _ENGINE
    with _ENGINE_LOCK:
        if _ENGINE is None:
            _ENGINE = DigitOcrEngine(tesseract_cmd=config.TESSERACT_CMD)
            _scraper_event("ocr", step="engine_ready", version=_ENGINE.version)
    return _ENGINE


def solve_sync(image_bytes: bytes) -> Optional[str]:
    """Return the digits read from ``image_bytes`` or ``None`` on any failure."""

    try:
        engine = get_engine()
        image = preprocess(image_bytes)
        text = engine.recognize(image)
    except Exception as exc:  # noqa: BLE001
        _scraper_event(
            "error",
            phase="ocr",
            error=type(exc).__name__,
            message=str(exc),
        )
        return None
    return digits_only(text)


async def solve(image_bytes: bytes) -> Optional[str]:
    """Async wrapper; Tesseract runs in a worker thread."""

    return await asyncio.to_thread(solve_sync, image_bytes)


__all__ = [
    "DigitOcrEngine",
    "digits_only",
    "get_engine",
    "is_acceptable",
    "preprocess",
    "solve",
    "solve_sync",
]
