from __future__ import annotations

from types import SimpleNamespace

import pytest

from cnrlookup import main
from cnrlookup.scraper import config, healthcheck


def _engine_ok() -> SimpleNamespace:
    return SimpleNamespace(version="5.3.4")


def _engine_missing() -> SimpleNamespace:
    raise RuntimeError("tesseract is not installed or it's not in your PATH")


def test_run_health_checks_happy_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(healthcheck.captcha, "get_engine", _engine_ok)

    result = healthcheck.run_health_checks(entrypoint="tests")

    assert result.ok is True
    assert result.checks["config"]["ok"] is True
    assert result.checks["ocr"]["tesseract_version"] == "5.3.4"
    assert result.checks["browser"]["ok"] is True


def test_run_health_checks_handles_invalid_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(healthcheck.captcha, "get_engine", _engine_ok)
    monkeypatch.setattr(config, "MAX_ATTEMPTS", -1)

    result = healthcheck.run_health_checks(entrypoint="cli")

    assert result.ok is False
    assert result.checks["config"]["ok"] is False
    assert "MAX_ATTEMPTS" in result.checks["config"]["error"]


def test_run_health_checks_reports_missing_ocr(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(healthcheck.captcha, "get_engine", _engine_missing)

    result = healthcheck.run_health_checks(entrypoint="tests")

    assert result.ok is False
    assert result.checks["ocr"]["ok"] is False
    assert "tesseract" in result.checks["ocr"]["error"]


def test_health_api_reports_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(healthcheck.captcha, "get_engine", _engine_ok)
    client = main.app.test_client()

    resp = client.get("/api/health")
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["ok"] is True
    assert set(payload["checks"]) == {"config", "ocr", "browser"}

    monkeypatch.setattr(healthcheck.captcha, "get_engine", _engine_missing)

    resp_unhealthy = client.get("/api/health")
    assert resp_unhealthy.status_code == 503
    assert resp_unhealthy.get_json()["checks"]["ocr"]["ok"] is False
