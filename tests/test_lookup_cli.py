from __future__ import annotations

import json
from pathlib import Path

import pytest

from cnrlookup.scraper import config, lookup_cli


class FakeBrowserSession:
    instances: list["FakeBrowserSession"] = []

    def __init__(self) -> None:
        self.started = True
        self.closed = False
        FakeBrowserSession.instances.append(self)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def batch_calls(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    calls: list[dict] = []

    async def _lookup_batch(cnrs, **kwargs):
        calls.append({"cnrs": list(cnrs), **kwargs})
        return [
            {"cnr": cnr, "success": not cnr.startswith("BAD"), "data": {}}
            for cnr in cnrs
        ]

    FakeBrowserSession.instances = []
    monkeypatch.setattr(lookup_cli, "lookup_batch", _lookup_batch)
    monkeypatch.setattr(lookup_cli, "BrowserSession", FakeBrowserSession)
    return calls


def test_cli_prints_results(batch_calls: list[dict], capsys: pytest.CaptureFixture) -> None:
    exit_code = lookup_cli.main(["HCMA01", "HCMA02", "--concurrency", "3", "--no-html"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [item["cnr"] for item in payload["results"]] == ["HCMA01", "HCMA02"]

    call = batch_calls[0]
    assert call["concurrency"] == 3
    assert call["include_html"] is False
    assert call["pace_seconds"] is None
    assert call["session"] is FakeBrowserSession.instances[0]
    assert FakeBrowserSession.instances[0].closed is True


def test_cli_reads_file(
    batch_calls: list[dict], tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    cnr_file = tmp_path / "cnrs.txt"
    cnr_file.write_text("HCMA03\n\n  HCMA04  \n", encoding="utf-8")

    exit_code = lookup_cli.main(["HCMA01", "--file", str(cnr_file), "--timeout", "30"])

    assert exit_code == 0
    assert batch_calls[0]["cnrs"] == ["HCMA01", "HCMA03", "HCMA04"]
    assert batch_calls[0]["timeout_seconds"] == 30.0


def test_cli_exit_code_reflects_failures(
    batch_calls: list[dict], capsys: pytest.CaptureFixture
) -> None:
    assert lookup_cli.main(["HCMA01", "BAD01"]) == 1


def test_cli_requires_a_cnr(batch_calls: list[dict], capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as excinfo:
        lookup_cli.main([])

    assert excinfo.value.code == 2
    assert "Provide at least one CNR" in capsys.readouterr().err
    assert batch_calls == []


def test_cli_rejects_invalid_config(
    batch_calls: list[dict], monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    monkeypatch.setattr(config, "LOOKUP_TIMEOUT_SECONDS", -5.0)

    with pytest.raises(SystemExit) as excinfo:
        lookup_cli.main(["HCMA01"])

    assert excinfo.value.code == 2
    assert "non-negative" in capsys.readouterr().err
