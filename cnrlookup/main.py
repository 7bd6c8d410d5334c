from __future__ import annotations

import os

from flask import Flask, Response, jsonify, request

from cnrlookup.scraper.background_loop import get_background_loop
from cnrlookup.scraper.config_validation import validate_runtime_config
from cnrlookup.scraper.dispatcher import lookup_batch
from cnrlookup.scraper.healthcheck import run_health_checks
from cnrlookup.scraper.logging_utils import _scraper_event

app = Flask(__name__)
app.json.sort_keys = False


def _parse_cnrs(payload: object) -> list[str] | None:
    """Return the non-blank CNRs from a request body, or ``None`` if malformed."""

    if not isinstance(payload, dict):
        return None
    cnrs = payload.get("cnrs")
    if not isinstance(cnrs, list) or not cnrs:
        return None
    if not all(isinstance(cnr, str) for cnr in cnrs):
        return None
    cleaned = [cnr.strip() for cnr in cnrs if cnr.strip()]
    return cleaned or None


@app.post("/api/scrape")
def api_scrape() -> Response:
    """Look up every CNR in the JSON body and return one result per CNR."""

    cnrs = _parse_cnrs(request.get_json(silent=True))
    if cnrs is None:
        _scraper_event(
            "error",
            phase="api",
            context="scrape",
            error="invalid_params",
            remote_addr=request.remote_addr,
        )
        return jsonify({"error": "CNRs must be an array"}), 400

    try:
        validate_runtime_config("api")
    except ValueError as exc:
        return jsonify({"error": "config_invalid", "details": str(exc)}), 500

    _scraper_event("state", phase="api", context="scrape", count=len(cnrs))

    try:
        results = get_background_loop().run(lookup_batch(cnrs))
    except Exception as exc:  # noqa: BLE001
        _scraper_event("error", phase="api", context="scrape", error="scrape_failed", message=str(exc))
        return jsonify({"error": str(exc) or "An unexpected error occurred"}), 500

    return jsonify({"results": results})


@app.get("/api/health")
def api_health() -> Response:
    """Return a JSON health summary for configuration and the OCR engine."""

    result = run_health_checks(entrypoint="api")
    status = 200 if result.ok else 503
    return jsonify({"ok": result.ok, "checks": result.checks}), status


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 8080)))
