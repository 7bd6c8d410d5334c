from __future__ import annotations

import pytest

from cnrlookup.scraper import config, utils


@pytest.fixture(autouse=True, scope="session")
def _log_to_tmp(tmp_path_factory: pytest.TempPathFactory) -> None:
    log_dir = tmp_path_factory.mktemp("logs")
    config.LOG_DIR = log_dir
    config.LOG_FILE = log_dir / "latest.log"
    utils._configure_logger(config.LOG_FILE)
