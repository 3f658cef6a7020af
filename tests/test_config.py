from __future__ import annotations

import logging
from pathlib import Path

from birdlog import config
from birdlog.utils import logging as birdlog_logging


def test_data_dir_honours_the_environment_override(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv(config.DATA_DIR_ENV, str(tmp_path / "custom"))

    assert config.resolve_data_dir() == tmp_path / "custom"


def test_data_dir_defaults_to_the_application_data_location(monkeypatch, qapp) -> None:
    monkeypatch.delenv(config.DATA_DIR_ENV, raising=False)

    data_dir = config.resolve_data_dir()

    assert data_dir.name == config.DATA_DIR_NAME


def test_child_loggers_propagate_to_the_package_logger() -> None:
    child = birdlog_logging.get_logger("storage")

    assert child.name == "birdlog.storage"
    assert child.parent is logging.getLogger("birdlog")
    assert birdlog_logging.get_logger() is logging.getLogger("birdlog")


def test_log_level_override(monkeypatch) -> None:
    monkeypatch.setenv(birdlog_logging.LOG_LEVEL_ENV, "debug")
    assert birdlog_logging._level_from_env() == logging.DEBUG

    monkeypatch.setenv(birdlog_logging.LOG_LEVEL_ENV, "chatty")
    assert birdlog_logging._level_from_env() == logging.INFO
