import logging
import logging.handlers
import sys
from pathlib import Path

import pytest

from extrinsic_cal import LOG_FILE_PATH
from extrinsic_cal.logger import setup_logging
from extrinsic_cal.settings import Settings, save_settings


@pytest.fixture
def bare_root_logger(monkeypatch):
    """Root logger with no handlers, restored after the test."""
    root = logging.getLogger()
    original_level = root.level
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    yield root
    for handler in root.handlers:
        handler.close()
    root.setLevel(original_level)


def test_settings_file_controls_logging(tmp_path: Path, bare_root_logger):
    settings_path = tmp_path / "settings.toml"
    log_dir = tmp_path / "logs"
    save_settings(Settings(log_level="WARNING", log_dir=log_dir), settings_path)

    setup_logging(settings_path=settings_path)

    assert bare_root_logger.level == logging.WARNING
    assert (log_dir / LOG_FILE_PATH.name).exists()
    assert all(handler.level == logging.WARNING for handler in bare_root_logger.handlers)


def test_explicit_settings_win_over_file(tmp_path: Path, bare_root_logger):
    settings_path = tmp_path / "settings.toml"
    save_settings(Settings(log_level="ERROR", log_to_file=False), settings_path)

    setup_logging(Settings(log_level="DEBUG", log_to_file=False), settings_path=settings_path)

    assert bare_root_logger.level == logging.DEBUG
    assert not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in bare_root_logger.handlers)


def test_missing_settings_file_uses_defaults(tmp_path: Path, bare_root_logger, monkeypatch):
    monkeypatch.setattr("extrinsic_cal.settings.LOG_DIR", tmp_path / "default_logs")

    setup_logging(settings_path=tmp_path / "absent.toml")

    assert bare_root_logger.level == logging.INFO
