import logging
from pathlib import Path

import pytest

from optiontrade.logging_config import HTTP_LOGGER, setup, setup_from_settings
from optiontrade.settings import Settings


def test_levels_reapplied_without_duplicate_handlers(tmp_path: Path):
    setup(log_dir=str(tmp_path), http_debug=False)
    n = len(logging.getLogger().handlers)
    assert logging.getLogger(HTTP_LOGGER).level == logging.INFO

    setup(log_dir=str(tmp_path), http_debug=True)
    assert len(logging.getLogger().handlers) == n
    assert logging.getLogger(HTTP_LOGGER).level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_setup_from_settings_uses_log_section(tmp_path: Path):
    s = Settings.model_validate({"log": {"dir": str(tmp_path), "http_debug": False}})
    setup_from_settings(s)
    assert logging.getLogger(HTTP_LOGGER).level == logging.INFO
    setup_from_settings(Settings.model_validate({"log": {"dir": str(tmp_path)}}))
    assert logging.getLogger(HTTP_LOGGER).level == logging.DEBUG


def test_unknown_console_level_is_rejected(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(logging.getLogger(), "_optiontrade_logging_installed", False, raising=False)
    with pytest.raises(ValueError, match="unknown log level"):
        setup(log_dir=str(tmp_path), console_level="loud")
