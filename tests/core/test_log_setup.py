"""Tests for logging configuration."""

import logging
import logging.handlers
from pathlib import Path
from unittest.mock import patch

import pytest

from itglue_tools.core.log_setup import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console(self) -> None:
        handler = setup_logging("debug")
        assert isinstance(handler, logging.StreamHandler)
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger().handlers == [handler]

    def test_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "itglue.log"
        setup_logging(logging.INFO, "file", str(log_file))

        logging.getLogger("itglue_tools.test").info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "hello file" in log_file.read_text(encoding="utf-8")

    def test_file_requires_path(self) -> None:
        with pytest.raises(ValueError):
            setup_logging(destination="file")

    def test_eventlog_uses_syslog_off_windows(self) -> None:
        with patch("itglue_tools.core.log_setup.sys.platform", "linux"), patch(
            "itglue_tools.core.log_setup.os.path.exists", return_value=False
        ), patch(
            "itglue_tools.core.log_setup.logging.handlers.SysLogHandler"
        ) as mock_syslog:
            mock_syslog.return_value = logging.NullHandler()
            setup_logging(destination="eventlog")

        mock_syslog.assert_called_once_with()

    def test_eventlog_prefers_local_socket(self) -> None:
        with patch("itglue_tools.core.log_setup.sys.platform", "linux"), patch(
            "itglue_tools.core.log_setup.os.path.exists",
            side_effect=lambda path: path == "/dev/log",
        ), patch(
            "itglue_tools.core.log_setup.logging.handlers.SysLogHandler"
        ) as mock_syslog:
            mock_syslog.return_value = logging.NullHandler()
            setup_logging(destination="eventlog")

        mock_syslog.assert_called_once_with(address="/dev/log")

    def test_unknown_destination(self) -> None:
        with pytest.raises(ValueError):
            setup_logging(destination="carrier-pigeon")

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            setup_logging("chatty")
