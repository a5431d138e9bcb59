"""Logging configuration for the itglue command line tool.

Log records go to one destination: the console, a file, or the system
event log (Windows Event Log, syslog elsewhere).
"""

import logging
import logging.handlers
import os
import sys

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
EVENT_LOG_FORMAT = "%(name)s: %(levelname)s %(message)s"
EVENT_LOG_APPNAME = "itglue-tools"
# Local syslog sockets, tried in order before falling back to UDP localhost:514
SYSLOG_SOCKETS = ("/dev/log", "/var/run/syslog")

DESTINATIONS = ("console", "file", "eventlog")


def setup_logging(
    level: int | str = logging.WARNING,
    destination: str = "console",
    log_file: str | None = None,
) -> logging.Handler:
    """Configure the root logger for the application.

    Args:
        level: Minimum logging level (name or number)
        destination: One of 'console', 'file', 'eventlog'
        log_file: Path to the log file (required for 'file')

    Returns:
        The handler that was installed

    Raises:
        ValueError: If the destination is unknown or log_file is missing
    """
    if isinstance(level, str):
        level_name = level.upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level_name}")

    handler = _build_handler(destination, log_file)
    handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        "Logging configured (destination=%s, level=%s)",
        destination,
        logging.getLevelName(level),
    )
    return handler


def _build_handler(destination: str, log_file: str | None) -> logging.Handler:
    """Create the handler for a destination."""
    if destination == "console":
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        return handler

    if destination == "file":
        if not log_file:
            raise ValueError("log_file is required when logging to a file")
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        return handler

    if destination == "eventlog":
        if sys.platform == "win32":
            # Requires pywin32
            handler = logging.handlers.NTEventLogHandler(EVENT_LOG_APPNAME)
        else:
            handler = _syslog_handler()
        handler.setFormatter(logging.Formatter(EVENT_LOG_FORMAT))
        return handler

    raise ValueError(f"Unknown log destination '{destination}'. Choose from {DESTINATIONS}")


def _syslog_handler() -> logging.Handler:
    for address in SYSLOG_SOCKETS:
        if os.path.exists(address):
            return logging.handlers.SysLogHandler(address=address)
    return logging.handlers.SysLogHandler()
