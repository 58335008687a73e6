"""Logging for the gateway.

One stdout handler on the root logger, formatted as text or JSON according to
LOG_FORMAT. Structured context is attached with
``extra={"extra_fields": {...}}`` and rendered by both formatters. Uvicorn's
loggers are routed through the same handler so server and application lines
share one format.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from src.utils.config import get_settings

# Third-party loggers that log every upstream request at INFO/DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore")

_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "extra_fields", None) or {}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, tagged with the application identity."""

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string with log data
        """
        settings = get_settings()

        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "app_name": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
        }

        if record.levelno >= logging.WARNING:
            log_data["location"] = f"{record.module}:{record.lineno}"

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_extra_fields(record))

        # Upstream errors and keys are not always JSON-native
        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Plain text for local development; extra fields follow as key=value."""

    def __init__(self) -> None:
        super().__init__(
            fmt="[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        suffix = " ".join(f"{key}={value}" for key, value in fields.items())
        # Keep a traceback, if any, below the fields
        head, sep, tail = line.partition("\n")
        return f"{head} | {suffix}{sep}{tail}"


_logging_configured = False


def _is_console_handler(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.StreamHandler) and handler.stream == sys.stdout


def setup_logging(use_json: bool | None = None, force_reconfigure: bool = False) -> None:
    """
    Configure application logging.

    Installs a single stdout handler on the root logger using LOG_LEVEL and
    LOG_FORMAT from settings, quiets per-request client logs and makes the
    uvicorn loggers propagate to root. Calling it again is a no-op unless
    force_reconfigure is set.

    Args:
        use_json: Override LOG_FORMAT. None means use the configured format.
        force_reconfigure: Reconfigure even if logging is already set up.
    """
    global _logging_configured

    if _logging_configured and not force_reconfigure:
        return

    settings = get_settings()
    if use_json is None:
        use_json = settings.LOG_FORMAT == "json"
    log_level = getattr(logging, settings.LOG_LEVEL)

    root_logger = logging.getLogger()
    # pytest's caplog handler must survive
    for handler in list(root_logger.handlers):
        if _is_console_handler(handler):
            root_logger.removeHandler(handler)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(JsonFormatter() if use_json else StandardFormatter())
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    _logging_configured = True

    logging.getLogger(__name__).debug(
        f"Logging configured: level={settings.LOG_LEVEL}, "
        f"format={'json' if use_json else 'standard'}"
    )


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, configuring logging on first use."""
    if not _logging_configured:
        setup_logging()

    return logging.getLogger(name)


def reset_logging() -> None:
    """Clear root handlers and mark logging as unconfigured. Used by tests."""
    global _logging_configured

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.WARNING)

    _logging_configured = False
