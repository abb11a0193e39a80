"""Configure logging for ldapkeys.

Standard output carries the public keys, so all log messages go to a file.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

import structlog
from safir.logging import LogLevel, add_log_severity

from .constants import FALLBACK_LOG_PATH

__all__ = ["setup_file_logging"]


def _can_append(path: Path) -> bool:
    """Check whether a log file can be opened for appending."""
    try:
        with path.open("a"):
            pass
    except OSError:
        return False
    return True


def setup_file_logging(
    log_file: Path | None,
    log_level: LogLevel = LogLevel.INFO,
    *,
    name: str = "ldapkeys",
) -> Path | None:
    """Set up structlog logging to a file.

    Each message is written as a single JSON line with a timestamp and
    severity.

    Parameters
    ----------
    log_file
        Log file to append to.  If it is `None` or cannot be opened,
        `~ldapkeys.constants.FALLBACK_LOG_PATH` is used instead.
    log_level
        Minimum severity of messages to log.
    name
        Name of the logger to configure.

    Returns
    -------
    Path or None
        The log file in use, or `None` if neither the configured nor the
        fallback file could be opened.  In that case messages are discarded
        so that key lookups still work.
    """
    path: Path | None = None
    for candidate in (log_file, Path(FALLBACK_LOG_PATH)):
        if candidate and _can_append(candidate):
            path = candidate
            break

    remove_meta = structlog.stdlib.ProcessorFormatter.remove_processors_meta
    if path:
        handler = {
            "level": log_level.value,
            "class": "logging.FileHandler",
            "filename": str(path),
            "encoding": "utf-8",
            "formatter": "json",
        }
    else:
        handler = {"class": "logging.NullHandler"}
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [
                        remove_meta,
                        structlog.processors.JSONRenderer(),
                    ],
                    "foreign_pre_chain": [
                        structlog.processors.TimeStamper(fmt="iso"),
                        add_log_severity,
                    ],
                },
            },
            "handlers": {"ldapkeys": handler},
            "loggers": {
                name: {
                    "handlers": ["ldapkeys"],
                    "level": log_level.value,
                    "propagate": False,
                },
            },
        }
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            add_log_severity,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return path
