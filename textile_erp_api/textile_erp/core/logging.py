"""
Process-wide logging setup.

Every record carries the request correlation id and the company id of the
request being served, both taken from context variables set by the HTTP
middleware; outside a request they render as '-'.
"""

from __future__ import annotations

import logging
import logging.config
from contextvars import ContextVar
from typing import Optional, Union

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
tenant_id_var: ContextVar[Optional[str]] = ContextVar("tenant_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [cid=%(correlation_id)s company=%(tenant_id)s] %(message)s"

# Libraries that are too chatty at INFO.
QUIET_LOGGERS = ("sqlalchemy.engine", "passlib", "multipart")


class LoggingContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "-"
        record.tenant_id = tenant_id_var.get() or "-"
        return True


def _level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Replace root handlers with one stdout handler using LOG_FORMAT."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"context": {"()": LoggingContextFilter}},
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "default",
                    "filters": ["context"],
                }
            },
            "root": {"level": _level(level), "handlers": ["stdout"]},
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        }
    )
