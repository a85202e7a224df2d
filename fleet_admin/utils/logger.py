# fleet_admin/utils/logger.py
"""
Logging setup: console plus a rotating logs/fleet.log.
Every line carries the request id of the HTTP request it was emitted under
("-" outside a request); main.log_requests sets it per request.
"""

import logging
import os
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler

from fleet_admin.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(request_id)s | %(name)s | %(message)s"

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_configured = False


class RequestIdFilter(logging.Filter):
    """Stamps each record with the current request id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True
    os.makedirs(LOG_DIR, exist_ok=True)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    request_ids = RequestIdFilter()

    console = logging.StreamHandler()
    file_handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, "fleet.log"),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for handler in (console, file_handler):
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(fmt)
        handler.addFilter(request_ids)
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Named logger; the root handlers are configured on first use."""
    _configure_root_logger()
    return logging.getLogger(name)
