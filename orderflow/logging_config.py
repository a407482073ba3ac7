"""
Logging setup for the order workflow engine.

Records are tagged with the fields bound in the current log context: the
request id set by the HTTP middleware, and the order and department of the
transition being applied. Reaction rules run on the publishing thread, so a
line written by a reaction names the order it reacts to and still carries
the request id of the call that started the chain.

Usage:
    from orderflow.logging_config import bind_log_context, get_logger
    logger = get_logger(__name__)

    with bind_log_context(artifact_id=order.id, department="admin"):
        logger.info("Transition applied")
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping

CONTEXT_FIELDS = ("request_id", "artifact_id", "department")

_log_context: ContextVar[Mapping[str, str]] = ContextVar("log_context", default=MappingProxyType({}))

# Attributes every LogRecord has; anything else came in through extra= or the context
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

_DEV_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s order=%(artifact_id)s dept=%(department)s %(message)s"


def current_log_context() -> Dict[str, str]:
    return dict(_log_context.get())


@contextmanager
def bind_log_context(**fields: Any) -> Iterator[None]:
    """Add fields to the log context for the duration of the block; None values are skipped."""
    bound = {key: str(value) for key, value in fields.items() if value is not None}
    token = _log_context.set(MappingProxyType({**_log_context.get(), **bound}))
    try:
        yield
    finally:
        _log_context.reset(token)


class LogContextFilter(logging.Filter):
    """Copy the bound context onto each record; explicit extra= values win."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _log_context.get()
        for name in CONTEXT_FIELDS:
            if getattr(record, name, None) is None:
                setattr(record, name, context.get(name, "-"))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or value is None or value == "-":
                continue
            entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Replace the root handlers with one stderr handler.

    Production writes JSON lines; any other environment a readable line with
    the request, order and department ids. debug forces DEBUG level.
    """
    level = logging.DEBUG if debug else logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(LogContextFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_DEV_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
