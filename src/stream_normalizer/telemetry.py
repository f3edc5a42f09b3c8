"""Structured (JSON) logging for scripts and library events."""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from stream_normalizer.config import LOG_LEVEL

LOGGER_NAME = "stream_normalizer"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _RECORD_ATTRS
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Attach a single JSON stderr handler to the package logger.

    ``level`` defaults to ``UNORM_LOG_LEVEL``. Calling again only updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level if level is not None else LOG_LEVEL)
    if not any(isinstance(h.formatter, JsonFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
    return logger


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    logger.info(event, extra={"event": event, **fields})


@contextmanager
def timed_event(logger: logging.Logger, event: str, **fields: Any) -> Iterator[dict[str, Any]]:
    """Log ``event`` with ``elapsed_ms`` when the block exits normally.

    The yielded dict can be filled in by the block with more fields.
    """
    start = time.perf_counter()
    extra: dict[str, Any] = dict(fields)
    yield extra
    extra["elapsed_ms"] = (time.perf_counter() - start) * 1000
    log_event(logger, event, **extra)
