from __future__ import annotations

import logging
from typing import IO, Any

import orjson

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}
_QUIET_LOGGERS = ("aiohttp.access", "aiosqlite", "apscheduler")


class JsonFormatter(logging.Formatter):
    """One JSON object per line: level, message, logger, time, then ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _RESERVED and key not in payload
        }
        for key, value in extras.items():
            payload[key] = _jsonable(value)
        return orjson.dumps(payload).decode()


def _jsonable(value: Any) -> Any:
    try:
        orjson.dumps(value)
    except orjson.JSONEncodeError:
        return repr(value)
    return value


def configure_logging(level: str = "INFO", *, stream: IO[str] | None = None) -> None:
    logging.captureWarnings(True)
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    root.handlers.clear()
    root.addHandler(handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
