"""
Process-wide logging setup.

init_telemetry() installs one JSON-lines handler on the root logger the
first time it is called. Later calls return the same service logger
without adding handlers, so startup code and test fixtures can both call
it safely.
"""

import logging
import sys
import threading
from datetime import UTC, datetime
from typing import IO, Any

from pythonjsonlogger.json import JsonFormatter

_lock = threading.Lock()
_service_logger: logging.Logger | None = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# LogRecord attribute -> emitted key
RENAMED_FIELDS = {
    "asctime": "time",
    "levelname": "level",
    "name": "target",
    "message": "msg",
    "exc_info": "exception",
}


class JsonLinesFormatter(JsonFormatter):
    """
    One JSON object per line.

    Keys: time, level, name (the service), target (the emitting logger),
    msg, and exception when the record carries exc_info.
    """

    def __init__(self, service_name: str) -> None:
        super().__init__(LOG_FORMAT, rename_fields=RENAMED_FIELDS)
        self.service_name = service_name

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return datetime.fromtimestamp(record.created, UTC).isoformat()

    def add_fields(
        self,
        log_data: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_data, record, message_dict)
        log_data["name"] = self.service_name


def init_telemetry(
    name: str,
    level: str | int = "INFO",
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure root logging once and return the service logger."""
    global _service_logger
    with _lock:
        if _service_logger is not None:
            return _service_logger

        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(JsonLinesFormatter(name))

        root = logging.getLogger()
        root.addHandler(handler)
        root.setLevel(level)

        _service_logger = logging.getLogger(name)
        return _service_logger


def is_initialised() -> bool:
    return _service_logger is not None
