"""Structured (JSON lines) logging for the service

`initialize_logging()` is called once by create_service(). Every record is one
JSON object carrying the standard fields plus whatever was passed as `extra`:

{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "shortlinks.services.short_link_service",
    "message": "Created short link.",
    "code": "a1b2c3",
    "event": "LINK_CREATED"
}
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC
from typing import Any

from shortlinks.constants import ENV


# Attributes every LogRecord has; anything else on a record came from `extra`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord('', logging.NOTSET, '', 0, '', (), None))) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """Render a LogRecord, its `extra` fields and its traceback as one JSON line"""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC)
        return stamp.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    def format(self, record: logging.LogRecord) -> str:
        log: dict[str, Any] = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update((key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            log['stack'] = self.formatStack(record.stack_info)

        # datetimes, enums and Deadline objects fall back to str()
        return json.dumps(log, default=str)


def logging_config(level: str) -> dict[str, Any]:
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {'json': {'()': JsonFormatter}},
        'handlers': {
            'stdout': {
                'class': 'logging.StreamHandler',
                'formatter': 'json',
                'stream': 'ext://sys.stdout',
            }
        },
        'root': {'level': level, 'handlers': ['stdout']},
    }


def initialize_logging(level: str | None = None) -> None:
    """Configure the root logger. An explicit level wins over LOG_LEVEL (default INFO)."""
    level = (level or os.getenv(ENV.App.LOG_LEVEL, 'INFO')).upper()
    logging.config.dictConfig(logging_config(level))
