"""Unit tests for logging initialization in logging.py.

Test coverage includes:

1. JsonFormatter output
   - Ensures records are rendered as one JSON object with extras.
   - Ensures exception tracebacks are included.

2. initialize_logging()
   - Ensures the root level follows LOG_LEVEL or the explicit argument.
   - Ensures the dictConfig routes records to the JSON handler.
"""

import json
import logging
import sys

import pytest

from shortlinks.utils.logging import JsonFormatter, initialize_logging, logging_config


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers


def _record(msg, *args, exc_info=None, **extra):
    record = logging.LogRecord('shortlinks.test', logging.INFO, __file__, 1, msg, args, exc_info)
    record.__dict__.update(extra)
    return record


# -------------------------------
# 1. JsonFormatter output
# -------------------------------


def test_json_formatter_includes_extras():
    """Ensure the message, level and extras land in one JSON object."""
    record = _record('Created short link %s.', 'abc123', code='abc123', event='LINK_CREATED')
    record.created = 1766750400.0  # 2025-12-26T12:00:00Z

    log = json.loads(JsonFormatter().format(record))

    assert log == {
        'timestamp': '2025-12-26T12:00:00.000Z',
        'level': 'INFO',
        'logger': 'shortlinks.test',
        'message': 'Created short link abc123.',
        'code': 'abc123',
        'event': 'LINK_CREATED',
    }


def test_json_formatter_includes_exception():
    """Ensure exception tracebacks are serialized."""
    try:
        raise RuntimeError('boom')
    except RuntimeError:
        record = _record('Failed.', exc_info=sys.exc_info())

    log = json.loads(JsonFormatter().format(record))

    assert 'RuntimeError: boom' in log['exception']


# -------------------------------
# 2. initialize_logging()
# -------------------------------


def test_initialize_logging_reads_log_level(monkeypatch):
    """Ensure LOG_LEVEL controls the root logger level."""
    monkeypatch.setenv('LOG_LEVEL', 'debug')

    initialize_logging()

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0].formatter, JsonFormatter)


def test_initialize_logging_explicit_level(monkeypatch):
    """Ensure an explicit level wins over the environment."""
    monkeypatch.setenv('LOG_LEVEL', 'DEBUG')

    initialize_logging('warning')

    assert logging.getLogger().level == logging.WARNING


def test_logging_config_shape():
    """Ensure the dictConfig routes the root logger to the JSON stdout handler."""
    config = logging_config('ERROR')

    assert config['root'] == {'level': 'ERROR', 'handlers': ['stdout']}
    assert config['handlers']['stdout']['formatter'] == 'json'
    assert config['formatters']['json']['()'] is JsonFormatter
