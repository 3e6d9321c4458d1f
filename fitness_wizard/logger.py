"""
Structured logging for the Fitness Wizard service.

Supports two modes:
- Human-readable: Pretty output for local development
- JSON: Machine-parseable structured logs for hosted deployments

Set WIZARD_LOG_FORMAT=json (or logging.format in config.yaml) for structured output.
"""

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from typing import Dict, Optional


ROOT_LOGGER_NAME = 'fitness_wizard'


class StructuredFormatter(logging.Formatter):
    """JSON formatter for machine-parseable logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
        }

        if hasattr(record, 'extra_fields'):
            log_obj['fields'] = record.extra_fields

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for interactive use."""

    LEVEL_PREFIXES = {
        'DEBUG': '[DEBUG]',
        'INFO': '',
        'WARNING': '[WARN]',
        'ERROR': '[ERROR]',
        'CRITICAL': '[CRITICAL]',
    }

    def format(self, record: logging.LogRecord) -> str:
        prefix = self.LEVEL_PREFIXES.get(record.levelname, '')
        msg = record.getMessage()

        fields = getattr(record, 'extra_fields', None)
        if fields:
            pairs = ' | '.join(f"{k}={v}" for k, v in fields.items())
            msg = f"{msg} [{pairs}]"

        if prefix:
            msg = f"{prefix} {msg}"

        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"

        return msg


_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

_configure_lock = threading.Lock()
_configured = False


def configure_logging(fmt: Optional[str] = None, level: Optional[str] = None):
    """
    Attach the console handler to the package root logger.

    Child loggers (fitness_wizard.*) propagate to it. Safe to call repeatedly;
    later calls only swap the formatter and level.
    """
    global _configured
    fmt = (fmt or os.environ.get('WIZARD_LOG_FORMAT', 'human')).lower()
    level = (level or os.environ.get('WIZARD_LOG_LEVEL', 'INFO')).upper()

    root = logging.getLogger(ROOT_LOGGER_NAME)
    formatter = StructuredFormatter() if fmt == 'json' else HumanFormatter()

    with _configure_lock:
        if not _configured:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)
            _configured = True
        else:
            for handler in root.handlers:
                if isinstance(handler, logging.StreamHandler):
                    handler.setFormatter(formatter)

        root.setLevel(_LEVELS.get(level, logging.INFO))


class WizardLogger:
    """Logger that carries keyword fields alongside the message."""

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, /, exc_info=None, **kwargs):
        if not self._logger.isEnabledFor(level):
            return
        extra = {'extra_fields': kwargs} if kwargs else None
        self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, /, **kwargs):
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, /, **kwargs):
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, /, **kwargs):
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, /, **kwargs):
        self._log(logging.ERROR, msg, **kwargs)

    def critical(self, msg: str, /, **kwargs):
        self._log(logging.CRITICAL, msg, **kwargs)

    def exception(self, msg: str, /, **kwargs):
        """Error level message with the active exception's traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **kwargs)

    def success(self, msg: str, /, **kwargs):
        """Success message (INFO level)."""
        kwargs.setdefault('status', 'success')
        self._log(logging.INFO, f"[OK] {msg}", **kwargs)


_loggers: Dict[str, WizardLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str = ROOT_LOGGER_NAME) -> WizardLogger:
    """Get the logger for a dotted name, creating it once."""
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    with _loggers_lock:
        if name not in _loggers:
            _loggers[name] = WizardLogger(name)
        return _loggers[name]
