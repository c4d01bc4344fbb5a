"""
Logging for the NoodleSeed MCP server
=====================================

Every log record is stamped with the identity of the session it was
emitted for (``correlation_id``), so the lines of one SSE session can be
followed across the stream task and the POST requests routed to it.

Console output is colored text in debug mode and one JSON object per line
otherwise; file output is always JSON.
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..config import ConfigManager, get_config

# Session identity (or any other correlation id) of the code currently running
correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

NO_CORRELATION = 'none'

QUIET_LOGGERS = ('aiohttp.access', 'aiohttp.server', 'aiohttp.web', 'asyncio')

# LogRecord attributes that are not ``extra=`` fields
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord('', 0, '', 0, '', None, None))
) | {'message', 'asctime', 'correlation_id', 'taskName'}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


class CorrelationFilter(logging.Filter):
    """Stamp records with the active correlation id"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get() or NO_CORRELATION
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields are merged in"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': _utc_now(),
            'level': record.levelname,
            'logger': record.name,
            'correlation_id': getattr(record, 'correlation_id', NO_CORRELATION),
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES
        )
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored single-line output for local development"""

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        session = getattr(record, 'correlation_id', NO_CORRELATION)
        session_tag = '' if session == NO_CORRELATION else f"[{session[:8]}]"

        level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{record.levelname:<8}{self.RESET}"
        clock = datetime.fromtimestamp(record.created).strftime('%H:%M:%S.%f')[:-3]

        text = f"{clock} {level} {record.name:<30} {session_tag} {record.getMessage()}"
        if record.exc_info:
            text += '\n' + self.formatException(record.exc_info)
        return text


class LoggingManager:
    """
    Installs the root handlers described by ``ServerConfig``.

    Creating a manager replaces whatever handlers the root logger had, so
    the last manager built wins.
    """

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config or get_config()
        self.level = logging.getLevelName(self.config.server.log_level.upper())
        if not isinstance(self.level, int):
            self.level = logging.INFO

        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(self.level)
        for handler in self._build_handlers():
            root.addHandler(handler)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    def _build_handlers(self) -> List[logging.Handler]:
        stamp = CorrelationFilter()

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(
            ConsoleFormatter() if self.config.server.debug_mode else StructuredFormatter()
        )
        handlers: List[logging.Handler] = [console]

        if self.config.server.log_file:
            path = Path(self.config.server.log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            log_file = logging.FileHandler(path)
            log_file.setFormatter(StructuredFormatter())
            handlers.append(log_file)

        for handler in handlers:
            handler.setLevel(self.level)
            handler.addFilter(stamp)
        return handlers


_manager: Optional[LoggingManager] = None


def configure_logging(config: Optional[ConfigManager] = None) -> LoggingManager:
    """Rebuild root logging from ``config``, e.g. after command-line overrides"""
    global _manager
    _manager = LoggingManager(config)
    return _manager


def get_logger(name: str) -> logging.Logger:
    """
    Module logger; the first call installs the root handlers.

    Usage:
        from noodleseed_mcp.logging import get_logger
        logger = get_logger(__name__)
    """
    if _manager is None:
        configure_logging()
    return logging.getLogger(name)


def set_correlation_id(corr_id: Optional[str] = None) -> str:
    """Set the correlation id for the current context, generating one if omitted"""
    corr_id = corr_id or str(uuid.uuid4())
    correlation_id.set(corr_id)
    return corr_id


def clear_correlation_id():
    correlation_id.set(None)


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


@contextmanager
def with_session_id(session_id: str) -> Iterator[str]:
    """
    Tag every record logged inside the block with ``session_id``.

    The previous id is restored on exit, so blocks nest.
    """
    token = correlation_id.set(session_id)
    try:
        yield session_id
    finally:
        correlation_id.reset(token)
