"""
Structured logging configuration for the polyline_report package.

Provides:
- JSON formatter for machine-readable log files
- Console formatter for human-readable output
- log_timing context manager for measured operations
- LogContext for stamping session fields onto every record

Usage:
    from polyline_report.logging_config import setup_logging, get_logger

    setup_logging(level=logging.INFO, json_file="report.log.json")

    logger = get_logger(__name__)
    logger.info("Group added", extra={"segments": 4, "curves": 2})
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

PACKAGE_LOGGER = "polyline_report"

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_KEYS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'asctime', 'taskName',
})


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_KEYS}


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", ...}
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            for key, value in _extra_fields(record).items():
                try:
                    json.dumps(value)
                    entry[key] = value
                except (TypeError, ValueError):
                    entry[key] = str(value)

        # Labels and block names are often non-ASCII
        return json.dumps(entry, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Format: [TIME] LEVEL logger: message [key=value ...]"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        super().__init__()
        self.use_colors = use_colors
        self.show_extra = show_extra

    def format(self, record: logging.LogRecord) -> str:
        time_str = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level_str = f"{self.COLORS[level]}{level:8}{self.RESET}"
        else:
            level_str = f"{level:8}"

        logger_name = record.name
        prefix = PACKAGE_LOGGER + "."
        if logger_name.startswith(prefix):
            logger_name = logger_name[len(prefix):]

        extra_str = ""
        if self.show_extra:
            extras = []
            for key, value in _extra_fields(record).items():
                if isinstance(value, float):
                    extras.append(f"{key}={value:.3g}")
                elif isinstance(value, (list, tuple)) and len(value) > 3:
                    extras.append(f"{key}=[...{len(value)} items]")
                else:
                    extras.append(f"{key}={value}")
            if extras:
                extra_str = " [" + ", ".join(extras) + "]"

        result = f"[{time_str}] {level_str} {logger_name}: {record.getMessage()}{extra_str}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


def setup_logging(
    level: int = logging.INFO,
    json_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    use_colors: bool = True,
) -> logging.Logger:
    """Configure the package logger.

    Existing handlers are replaced, so calling this twice does not
    duplicate output.

    Args:
        level: Minimum log level
        json_file: Optional path for a JSON-lines log file
        console: Log to stderr
        use_colors: ANSI colors on the console

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
        console_handler.addFilter(_CONTEXT_FILTER)
        logger.addHandler(console_handler)

    if json_file:
        json_handler = logging.FileHandler(Path(json_file), encoding='utf-8')
        json_handler.setLevel(level)
        json_handler.setFormatter(JSONFormatter())
        json_handler.addFilter(_CONTEXT_FILTER)
        logger.addHandler(json_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module (typically __name__)."""
    return logging.getLogger(name)


@contextmanager
def log_timing(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    **extra_fields: Any
):
    """Log start, completion and elapsed time of an operation.

    Example:
        with log_timing(logger, "Reading drawing", path=dxf_path):
            drawing = load_drawing(dxf_path)

    Yields:
        dict that the caller may fill with extra result fields
    """
    timing_info: Dict[str, Any] = {}
    start_time = time.perf_counter()

    logger.log(level, "Starting: %s", operation, extra={
        "event": "start",
        "operation": operation,
        **extra_fields,
    })

    try:
        yield timing_info
    except Exception as e:
        elapsed = time.perf_counter() - start_time
        logger.error("Failed: %s (%.3fs) - %s", operation, elapsed, e, extra={
            "event": "error",
            "operation": operation,
            "elapsed_seconds": elapsed,
            **extra_fields,
        })
        raise

    elapsed = time.perf_counter() - start_time
    logger.log(level, "Completed: %s (%.3fs)", operation, elapsed, extra={
        "event": "complete",
        "operation": operation,
        "elapsed_seconds": elapsed,
        **extra_fields,
        **timing_info,
    })


# Fields of the innermost LogContext. Each thread (and each asyncio task)
# sees its own value, so parallel batch workers do not mix drawings.
_context_fields: ContextVar[Dict[str, Any]] = ContextVar("polyline_report_log_context", default={})


class _ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context_fields.get().items():
            setattr(record, key, value)
        return True


_CONTEXT_FILTER = _ContextFilter()


class LogContext:
    """Add common fields to every package log record within a scope.

    Scopes nest; inner fields override outer ones.

    Example:
        with LogContext(drawing="plant.dxf"):
            logger.info("Group added")  # record carries drawing=...
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._token: Optional[Token] = None

    def __enter__(self) -> 'LogContext':
        # Filters on a logger only see records logged directly on it, so
        # the shared filter goes on the handlers, where child records arrive too.
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.addFilter(_CONTEXT_FILTER)
        self._token = _context_fields.set({**_context_fields.get(), **self.fields})
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._token is not None:
            _context_fields.reset(self._token)
            self._token = None
