"""
Logging configuration for the novel workspace engine.

This module provides centralized logging setup with:
- Structured logging via structlog with rich console output
- Optional rotating JSON log files
- Optional Sentry error tracking
- Call timing for engine operations
"""

import logging
import logging.handlers
import sys
import os
import json
import time
import functools
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone
import structlog
from rich.logging import RichHandler
from rich.console import Console
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration


# Diagnostics go to stderr so command output on stdout stays parseable
console = Console(file=sys.stderr)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    _RESERVED = frozenset((
        'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
        'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
        'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
        'exc_text', 'stack_info', 'taskName',
    ))

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'process': record.process,
        }

        # Add extra fields
        for key, value in record.__dict__.items():
            if key in self._RESERVED:
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def _configure_library_default() -> None:
    """Route structlog through stdlib logging until setup_logging runs.

    Library callers then see only what their own logging configuration
    lets through; with none, warnings and above reach stderr.
    """
    if structlog.is_configured():
        return

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"])
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


_configure_library_default()


def setup_logging(
    app_name: str = "novel-workspace",
    log_level: str = "WARNING",
    log_dir: Optional[Path] = None,
    enable_json: bool = True,
    enable_file: bool = False,
    enable_sentry: bool = False,
    sentry_dsn: Optional[str] = None,
    max_size: int = 10 * 1024 * 1024,
    backup_count: int = 10
) -> Dict[str, Any]:
    """
    Set up logging for the application.

    Args:
        app_name: Application name for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (defaults to ~/.novel-workspace/logs)
        enable_json: Use JSON for file logs and structlog rendering
        enable_file: Write rotating log files under log_dir
        enable_sentry: Enable Sentry error tracking
        sentry_dsn: Sentry DSN for error tracking
        max_size: Maximum size of one log file in bytes
        backup_count: Number of rotated files to keep

    Returns:
        Dictionary with logger instances and configuration
    """
    renderer = structlog.processors.JSONRenderer() if enable_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_suppress=["click"]
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root_logger.addHandler(console_handler)

    if enable_file:
        if log_dir is None:
            log_dir = Path.home() / ".novel-workspace" / "logs"
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        if enable_json:
            file_formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
            )

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{app_name}.log",
            maxBytes=max_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{app_name}-errors.log",
            maxBytes=max_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        root_logger.addHandler(error_handler)

    if enable_sentry and sentry_dsn:
        sentry_logging = LoggingIntegration(
            level=logging.INFO,
            event_level=logging.ERROR
        )
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[sentry_logging],
            traces_sample_rate=0.1,
        )

    loggers = {
        'main': structlog.get_logger(app_name),
        'vcs': structlog.get_logger(f"{app_name}.vcs"),
        'storage': structlog.get_logger(f"{app_name}.storage"),
        'workspace': structlog.get_logger(f"{app_name}.workspace"),
    }

    loggers['main'].debug(
        "logging_initialized",
        app_name=app_name,
        log_level=log_level,
        log_dir=str(log_dir) if log_dir else None,
        enable_json=enable_json,
        enable_file=enable_file,
        enable_sentry=enable_sentry,
        pid=os.getpid(),
    )

    return {
        'loggers': loggers,
        'log_dir': log_dir,
        'console': console,
        'config': {
            'app_name': app_name,
            'log_level': log_level,
            'enable_json': enable_json,
            'enable_file': enable_file,
            'enable_sentry': enable_sentry,
        }
    }


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance by name."""
    return structlog.get_logger(name)


def log_function_call(logger: structlog.BoundLogger):
    """Decorator to log function calls with timing."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            logger.debug(f"calling_{func.__name__}", args=args, kwargs=kwargs)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.warning(
                    f"failed_{func.__name__}",
                    duration_ms=duration_ms,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                f"completed_{func.__name__}",
                duration_ms=duration_ms,
                success=True
            )
            return result

        return wrapper

    return decorator


__all__ = [
    'setup_logging',
    'get_logger',
    'log_function_call',
    'JSONFormatter',
]
