"""Structured logging configuration for pocketmcp."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import PocketMcpConfig

# LogRecord attributes that are not user-supplied extra fields
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "getMessage",
    "exc_info", "exc_text", "stack_info", "taskName", "message", "asctime",
})


class StructuredFormatter(logging.Formatter):
    """Custom formatter that outputs structured JSON logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class PocketMcpLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds component context to every record."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Process log message and add extra context."""
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context) -> "PocketMcpLoggerAdapter":
        """Create new adapter with additional context."""
        new_extra = dict(self.extra)
        new_extra.update(context)
        return PocketMcpLoggerAdapter(self.logger, new_extra)


class LoggingManager:
    """Manage logging configuration for pocketmcp."""

    def __init__(self, config: PocketMcpConfig):
        """Initialize logging manager with configuration."""
        self.config = config
        self.console = Console(stderr=True)
        self._configured = False

    def setup_logging(self) -> None:
        """Set up logging configuration based on settings."""
        if self._configured:
            return

        level = "DEBUG" if self.config.debug else self.config.log_level

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = RichHandler(
            console=self.console,
            show_time=True,
            show_path=self.config.debug,
            rich_tracebacks=True,
            tracebacks_show_locals=self.config.debug
        )
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

        if self.config.log_file:
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(StructuredFormatter())
            root_logger.addHandler(file_handler)

        self._configure_third_party_logging()

        self._configured = True

    def _configure_third_party_logging(self) -> None:
        """Reduce noise from third-party libraries."""
        library_loggers = {
            "httpx": logging.WARNING,
            "httpcore": logging.WARNING,
            "uvicorn.access": logging.WARNING,
        }

        for logger_name, level in library_loggers.items():
            logging.getLogger(logger_name).setLevel(level)

    def get_logger(self, name: str, **context) -> PocketMcpLoggerAdapter:
        """Get a logger with pocketmcp-specific context."""
        if not self._configured:
            self.setup_logging()

        return PocketMcpLoggerAdapter(logging.getLogger(name), context)

    def get_component_logger(self, component: str, **context) -> PocketMcpLoggerAdapter:
        """Get a logger for a specific pocketmcp component."""
        context["component"] = component
        return self.get_logger(f"pocketmcp.{component}", **context)


# Global logging manager instance
_logging_manager: Optional[LoggingManager] = None


def setup_logging(config: PocketMcpConfig) -> LoggingManager:
    """Set up global logging configuration."""
    global _logging_manager
    _logging_manager = LoggingManager(config)
    _logging_manager.setup_logging()
    return _logging_manager


def get_logger(name: str, **context) -> PocketMcpLoggerAdapter:
    """Get a logger instance."""
    if _logging_manager is None:
        from .config import get_config
        setup_logging(get_config())

    return _logging_manager.get_logger(name, **context)


def get_component_logger(component: str, **context) -> PocketMcpLoggerAdapter:
    """Get a component-specific logger."""
    if _logging_manager is None:
        from .config import get_config
        setup_logging(get_config())

    return _logging_manager.get_component_logger(component, **context)
