"""
Centralized logging module for the OPC UA adapter.

This module provides a singleton logger that forwards to a runtime logging
accessor when the hosting container supplies one, and otherwise writes JSON
lines through the standard ``logging`` package.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Callable, Optional

LOGGER_NAME = "opcua_adapter"


class JsonFormatter(logging.Formatter):
    """Format log records as JSON strings."""
    log_id = 0

    def format(self, record):
        msg = record.getMessage()
        self.log_id += 1

        # Pre-formatted JSON passes through with id and timestamp added
        if msg.strip().startswith("{") and msg.strip().endswith("}"):
            try:
                parsed = json.loads(msg)
                if "timestamp" not in parsed:
                    parsed["timestamp"] = datetime.now(timezone.utc).isoformat()
                parsed["id"] = self.log_id
                return json.dumps(parsed)
            except json.JSONDecodeError:
                pass

        log_entry = {
            "id": self.log_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": msg,
        }
        return json.dumps(log_entry)


def get_std_logger(name: str = LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """Return the stdlib logger used when no runtime accessor is present."""
    std_logger = logging.getLogger(name)
    if not std_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        std_logger.addHandler(handler)
        std_logger.setLevel(level)
    return std_logger


class AdapterLogger:
    """
    Singleton logger for the OPC UA adapter.

    Integrates with the container's logging accessor when available,
    falls back to the ``opcua_adapter`` stdlib logger otherwise.
    """

    _instance: Optional['AdapterLogger'] = None

    def __init__(self):
        self._log_debug_fn: Optional[Callable[[str], None]] = None
        self._log_info_fn: Optional[Callable[[str], None]] = None
        self._log_warn_fn: Optional[Callable[[str], None]] = None
        self._log_error_fn: Optional[Callable[[str], None]] = None
        self._initialized = False
        self._std = get_std_logger()

    @classmethod
    def get_instance(cls) -> 'AdapterLogger':
        """Get the singleton logger instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance. Useful for testing."""
        cls._instance = None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self, logging_accessor) -> bool:
        """
        Initialize logger with a runtime logging accessor.

        Args:
            logging_accessor: Object exposing ``log_info``, ``log_warn`` and
                ``log_error`` callables and an ``is_valid`` flag

        Returns:
            True if initialization successful, False otherwise
        """
        if logging_accessor is None:
            return False

        if not getattr(logging_accessor, 'is_valid', False):
            return False

        self._log_debug_fn = getattr(logging_accessor, 'log_debug', None)
        self._log_info_fn = getattr(logging_accessor, 'log_info', None)
        self._log_warn_fn = getattr(logging_accessor, 'log_warn', None)
        self._log_error_fn = getattr(logging_accessor, 'log_error', None)
        self._initialized = True
        return True

    def debug(self, message: str) -> None:
        """Log a debug message."""
        if self._initialized and self._log_debug_fn:
            self._log_debug_fn(message)
            return
        self._std.debug(message)

    def info(self, message: str) -> None:
        """Log an informational message."""
        if self._initialized and self._log_info_fn:
            self._log_info_fn(message)
            return
        self._std.info(message)

    def warn(self, message: str) -> None:
        """Log a warning message."""
        if self._initialized and self._log_warn_fn:
            self._log_warn_fn(message)
            return
        self._std.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        if self._initialized and self._log_error_fn:
            self._log_error_fn(message)
            return
        self._std.error(message)


# Module-level convenience functions
def get_logger() -> AdapterLogger:
    """Get the singleton logger instance."""
    return AdapterLogger.get_instance()


def log_debug(message: str) -> None:
    get_logger().debug(message)


def log_info(message: str) -> None:
    """Log an informational message."""
    get_logger().info(message)


def log_warn(message: str) -> None:
    """Log a warning message."""
    get_logger().warn(message)


def log_error(message: str) -> None:
    """Log an error message."""
    get_logger().error(message)
