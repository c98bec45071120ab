# ABOUTME: Loguru configuration for the web application
# ABOUTME: Maps the framework log level onto loguru sinks for console and optional file output

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from loguru import logger
from pydantic import BaseModel


class LoggingLevel(str, Enum):
    """The level of logging the web framework performs."""

    CRITICAL = "critical"  # Only warnings and errors
    NORMAL = "normal"  # Everything except debug output
    DEBUG = "debug"  # Everything
    OFF = "off"

    @classmethod
    def parse(cls, value: str) -> "LoggingLevel":
        """Parse a level name, case-insensitively.

        Raises:
            ValueError: If the name is not one of critical, normal, debug or off.
        """
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ValueError(f"Invalid logging level {value!r}, expected one of critical, normal, debug, off") from None

    @property
    def loguru_level(self) -> Optional[str]:
        """The minimum loguru level for this framework level, None when logging is off."""
        return _LOGURU_LEVELS[self]


_LOGURU_LEVELS = {
    LoggingLevel.CRITICAL: "WARNING",
    LoggingLevel.NORMAL: "INFO",
    LoggingLevel.DEBUG: "DEBUG",
    LoggingLevel.OFF: None,
}


class LoggerConfig(BaseModel):
    """Configuration for loguru logger."""

    # Console output configuration
    console_enabled: bool = True
    console_level: str = "INFO"
    console_format: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )
    console_colorize: bool = True
    console_backtrace: bool = True
    console_diagnose: bool = False

    # File output configuration
    file_enabled: bool = False
    file_level: str = "DEBUG"
    file_path: Union[str, Path] = "logs/webapp.log"
    file_format: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"
    file_rotation: str = "50 MB"
    file_retention: str = "14 days"

    # Level applied to the framework's own stdlib loggers
    framework_level: int = logging.INFO


def setup_logging(config: Optional[LoggerConfig] = None) -> None:
    """
    Setup loguru logger with the specified configuration.

    Console output goes to stderr so that diagnostics never mix with
    anything the application writes to stdout.

    Args:
        config: Logger configuration. If None, uses default configuration.
    """
    if config is None:
        config = LoggerConfig()

    # Remove default handler
    logger.remove()

    if config.console_enabled:
        logger.add(
            sys.stderr,
            level=config.console_level,
            format=config.console_format,
            colorize=config.console_colorize,
            backtrace=config.console_backtrace,
            diagnose=config.console_diagnose,
        )

    if config.file_enabled:
        # Ensure log directory exists
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            config.file_path,
            level=config.file_level,
            format=config.file_format,
            rotation=config.file_rotation,
            retention=config.file_retention,
        )

    for name in ("werkzeug", "flask.app"):
        logging.getLogger(name).setLevel(config.framework_level)


def configure_for_level(level: LoggingLevel) -> None:
    """Configure logging according to the framework log level."""
    loguru_level = level.loguru_level
    if loguru_level is None:
        setup_logging(LoggerConfig(console_enabled=False, framework_level=logging.CRITICAL + 1))
        return

    setup_logging(
        LoggerConfig(
            console_level=loguru_level,
            console_diagnose=level is LoggingLevel.DEBUG,
            framework_level=logging.getLevelName(loguru_level),
        )
    )


def get_logger(name: str):
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance bound to the specified name
    """
    return logger.bind(name=name)

