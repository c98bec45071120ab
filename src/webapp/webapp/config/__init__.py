# ABOUTME: Configuration package initialization
# ABOUTME: Exports settings loading, projection and logging utilities

from webapp.config.settings import Settings
from webapp.config.loader import SettingsLoader, load_settings
from webapp.config.projector import to_framework_config, framework_defaults, parse_log_level
from webapp.config.logging import (
    LoggingLevel,
    LoggerConfig,
    setup_logging,
    configure_for_level,
    get_logger,
)

__all__ = [
    "Settings",
    "SettingsLoader",
    "load_settings",
    "to_framework_config",
    "framework_defaults",
    "parse_log_level",
    "LoggingLevel",
    "LoggerConfig",
    "setup_logging",
    "configure_for_level",
    "get_logger",
]
