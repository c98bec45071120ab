# ABOUTME: Exceptions package exports
# ABOUTME: Exports the configuration error taxonomy used at startup

from webapp.exceptions.base import (
    CoreException,
    ConfigurationException,
    ConfigurationFileError,
    ConfigurationParseError,
    SettingsValidationError,
    ExtrasConversionError,
)

__all__ = [
    "CoreException",
    "ConfigurationException",
    "ConfigurationFileError",
    "ConfigurationParseError",
    "SettingsValidationError",
    "ExtrasConversionError",
]
