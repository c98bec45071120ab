# ABOUTME: Exception classes for the web application's startup layer
# ABOUTME: Provides structured error handling with context and error codes

from typing import Dict, Any


class CoreException(Exception):
    """Base exception class for the web application.

    Provides structured error handling with optional error codes and contextual
    details. All custom exceptions in the application should inherit from this
    class to ensure consistent error handling patterns.

    Attributes:
        message: Human-readable error message
        code: Optional error code for programmatic handling
        details: Optional dictionary containing contextual information
    """

    def __init__(self, message: str, code: str | None = None, details: Dict[str, Any] | None = None):
        """Initialize CoreException with message, optional code and details.

        Args:
            message: Human-readable error message
            code: Optional error code for programmatic handling
            details: Optional dictionary containing contextual information
        """
        self.message = message
        self.code = code
        self.details = details.copy() if details else {}
        super().__init__(self.message)


class ConfigurationException(CoreException):
    """Exception raised for configuration errors.

    Used when application configuration cannot be loaded, such as:
    - A required environment variable is not set
    - A config file is present but cannot be read
    - A config file contains malformed content
    - Merged values do not fit the settings record

    Loading is one-shot and fail-fast; these errors are meant to reach the
    process entry point and abort startup.
    """

    pass


class ConfigurationFileError(ConfigurationException):
    """Exception raised when a present config file cannot be read.

    Should include the offending path in ``details["path"]``.
    """

    pass


class ConfigurationParseError(ConfigurationException):
    """Exception raised when a config file's contents cannot be parsed.

    Should include the offending path in ``details["path"]`` and the
    detected format in ``details["format"]``.
    """

    pass


class SettingsValidationError(ConfigurationException):
    """Exception raised when merged values do not match the settings record.

    Typical causes are type mismatches, such as a non-numeric ``port`` or a
    ``workers`` count outside the 16-bit range. ``details["errors"]`` holds
    pydantic's error list.
    """

    pass


class ExtrasConversionError(CoreException):
    """Exception raised when an extras entry cannot become a framework config item.

    Raised during projection and recovered there; never propagated past the
    projector.
    """

    pass
