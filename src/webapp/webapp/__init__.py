# ABOUTME: Web application package initialization
# ABOUTME: Provides layered settings loading and projection into Flask configuration

"""
Web application package.

Settings are merged from defaults, config files and environment variables,
then projected into the web framework's configuration at process start.
"""

__version__ = "0.1.0"
