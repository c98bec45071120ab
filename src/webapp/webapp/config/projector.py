# ABOUTME: Projection of Settings into the web framework's native configuration
# ABOUTME: Applies Flask and development-server defaults, then overlays present settings and extras

import os
import re
from typing import Any, Dict, Mapping, Union

from flask import Config, Flask
from loguru import logger

from webapp.config.logging import LoggingLevel
from webapp.config.settings import Settings
from webapp.exceptions import ExtrasConversionError

# Defaults of Flask's development server (`Flask.run`)
SERVER_DEFAULTS = {
    "SERVER_ADDRESS": "127.0.0.1",
    "SERVER_PORT": 5000,
    "SERVER_WORKERS": 1,
    "LOG_LEVEL": LoggingLevel.NORMAL,
}

# Keys set from first-class settings, never taken from extras
PROJECTED_KEYS = frozenset(SERVER_DEFAULTS) | {"SECRET_KEY", "STATIC_FOLDER", "STATIC_URL_PATH"}

# Flask only honours upper-case config keys
_CONFIG_KEY = re.compile(r"^[A-Z][A-Z0-9_]*$")


def framework_defaults(root_path: Union[str, os.PathLike, None] = None) -> Config:
    """Return a fresh Flask config holding only the framework's own defaults."""
    defaults = dict(Flask.default_config)
    defaults.update(SERVER_DEFAULTS)
    return Config(os.getcwd() if root_path is None else root_path, defaults)


def parse_log_level(value: str) -> LoggingLevel:
    """Parse a log level name, falling back to `LoggingLevel.NORMAL` when it is unknown."""
    try:
        return LoggingLevel.parse(value)
    except ValueError:
        return LoggingLevel.NORMAL


def convert_extras(extras: Mapping[str, str]) -> Dict[str, str]:
    """
    Convert extras into Flask config items.

    Keys are upper-cased and must form a valid config name that is not one
    of `PROJECTED_KEYS`; values are kept as strings.

    Args:
        extras: Extras taken from the settings record.

    Returns:
        A mapping ready to be merged into a Flask config.

    Raises:
        ExtrasConversionError: If any entry cannot be converted.
    """
    table: Dict[str, str] = {}
    for key, value in extras.items():
        config_key = key.upper()
        if not _CONFIG_KEY.match(config_key):
            raise ExtrasConversionError(
                f"Extra {key!r} is not a valid config key",
                code="INVALID_EXTRA_KEY",
                details={"key": key},
            )
        if config_key in PROJECTED_KEYS:
            raise ExtrasConversionError(
                f"Extra {key!r} would override the projected setting {config_key}",
                code="RESERVED_EXTRA_KEY",
                details={"key": key},
            )
        if not isinstance(value, str):
            raise ExtrasConversionError(
                f"Extra {key!r} has unsupported value type {type(value).__name__}",
                code="INVALID_EXTRA_VALUE",
                details={"key": key},
            )
        table[config_key] = value
    return table


def to_framework_config(settings: Settings, root_path: Union[str, os.PathLike, None] = None) -> Config:
    """
    Convert settings into a Flask config.

    Every optional field that is set overrides the corresponding framework
    default; unset fields leave the default untouched. An unknown log level
    becomes ``normal``. Extras are applied all together or not at all: a
    single bad entry drops the whole table and logs a diagnostic.

    Args:
        settings: The loaded settings.
        root_path: Root path of the Flask config, defaults to the working directory.

    Returns:
        The framework configuration. This function never raises.
    """
    conf = framework_defaults(root_path)
    conf["STATIC_FOLDER"] = settings.static_dir
    conf["STATIC_URL_PATH"] = settings.static_route

    if settings.address is not None:
        conf["SERVER_ADDRESS"] = settings.address
    if settings.port is not None:
        conf["SERVER_PORT"] = settings.port
    if settings.log is not None:
        conf["LOG_LEVEL"] = parse_log_level(settings.log)
    if settings.workers is not None:
        conf["SERVER_WORKERS"] = settings.workers
    if settings.secret_key is not None:
        conf["SECRET_KEY"] = settings.secret_key

    try:
        table = convert_extras(settings.extras)
    except ExtrasConversionError as e:
        logger.error(f"Ignoring extras: {e.message}")
    else:
        conf.update(table)

    return conf


def server_options(conf: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the keyword arguments for `Flask.run` described by a projected config."""
    workers = int(conf["SERVER_WORKERS"])
    return {
        "host": conf["SERVER_ADDRESS"],
        "port": conf["SERVER_PORT"],
        "threaded": workers <= 1,
        "processes": max(workers, 1),
    }
