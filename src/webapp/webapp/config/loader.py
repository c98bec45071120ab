# ABOUTME: Layered settings loader for the web application
# ABOUTME: Merges environment mappings, config files and prefixed environment variables into Settings

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError
from pydantic_settings import PydanticBaseSettingsSource

from webapp.config.logging import get_logger
from webapp.config.settings import RESERVED_EXTRA_KEYS, Settings
from webapp.config.sources import ConfigFileSettingsSource, MappedEnvSettingsSource, PrefixedEnvSettingsSource
from webapp.exceptions import SettingsValidationError

# The prefix used to pull in environment variables. Any variable with this prefix that
# does not correspond to a field of `Settings` ends up in `extras`, which is handed to
# the web framework. Nothing sensitive in the environment should carry this prefix.
ENV_PREFIX = "APP"

# Selects the environment-specific config file
ENVIRONMENT_VAR = "APP_ENV"
KNOWN_ENVIRONMENTS = ("development", "production", "staging")

BASE_CONFIG_NAME = "config"

# Settings keys read directly from fixed environment variables, missing ones are skipped
DEFAULT_ENV_MAPPING: Dict[str, str] = {"port": "PORT"}


class SettingsLoader:
    """Builds a `Settings` value from layered configuration sources.

    Sources are merged in a fixed order, later sources overriding earlier
    ones for the same key:

    1. Built-in defaults declared on `Settings`.
    2. The direct environment mapping (``port`` <- ``PORT``), non-strict.
    3. The required environment mapping, if any, strict.
    4. The base config file ``config.<ext>``, optional.
    5. ``config-<env>.<ext>`` when ``APP_ENV`` is development, production or staging, optional.
    6. Every ``APP_*`` variable, prefix stripped and lower-cased, empty values ignored.

    A second pass over the prefixed variables fills ``extras`` with every key
    that is not a `Settings` field.

    The environment and the config directory are injected so that callers
    (and tests) never need to touch the real process state.

    Example:
        >>> loader = SettingsLoader(environ={"APP_PORT": "8080"}, config_dir="/etc/webapp")
        >>> loader.load().port
        8080
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        config_dir: Union[str, Path, None] = None,
        env_prefix: str = ENV_PREFIX,
        env_mapping: Optional[Mapping[str, str]] = None,
        required_env_mapping: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the loader.

        Args:
            environ: Environment to read from. Defaults to a snapshot of `os.environ`.
            config_dir: Directory holding the config files. Defaults to the working directory.
            env_prefix: Prefix of the generic environment variables, without separator.
            env_mapping: Settings keys mapped to fixed environment variables, missing ones ignored.
            required_env_mapping: Settings keys mapped to environment variables that must be set.
        """
        self.environ: Mapping[str, str] = dict(os.environ) if environ is None else environ
        self.config_dir = Path.cwd() if config_dir is None else Path(config_dir)
        self.env_prefix = env_prefix
        self.env_mapping = dict(DEFAULT_ENV_MAPPING if env_mapping is None else env_mapping)
        self.required_env_mapping = dict(required_env_mapping or {})
        self._logger = get_logger(__name__)

    @property
    def environment(self) -> Optional[str]:
        """The active environment name, or None when no environment file applies."""
        env = self.environ.get(ENVIRONMENT_VAR, "")
        return env if env in KNOWN_ENVIRONMENTS else None

    def sources(self) -> List[PydanticBaseSettingsSource]:
        """Return the settings sources in merge order, lowest precedence first."""
        sources: List[PydanticBaseSettingsSource] = []
        if self.env_mapping:
            sources.append(MappedEnvSettingsSource(Settings, self.environ, self.env_mapping))
        if self.required_env_mapping:
            sources.append(MappedEnvSettingsSource(Settings, self.environ, self.required_env_mapping, strict=True))

        sources.append(ConfigFileSettingsSource(Settings, BASE_CONFIG_NAME, self.config_dir))

        env = self.environment
        if env is not None:
            sources.append(ConfigFileSettingsSource(Settings, f"{BASE_CONFIG_NAME}-{env}", self.config_dir))

        sources.append(self._prefixed_env_source())
        return sources

    def merge(self) -> Dict[str, Any]:
        """Merge every source into a single mapping, later sources winning."""
        merged: Dict[str, Any] = {}
        for source in self.sources():
            values = source()
            if values:
                self._logger.debug(f"Merging {len(values)} key(s) from {source!r}")
            merged.update(values)
        return merged

    def collect_extras(self) -> Dict[str, str]:
        """Collect the prefixed environment variables that are not `Settings` fields."""
        extras = self._prefixed_env_source()()
        for key in RESERVED_EXTRA_KEYS:
            extras.pop(key, None)
        return extras

    def load(self) -> Settings:
        """
        Load the fully merged settings.

        Returns:
            The typed settings record.

        Raises:
            ConfigurationException: A required environment variable is missing.
            ConfigurationFileError: A present config file cannot be read.
            ConfigurationParseError: A config file is malformed.
            SettingsValidationError: A merged value does not fit its field.
        """
        merged = self.merge()
        merged["extras"] = self.collect_extras()
        # Unknown keys are already represented in extras
        values = {key: value for key, value in merged.items() if key in Settings.model_fields}

        try:
            settings = Settings(**values)
        except ValidationError as e:
            raise SettingsValidationError(
                f"Invalid settings: {e.error_count()} validation error(s)",
                code="SETTINGS_INVALID",
                details={"errors": e.errors(include_url=False)},
            ) from e

        self._logger.info(
            f"Settings loaded (environment={self.environment or 'default'}, extras={len(settings.extras)})"
        )
        return settings

    def _prefixed_env_source(self) -> PrefixedEnvSettingsSource:
        return PrefixedEnvSettingsSource(Settings, self.environ, prefix=self.env_prefix, ignore_empty=True)


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_dir: Union[str, Path, None] = None,
) -> Settings:
    """
    Load settings from the given environment and config directory.

    Args:
        environ: Environment to read from. Defaults to `os.environ`.
        config_dir: Directory holding the config files. Defaults to the working directory.

    Returns:
        The typed settings record.
    """
    return SettingsLoader(environ=environ, config_dir=config_dir).load()
