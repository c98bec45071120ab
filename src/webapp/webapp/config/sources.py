# ABOUTME: Settings sources for layered configuration loading
# ABOUTME: Reads environment mappings, prefixed environment variables and config files into plain dicts

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

import yaml
from loguru import logger
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    TomlConfigSettingsSource,
    YamlConfigSettingsSource,
)

from webapp.exceptions import ConfigurationException, ConfigurationFileError, ConfigurationParseError

# Extension lookup order for config files, first existing file wins
CONFIG_FILE_FORMATS: Tuple[Tuple[str, str], ...] = (
    (".toml", "toml"),
    (".json", "json"),
    (".yaml", "yaml"),
    (".yml", "yaml"),
)


class MappedEnvSettingsSource(PydanticBaseSettingsSource):
    """Maps settings keys directly onto fixed environment variable names.

    In non-strict mode a missing variable is skipped, which leaves the
    existence check to validation of the settings record. In strict mode a
    missing variable raises `ConfigurationException`.

    Use two sources when both kinds of mappings are needed, to make it
    explicit which variables are required:

        MappedEnvSettingsSource(Settings, os.environ, {"port": "PORT"})
        MappedEnvSettingsSource(Settings, os.environ, {"dburl": "DATABASE_URL"}, strict=True)
    """

    def __init__(
        self,
        settings_cls: Type[BaseSettings],
        environ: Mapping[str, str],
        mapping: Mapping[str, str],
        strict: bool = False,
    ):
        super().__init__(settings_cls)
        self.environ = environ
        self.mapping = dict(mapping)
        self.strict = strict

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        env_name = self.mapping.get(field_name)
        if env_name is None:
            return None, field_name, False
        return self.environ.get(env_name), env_name, False

    def __call__(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for setting_name, env_name in self.mapping.items():
            if env_name in self.environ:
                data[setting_name] = self.environ[env_name]
            elif self.strict:
                raise ConfigurationException(
                    f"Environment variable '{env_name}' is required for setting '{setting_name}'",
                    code="MISSING_ENV_VAR",
                    details={"setting": setting_name, "env_var": env_name},
                )
        return data

    def __repr__(self) -> str:
        mode = "strict" if self.strict else "non-strict"
        return f"MappedEnvSettingsSource({self.mapping!r}, {mode})"


class PrefixedEnvSettingsSource(PydanticBaseSettingsSource):
    """Collects every environment variable carrying a fixed prefix.

    The prefix and its separator are matched case-insensitively and
    stripped, and the remaining name is lower-cased to form the settings key,
    so ``APP_SECRET_KEY`` becomes ``secret_key``. With ``ignore_empty`` set,
    variables holding an empty string are skipped.
    """

    def __init__(
        self,
        settings_cls: Type[BaseSettings],
        environ: Mapping[str, str],
        prefix: str,
        separator: str = "_",
        ignore_empty: bool = True,
    ):
        super().__init__(settings_cls)
        self.environ = environ
        self.prefix = prefix
        self.separator = separator
        self.ignore_empty = ignore_empty

    @property
    def pattern(self) -> str:
        return f"{self.prefix}{self.separator}".lower()

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        env_name = f"{self.prefix}{self.separator}{field_name}".upper()
        return self().get(field_name), env_name, False

    def __call__(self) -> Dict[str, str]:
        pattern = self.pattern
        data: Dict[str, str] = {}
        for name, value in self.environ.items():
            if not name.lower().startswith(pattern):
                continue
            if self.ignore_empty and value == "":
                continue
            key = name[len(pattern) :].lower()
            if key:
                data[key] = value
        return data

    def __repr__(self) -> str:
        return f"PrefixedEnvSettingsSource(prefix={self.prefix!r}, ignore_empty={self.ignore_empty})"


class ConfigFileSettingsSource(PydanticBaseSettingsSource):
    """Reads an optional config file whose format is detected by extension.

    ``name`` is the file name without extension. The directory is searched
    for ``<name>.toml``, ``<name>.json``, ``<name>.yaml`` and ``<name>.yml``
    in that order; the first existing file is parsed with the matching
    pydantic-settings file source. A missing file yields an empty mapping,
    unless ``required`` is set.

    Raises:
        ConfigurationFileError: The file exists but cannot be read.
        ConfigurationParseError: The file contents are malformed.
    """

    def __init__(
        self,
        settings_cls: Type[BaseSettings],
        name: str,
        directory: Union[str, Path],
        required: bool = False,
    ):
        super().__init__(settings_cls)
        self.name = name
        self.directory = Path(directory)
        self.required = required
        self._data: Optional[Dict[str, Any]] = None

    def resolve(self) -> Optional[Tuple[Path, str]]:
        """Return the first existing config file and its format, if any."""
        for suffix, file_format in CONFIG_FILE_FORMATS:
            path = self.directory / f"{self.name}{suffix}"
            if path.is_file():
                return path, file_format
        return None

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self().get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = self._load()
        return self._data

    def _load(self) -> Dict[str, Any]:
        resolved = self.resolve()
        if resolved is None:
            if self.required:
                raise ConfigurationFileError(
                    f"Config file '{self.name}' not found in {self.directory}",
                    code="CONFIG_FILE_MISSING",
                    details={"name": self.name, "directory": str(self.directory)},
                )
            return {}

        path, file_format = resolved
        try:
            data = self._parse(path, file_format)
        except OSError as e:
            raise ConfigurationFileError(
                f"Cannot read config file {path}: {e}",
                code="CONFIG_FILE_UNREADABLE",
                details={"path": str(path)},
            ) from e
        except (ValueError, TypeError, yaml.YAMLError) as e:
            raise ConfigurationParseError(
                f"Malformed {file_format} in config file {path}: {e}",
                code="CONFIG_FILE_MALFORMED",
                details={"path": str(path), "format": file_format},
            ) from e

        logger.debug(f"Loaded {len(data)} key(s) from config file {path}")
        return data

    def _parse(self, path: Path, file_format: str) -> Dict[str, Any]:
        if file_format == "toml":
            source: PydanticBaseSettingsSource = TomlConfigSettingsSource(self.settings_cls, toml_file=path)
        elif file_format == "json":
            source = JsonConfigSettingsSource(self.settings_cls, json_file=path)
        else:
            source = YamlConfigSettingsSource(self.settings_cls, yaml_file=path)
        return dict(source())

    def __repr__(self) -> str:
        return f"ConfigFileSettingsSource(name={self.name!r}, directory={str(self.directory)!r})"
