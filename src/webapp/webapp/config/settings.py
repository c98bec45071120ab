# ABOUTME: Typed settings record for the web application
# ABOUTME: Holds the fully merged configuration handed to the web framework at startup

from pathlib import Path
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

# Static assets shipped next to the package
DEFAULT_STATIC_DIR = str(Path(__file__).resolve().parent.parent / "public")
DEFAULT_STATIC_ROUTE = "/static"


class Settings(BaseSettings):
    """Represents the complete, merged configuration for the application.

    Values are never read from the process environment by this class itself.
    Layered loading (defaults, environment mapping, config files, prefixed
    environment variables) is performed by `webapp.config.loader`, which
    hands the merged mapping to the constructor. Constructing `Settings()`
    directly yields the built-in defaults only.

    The framework-facing fields are optional because the web framework
    provides its own defaults for each of them.

    Attributes:
        static_dir: The disk path that contains static assets.
        static_route: The route prefix used when mounting the static file handler.
        address: The address for the app to listen on.
        port: The port the app will bind to.
        log: The framework log level. One of "critical", "normal", "debug" or "off".
        workers: The number of workers that should serve requests.
        secret_key: The app's secret key, used to sign cookies.
        extras: Additional config values for framework extensions.
    """

    static_dir: str = Field(
        default=DEFAULT_STATIC_DIR,
        description="The disk path that contains static assets.",
    )
    static_route: str = Field(
        default=DEFAULT_STATIC_ROUTE,
        description="The route prefix to use when mounting the static file handler.",
    )

    address: Optional[str] = Field(
        default=None,
        description="The address for the app to listen on.",
    )
    port: Optional[int] = Field(
        default=None,
        ge=0,
        le=65535,
        description="The port the app will bind to.",
    )
    log: Optional[str] = Field(
        default=None,
        description='The level of logging the web framework should perform: "critical", "normal", "debug" or "off".',
    )
    workers: Optional[int] = Field(
        default=None,
        ge=0,
        le=65535,
        description="The number of workers that should serve requests.",
    )
    secret_key: Optional[str] = Field(
        default=None,
        description="The app's secret key, used to sign cookies.",
    )
    extras: Dict[str, str] = Field(
        default_factory=dict,
        description="Additional config values forwarded to the web framework unchanged.",
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Only the merged mapping passed by the loader is honoured
        return (init_settings,)


# Keys that must never appear in `extras`, because they are fields on `Settings`
RESERVED_EXTRA_KEYS = frozenset(Settings.model_fields)
