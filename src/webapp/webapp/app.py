# ABOUTME: Application factory and process entry point
# ABOUTME: Loads settings, projects them into Flask config and starts the server

import sys
from typing import Mapping, Optional

from flask import Config, Flask
from loguru import logger

from webapp.config.loader import load_settings
from webapp.config.logging import configure_for_level, setup_logging
from webapp.config.projector import server_options, to_framework_config
from webapp.exceptions import ConfigurationException


def create_app(conf: Config) -> Flask:
    """
    Create the Flask application from a projected config.

    The static file handler is mounted at ``STATIC_URL_PATH`` and serves
    ``STATIC_FOLDER``.

    Args:
        conf: Framework configuration produced by `to_framework_config`.

    Returns:
        The configured application.
    """
    app = Flask(
        __name__,
        static_folder=conf["STATIC_FOLDER"],
        static_url_path=conf["STATIC_URL_PATH"],
    )
    app.config.update(conf)
    return app


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Run the application.

    Until the configured log level is known, logging runs at the default
    INFO level. Configuration errors abort startup before any socket is bound.

    Returns:
        Process exit status.
    """
    setup_logging()
    try:
        settings = load_settings(environ=environ)
    except ConfigurationException as e:
        logger.error(f"Failed to load settings: {e.message}")
        return 1

    conf = to_framework_config(settings)
    configure_for_level(conf["LOG_LEVEL"])

    app = create_app(conf)
    options = server_options(conf)
    logger.info(f"Starting server on {options['host']}:{options['port']}")
    app.run(**options)
    return 0


if __name__ == "__main__":
    sys.exit(main())
