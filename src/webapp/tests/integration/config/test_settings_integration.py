# ABOUTME: Integration tests for the settings lifecycle
# ABOUTME: Tests loading, projection and application startup end to end

import sys
from unittest.mock import patch

import pytest
from flask import Flask

from loguru import logger

from webapp.app import create_app, main
from webapp.config.loader import load_settings
from webapp.config.logging import LoggingLevel
from webapp.config.projector import to_framework_config


class TestSettingsLifecycle:
    """End-to-end tests from sources to a configured Flask application."""

    @pytest.mark.integration
    @pytest.mark.config
    def test_container_environment(self, tmp_path, config_dir, write_config):
        """Test a container-style setup with files and APP_ variables."""
        public = tmp_path / "public"
        public.mkdir()
        (public / "hello.txt").write_text("hello")

        write_config("config", {"log": "normal", "workers": 1, "static_route": "/static"})
        write_config("config-production", {"log": "critical", "secret_key": "file-secret"}, "yaml")
        environ = {
            "APP_ENV": "production",
            "APP_PORT": "80",
            "APP_ADDRESS": "0.0.0.0",
            "APP_STATIC_DIR": str(public),
            "APP_DATABASE_URL": "postgres://db/app",
            "PORT": "8080",
        }

        settings = load_settings(environ=environ, config_dir=config_dir)
        conf = to_framework_config(settings, tmp_path)
        app = create_app(conf)

        assert isinstance(app, Flask)
        assert app.config["SERVER_ADDRESS"] == "0.0.0.0"
        assert app.config["SERVER_PORT"] == 80
        assert app.config["LOG_LEVEL"] is LoggingLevel.CRITICAL
        assert app.config["SECRET_KEY"] == "file-secret"
        assert app.config["DATABASE_URL"] == "postgres://db/app"
        assert app.config["ENV"] == "production"

        response = app.test_client().get("/static/hello.txt")
        assert response.status_code == 200
        assert response.data == b"hello"
        response.close()

    @pytest.mark.integration
    @pytest.mark.config
    def test_custom_static_route(self, tmp_path, config_dir):
        """Test that the static handler is mounted at the configured route."""
        public = tmp_path / "assets"
        public.mkdir()
        (public / "app.css").write_text("body {}")

        environ = {"APP_STATIC_DIR": str(public), "APP_STATIC_ROUTE": "/assets"}
        app = create_app(to_framework_config(load_settings(environ=environ, config_dir=config_dir), tmp_path))

        client = app.test_client()
        response = client.get("/assets/app.css")
        assert response.status_code == 200
        response.close()
        assert client.get("/static/app.css").status_code == 404

    @pytest.mark.integration
    @pytest.mark.config
    def test_secret_key_signs_sessions(self, tmp_path, config_dir):
        """Test that the projected secret key enables signed sessions."""
        settings = load_settings(environ={"APP_SECRET_KEY": "signing-key"}, config_dir=config_dir)
        app = create_app(to_framework_config(settings, tmp_path))

        @app.route("/login")
        def login():
            from flask import session

            session["user"] = "alice"
            return "ok"

        response = app.test_client().get("/login")
        assert response.status_code == 200
        assert "session=" in response.headers["Set-Cookie"]


class TestMainEntryPoint:
    """Tests for the process entry point."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        """Give later tests a default sink back after main reconfigures logging."""
        yield
        logger.remove()
        logger.add(sys.__stderr__)

    @pytest.mark.integration
    @pytest.mark.config
    def test_runs_server_with_projected_options(self, config_dir, monkeypatch):
        """Test that main starts the server with the merged settings."""
        monkeypatch.chdir(config_dir)
        environ = {"APP_ADDRESS": "0.0.0.0", "APP_PORT": "8081", "APP_WORKERS": "3", "APP_LOG": "off"}

        with patch.object(Flask, "run") as run:
            status = main(environ)

        assert status == 0
        run.assert_called_once_with(host="0.0.0.0", port=8081, threaded=False, processes=3)

    @pytest.mark.integration
    @pytest.mark.config
    def test_invalid_settings_abort_before_serving(self, config_dir, monkeypatch, capsys):
        """Test that a configuration error exits with status 1 without starting the server."""
        monkeypatch.chdir(config_dir)

        with patch.object(Flask, "run") as run:
            status = main({"APP_PORT": "not-a-port"})

        assert status == 1
        run.assert_not_called()
        assert "Failed to load settings" in capsys.readouterr().err

    @pytest.mark.integration
    @pytest.mark.config
    def test_malformed_file_aborts_before_serving(self, config_dir, monkeypatch):
        """Test that a malformed config file exits with status 1."""
        (config_dir / "config.toml").write_text("port = [\n")
        monkeypatch.chdir(config_dir)

        with patch.object(Flask, "run") as run:
            status = main({})

        assert status == 1
        run.assert_not_called()

    @pytest.mark.integration
    @pytest.mark.config
    def test_framework_named_extras_do_not_break_startup(self, config_dir, monkeypatch):
        """Test that APP_ variables named like server keys leave the projected options intact."""
        monkeypatch.chdir(config_dir)
        environ = {
            "APP_PORT": "8080",
            "APP_LOG": "off",
            "APP_SERVER_PORT": "9999",
            "APP_LOG_LEVEL": "debug",
            "APP_SERVER_WORKERS": "many",
        }

        with patch.object(Flask, "run") as run:
            status = main(environ)

        assert status == 0
        run.assert_called_once_with(host="127.0.0.1", port=8080, threaded=True, processes=1)

    @pytest.mark.integration
    @pytest.mark.config
    def test_loader_debug_lines_hidden_during_startup(self, config_dir, write_config, monkeypatch, capsys):
        """Test that source merging is not echoed before the configured level applies."""
        write_config("config", {"log": "off", "port": 8082})
        monkeypatch.chdir(config_dir)

        with patch.object(Flask, "run"):
            status = main({"APP_WORKERS": "2"})

        assert status == 0
        assert "Merging" not in capsys.readouterr().err
