"""
Tests for application settings.
"""
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from errorcode_viewer.config import (
    PACKAGE_DATA_DIR,
    Settings,
    configure_logging,
    get_settings,
)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.API_BASE_URL == "http://localhost:3000/api"
        assert settings.DATA_SOURCE == "api"
        assert settings.PAGE_SIZE == 10
        assert settings.DATABASES_DIR is None
        assert settings.database_path == PACKAGE_DATA_DIR / "error_database.json"
        assert settings.catalog_path == PACKAGE_DATA_DIR / "folders.json"

    def test_environment_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ERRORCODE_VIEWER_PAGE_SIZE", "25")
        monkeypatch.setenv("ERRORCODE_VIEWER_DATA_SOURCE", "local")
        monkeypatch.setenv("ERRORCODE_VIEWER_DATABASES_DIR", str(tmp_path))

        settings = Settings(_env_file=None)

        assert settings.PAGE_SIZE == 25
        assert settings.DATA_SOURCE == "local"
        assert settings.DATABASES_DIR == Path(tmp_path)

    def test_invalid_data_source(self, monkeypatch):
        monkeypatch.setenv("ERRORCODE_VIEWER_DATA_SOURCE", "ftp")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_get_settings_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()

    def test_configure_logging(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        configure_logging(Settings(_env_file=None, LOG_LEVEL="debug"))

        assert calls[0]["level"] == logging.DEBUG
        assert "%(levelname)s" in calls[0]["format"]


class TestCommandLineOverrides:
    """Tests for the command line options of the application entry point."""

    def test_no_overrides_keeps_settings(self):
        from errorcode_viewer.app.main import apply_overrides, parse_args

        settings = Settings(_env_file=None)
        assert apply_overrides(settings, parse_args([])) is settings

    def test_overrides(self):
        from errorcode_viewer.app.main import apply_overrides, parse_args

        args = parse_args([
            "--data-source", "local",
            "--api-url", "http://api.test/api",
            "-platform", "offscreen",
        ])
        settings = apply_overrides(Settings(_env_file=None), args)

        assert settings.DATA_SOURCE == "local"
        assert settings.API_BASE_URL == "http://api.test/api"
        assert settings.LOG_LEVEL == "INFO"

    def test_invalid_data_source(self):
        from errorcode_viewer.app.main import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--data-source", "ftp"])
