# staffdocs/tests/test_config.py
"""
Unit tests for settings loading.
"""

import logging
import os
from pathlib import Path

import pytest

from staffdocs.config import ClientSettings, configure_logging, load_settings
from staffdocs.models import BackendProfile


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "STAFFDOCS_ENV",
        "STAFFDOCS_API_URL",
        "STAFFDOCS_BACKEND_PROFILE",
        "STAFFDOCS_TIMEOUT",
        "STAFFDOCS_TOKEN_FILE",
        "STAFFDOCS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path):
    settings = load_settings(env_file=str(tmp_path / "missing.env"))

    assert settings.environment == "local"
    assert settings.backend_profile == BackendProfile.FILE_LINKING
    assert settings.resolve_environment().api_url == "http://localhost:5055/api"


def test_environment_variables(monkeypatch, tmp_path):
    monkeypatch.setenv("STAFFDOCS_API_URL", "https://hr.example.com/api/")
    monkeypatch.setenv("STAFFDOCS_BACKEND_PROFILE", "DOCUMENT_RESOURCE")
    monkeypatch.setenv("STAFFDOCS_TIMEOUT", "5")
    monkeypatch.setenv("STAFFDOCS_TOKEN_FILE", str(tmp_path / "t.json"))

    settings = load_settings(env_file=None)

    assert settings.resolve_environment().api_url == "https://hr.example.com/api"
    assert settings.backend_profile == BackendProfile.DOCUMENT_RESOURCE
    assert settings.timeout == 5.0
    assert settings.token_file == Path(tmp_path / "t.json")


def test_explicit_values_win(monkeypatch):
    monkeypatch.setenv("STAFFDOCS_API_URL", "https://env.example.com/api")

    settings = load_settings(env_file=None, api_url="https://arg.example.com/api", timeout=None)

    assert settings.api_url == "https://arg.example.com/api"
    assert settings.timeout == 30.0


def test_dotenv_file(monkeypatch, tmp_path):
    monkeypatch.setattr(os, "environ", dict(os.environ))
    env_file = tmp_path / ".env"
    env_file.write_text("STAFFDOCS_API_URL=https://dotenv.example.com/api\n")

    settings = load_settings(env_file=str(env_file))

    assert settings.api_url == "https://dotenv.example.com/api"


def test_unknown_environment_without_url_falls_back_to_local():
    env = ClientSettings(environment="qa").resolve_environment()

    assert env.name == "qa"
    assert env.api_url == "http://localhost:5055/api"


def test_configure_logging_uses_log_level_setting(monkeypatch):
    monkeypatch.setenv("STAFFDOCS_LOG_LEVEL", "debug")
    package_logger = logging.getLogger("staffdocs")
    monkeypatch.setattr(package_logger, "level", package_logger.level)

    configure_logging()

    assert package_logger.level == logging.DEBUG
