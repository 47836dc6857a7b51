# staffdocs/config.py
"""
Configuration for the StaffDocs SDK.

Settings come from (lowest to highest priority): built-in defaults, an
optional ``.env`` file, ``STAFFDOCS_*`` environment variables, and explicit
client constructor arguments.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any

from dotenv import load_dotenv
from pydantic import BaseModel

from .models import BackendProfile

logger = logging.getLogger(__name__)


# Largest file the client will try to upload
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

DEFAULT_TOKEN_FILE = Path.home() / ".staffdocs" / "tokens.json"


@dataclass
class Environment:
    """SDK environment configuration."""
    name: str
    api_url: str


# Predefined environments
ENVIRONMENTS = {
    "local": Environment(name="local", api_url="http://localhost:5055/api"),
}


class ClientSettings(BaseModel):
    """Resolved client settings."""

    environment: str = "local"
    api_url: Optional[str] = None
    backend_profile: BackendProfile = BackendProfile.FILE_LINKING
    timeout: float = 30.0
    token_file: Optional[Path] = None
    log_level: str = "INFO"

    def resolve_environment(self) -> Environment:
        """Pick the environment, letting ``api_url`` override its URL."""
        if self.environment in ENVIRONMENTS:
            base = ENVIRONMENTS[self.environment]
            env = Environment(name=base.name, api_url=base.api_url)
        else:
            env = Environment(name=self.environment, api_url="")

        if self.api_url:
            env.api_url = self.api_url

        if not env.api_url:
            env.api_url = ENVIRONMENTS["local"].api_url

        env.api_url = env.api_url.rstrip("/")
        return env


def _settings_from_env() -> Dict[str, Any]:
    values = {}

    if environment := os.getenv("STAFFDOCS_ENV"):
        values["environment"] = environment
    if api_url := os.getenv("STAFFDOCS_API_URL"):
        values["api_url"] = api_url
    if profile := os.getenv("STAFFDOCS_BACKEND_PROFILE"):
        values["backend_profile"] = profile.lower()
    if timeout := os.getenv("STAFFDOCS_TIMEOUT"):
        values["timeout"] = float(timeout)
    if token_file := os.getenv("STAFFDOCS_TOKEN_FILE"):
        values["token_file"] = token_file
    if log_level := os.getenv("STAFFDOCS_LOG_LEVEL"):
        values["log_level"] = log_level.upper()

    return values


def load_settings(env_file: Optional[str] = ".env", **overrides) -> ClientSettings:
    """
    Load client settings.

    Args:
        env_file: dotenv file to read first; real environment variables win
        **overrides: explicit values, ``None`` entries are ignored
    """
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    values = _settings_from_env()
    values.update({k: v for k, v in overrides.items() if v is not None})

    settings = ClientSettings(**values)
    logger.debug(f"Settings loaded (environment: {settings.environment}, profile: {settings.backend_profile.value})")
    return settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    Basic console logging for scripts using the SDK.

    Without ``level`` the ``STAFFDOCS_LOG_LEVEL`` setting is used.
    """
    name = (level or load_settings().log_level).upper()
    numeric = getattr(logging, name, logging.INFO)
    logging.basicConfig(level=numeric, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("staffdocs").setLevel(numeric)
