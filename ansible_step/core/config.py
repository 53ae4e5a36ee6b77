"""
Configuration management

Centralized settings using Pydantic BaseSettings for type-safe configuration
with environment variable support.

Also provides data directory management for the credential vault.
"""

import logging
import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def get_data_dir() -> Path:
    """
    Get the data directory (credential vault, encryption key)

    Priority order:
    1. ANSIBLE_STEP_DATA environment variable
    2. Fallback: ~/.ansible-step (user's home directory)

    Returns:
        Path to data directory
    """
    env_path = os.getenv("ANSIBLE_STEP_DATA")
    if env_path:
        path = Path(env_path).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Using data directory from ANSIBLE_STEP_DATA: {path}")
        return path

    fallback = Path.home() / ".ansible-step"
    fallback.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Using fallback data directory: {fallback}")
    return fallback


class Settings(BaseSettings):
    """
    Application settings with environment variable support

    Settings can be overridden via environment variables:
    - LOG_LEVEL=DEBUG
    - INSTALLATIONS='{"ansible-9": "/opt/ansible-9/bin"}'
    - KILL_TIMEOUT_SECONDS=30
    """

    # Credential vault directory (None means get_data_dir())
    vault_path: Path | None = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Named Ansible installations: name -> directory holding the executables
    installations: dict[str, Path] = {}

    # Grace period between terminate() and kill() when an invocation is interrupted
    kill_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get application settings (singleton)

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
