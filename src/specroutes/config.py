"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from SPECROUTES_* environment variables (or .env)."""

    model_config = SettingsConfigDict(
        env_prefix="SPECROUTES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Specification source
    spec_path: Optional[Path] = None
    route_prefix: Optional[str] = None

    # Route table
    db_path: Optional[Path] = None

    # Backend handler
    handler_name: str = "PickupGamesIntegration"
    handler_runtime: str = "provided.al2023"
    handler_code_path: str = ""

    # Authorizer
    authorizer_name: str = "PickupGamesAPIAuthorizer"
    user_pool_id: str = ""
    client_ids: tuple[str, ...] = ()

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
