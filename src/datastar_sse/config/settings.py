"""Configuration settings using Pydantic."""

from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from datastar_sse.errors import ConfigurationError, ErrorCode

DATASTAR_CDN_URL = "https://cdn.jsdelivr.net/gh/starfederation/datastar/bundles/datastar.js"


def _find_and_load_env_file() -> str | None:
    """Find .env file in the current directory and load it."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
        return str(env_path)
    return None


class Settings(BaseSettings):
    """Main configuration for datastar-sse."""

    model_config = SettingsConfigDict(
        env_file=None,  # loaded via dotenv in get_settings()
        env_file_encoding="utf-8",
        env_prefix="DATASTAR_",
        case_sensitive=False,
        extra="ignore",
    )

    # General settings
    env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_logs: bool = False

    # Protocol defaults
    default_retry_duration: int = Field(1000, ge=0, description="retry: value in milliseconds")
    signals_query_param: str = "datastar"
    event_comment: str = "dev"

    # Demo server settings
    http_host: str = "0.0.0.0"
    http_port: int = 8000
    clock_interval: float = Field(1.0, gt=0, description="Seconds between /clock pushes")
    datastar_script_url: str = DATASTAR_CDN_URL

    @field_validator("signals_query_param", "event_comment")
    @classmethod
    def reject_line_breaks(cls, v: str) -> str:
        """Values rendered on the wire must fit on one line."""
        if "\n" in v or "\r" in v:
            raise ValueError("must not contain line breaks")
        return v

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    def is_development(self) -> bool:
        """Check if running in development."""
        return self.env == "development"


_settings_instance: Settings | None = None


def get_settings(reload: bool = False) -> Settings:
    """Get settings instance with optional hot reload.

    Args:
        reload: If True, reload settings from environment/file

    Returns:
        Settings instance (singleton by default)

    Raises:
        ConfigurationError: If the environment holds invalid values
    """
    global _settings_instance

    if reload or _settings_instance is None:
        _find_and_load_env_file()
        try:
            _settings_instance = Settings()
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid DATASTAR_* configuration",
                ErrorCode.CONFIG_LOAD_FAILED,
                {"errors": e.errors(include_url=False, include_context=False, include_input=False)},
            ) from e

    return _settings_instance


def reload_settings() -> Settings:
    """Force reload settings from environment/file.

    Returns:
        Newly loaded Settings instance
    """
    return get_settings(reload=True)
