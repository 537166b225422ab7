"""Application configuration management."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Defaults shared by all actions, overridable through CS_ACTIONS_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="CS_ACTIONS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)

    # HTTP defaults
    default_proxy_port: int = Field(default=8080, ge=1, le=65535)
    connect_timeout: int = Field(default=0, ge=0)  # seconds, 0 = infinite
    socket_timeout: int = Field(default=0, ge=0)
    response_character_set: str = Field(default="ISO-8859-1")
    connections_max_per_route: int = Field(default=2, ge=1)
    connections_max_total: int = Field(default=20, ge=1)

    # Terraform Cloud
    terraform_host: str = Field(default="app.terraform.io")

    # ABBYY Cloud OCR task polling
    abbyy_time_to_wait: int = Field(default=20, ge=0)
    abbyy_number_of_retries: int = Field(default=5, ge=1)

    # Action runner API
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    reload: bool = Field(default=False)
    admin_token: str = Field(default="admin-secret-token")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
