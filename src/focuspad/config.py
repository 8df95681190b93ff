"""Configuration management for FocusPad."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FOCUSPAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase
    supabase_url: str = Field(
        default="",
        description="Supabase project URL (empty disables the remote store)",
    )
    supabase_key: str = Field(default="", description="Supabase anon API key")
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for a single remote request",
    )

    # Principal
    access_token: str = Field(
        default="",
        description="Access token of the signed-in user (defaults to the anon key)",
    )
    user_id: str = Field(
        default="",
        description="ID of the signed-in user (empty means not authenticated)",
    )

    # Autosave
    save_delay: float = Field(
        default=0.5,
        ge=0.05,
        le=10.0,
        description="Idle window in seconds before a pending edit is written back",
    )

    # Local storage
    database_path: Path = Field(
        default=Path("data/focuspad.db"),
        description="Path to the SQLite file backing local key/value storage",
    )
    pin_order_key: str = Field(
        default="focuspad_pin_order",
        description="Local storage key holding the pinned note order",
    )
    settings_key: str = Field(
        default="focuspad_settings",
        description="Local storage key holding editor preferences",
    )

    log_level: str = Field(default="WARNING", description="Logging level for the CLI")

    @property
    def database_url(self) -> str:
        """SQLAlchemy database URL."""
        return f"sqlite:///{self.database_path}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
