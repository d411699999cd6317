"""Kernel configuration — environment-driven settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``EVOLUTION_KERNEL_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EVOLUTION_KERNEL_",
        env_file=".env",
        extra="ignore",
    )

    # Storage
    database_path: str = ":memory:"

    # Listings
    default_match_limit: int = 50
    default_list_limit: int = 50

    # Authorization
    editor_role: str = "editeur"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"                # "json" | "text"


@lru_cache
def get_settings() -> Settings:
    return Settings()
