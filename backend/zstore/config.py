"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Discord ids kept as strings: snowflakes exceed float precision
    - access_gate_fail_open defaults to True: a policy-store outage must not take the
      storefront down; operators can flip it to fail closed
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Policy store (ban list + store status)
    database_url: str = (
        "postgresql+asyncpg://zstore:zstore@db:5432/zstore"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Railway provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 10
    database_max_overflow: int = 5

    # Discord
    discord_token: str = "discord-token-placeholder"
    discord_api_base: str = "https://discord.com/api/v10"
    discord_timeout_seconds: float = 15.0
    guild_id: str = ""
    category_id: str = ""
    owner_id: str = ""

    # Tickets
    close_delay_seconds: float = 10

    # Access gate
    admin_path: str = "panelowner"
    access_gate_fail_open: bool = True

    # API
    host: str = "0.0.0.0"  # nosec B104
    port: int = 8080
    cors_origins: list[str] = ["http://localhost:8080"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
