"""Customers API — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./customers.db"
    db_connect_timeout: float = 5.0
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # ── HTTP listener ─────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 9999

    # ── App ───────────────────────────────────────────────
    app_name: str = "Customers API"
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
