"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables (prefix PIPE_)."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Pipe Pricing Calculator"
    debug: bool = False

    # ── Key-value storage ────────────────────────────────
    storage_backend: str = "file"  # "memory" | "file" | "mongo"
    storage_file_path: str = "./storage/pipe_pricing.json"

    # ── MongoDB ──────────────────────────────────────────
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "pipe_pricing"
    mongodb_collection: str = "kv_store"

    # ── Quoting ──────────────────────────────────────────
    history_limit: int = 50
    default_metal_price: float = 510.0
    currency_symbol: str = "₽"

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "PIPE_",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
