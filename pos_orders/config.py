from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "INFO"

    # Storage
    db_path: str = "data/pos.db"
    db_timeout_seconds: float = 30.0

    # Identifier generation
    id_digits: int = 6
    id_max_attempts: int = 100

    # Orders
    display_number_max: int = 99
    strict_refunds: bool = False

    # Seed data settings
    default_seed_days: int = 7
    default_seed_orders_per_day: int = 40
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
