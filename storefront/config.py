from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Bookstore API
    api_base_url: str = "http://10.0.2.2:8000/api"
    api_token: Optional[str] = None
    api_refresh_token: Optional[str] = None
    request_timeout: float = 15.0

    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"

    # Storefront behaviour
    ad_load_timeout: float = 5.0
    search_debounce_ms: int = 500
    default_page_size: int = 20
    default_ads_limit: int = 10

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
