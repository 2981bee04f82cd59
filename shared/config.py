"""
Centralized configuration for the fortress core.

All settings are loaded from environment variables with sensible defaults.
Subsystem settings are namespaced by prefix (SUPABASE_*, DNS_*, ...).
"""

from functools import lru_cache
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Taqwa Fortress"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Package name of this application on the device
    app_package_name: str = "com.example.takwafortress"

    # Supabase (remote account store + identity)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""
    accounts_table: str = "users"

    # Local encrypted-at-rest storage is handled by the platform; we only
    # pick the directory.
    local_state_dir: Path = Path.home() / ".fortress"

    # Routing
    account_cache_ttl_seconds: int = 30

    # Content filtering
    dns_filter_host: str = "adult-filter-dns.cleanbrowsing.org"
    managed_browser_package: str = "com.android.chrome"

    # Activation
    rollback_on_activation_failure: bool = True


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
