"""Configuration management using Pydantic Settings"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration loaded from PLAID_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="PLAID_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Credentials
    client_id: str = ""
    secret: str = ""

    # "sandbox" or "production"
    environment: str = "sandbox"

    # HTTP Client
    timeout_seconds: float = 30.0
    user_agent: str = "plaid-python-client"

    # Service
    service_name: str = "plaid-client"
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read the environment once, on first use rather than at import"""
    return Settings()
