import os
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "Newsletter Radar"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str
    database_echo: bool = False

    # Security
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours
    encryption_salt: str = os.getenv("ENCRYPTION_SALT", "newsletter-radar")

    # CORS - comma-separated list of allowed origins
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # IMAP sync
    imap_default_port: int = 993
    imap_default_mailbox: str = "INBOX"
    imap_sync_max_messages: int = 20  # per sync, bounds wall-clock time
    sync_rate_limit: str = "10/hour"

    @model_validator(mode='after')
    def validate_imap_config(self) -> 'Settings':
        """Validate IMAP sync limits"""
        if self.imap_sync_max_messages < 1:
            raise ValueError(
                "imap_sync_max_messages must be at least 1. "
                "Set IMAP_SYNC_MAX_MESSAGES environment variable or update .env file."
            )
        if not 0 < self.imap_default_port < 65536:
            raise ValueError(
                f"Invalid imap_default_port '{self.imap_default_port}'. "
                f"Must be between 1 and 65535"
            )
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=False
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
