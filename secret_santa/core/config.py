"""Application configuration via environment variables."""

import secrets

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Secret Santa"
    debug: bool = False
    # Unset means a random key per process: tokens die with a restart
    secret_key: str = Field(default_factory=lambda: secrets.token_hex(32))
    log_dir: str = "~/.logs/secret_santa"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./secret_santa.db"

    # Admin access
    admin_password: str = ""  # Empty disables admin login
    admin_token_ttl_minutes: int = 12 * 60

    # Draw settings
    assignment_max_attempts: int = 100
    assignment_single_cycle: bool = False  # Force one gift chain through everybody

    # Email delivery (SendGrid)
    sendgrid_api_key: str = ""
    email_from: str = ""
    email_subject: str = "🎁 Secret Santa - your assignment"
    event_name: str = "Secret Santa"
    gift_budget: str = ""  # Free text, e.g. "20-50 EUR"; omitted from emails when empty


settings = Settings()
