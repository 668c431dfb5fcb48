"""Configuration and settings for the PR review agent."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # GitHub REST API token
    github_token: str
    # Optional: verify X-Hub-Signature-256 when set
    github_webhook_secret: str | None = None

    # Anthropic API
    anthropic_api_key: str
    anthropic_model: str = "claude-sonnet-4-20250514"

    # Username the bot is mentioned as (@github-bot)
    bot_username: str = "github-bot"

    # Hosting API call behaviour
    file_fetch_concurrency: int = 8
    github_max_retries: int = 0
    github_retry_base_delay: float = 0.5
    github_retry_max_delay: float = 8.0

    # Observability
    logfire_token: str | None = None
    logfire_env: str = "development"

    # Server config
    host: str = "0.0.0.0"
    port: int = 3000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
