"""Shared test setup."""

import os

# Settings are read at import time by the app module
os.environ.setdefault("GITHUB_TOKEN", "test-github-token")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("LOGFIRE_SEND_TO_LOGFIRE", "false")

import pytest  # noqa: E402

from pr_review_agent.config import Settings  # noqa: E402


@pytest.fixture
def make_settings():
    """Build Settings without reading .env, overriding selected fields."""

    def _make(**overrides) -> Settings:
        values = {
            "github_token": "test-github-token",
            "anthropic_api_key": "test-anthropic-key",
            "github_webhook_secret": None,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
