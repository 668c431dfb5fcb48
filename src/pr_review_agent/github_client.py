"""GitHub REST client access with optional retry on transient failures."""

import asyncio
import random
from collections.abc import Callable
from functools import lru_cache
from typing import Any, TypeVar

import logfire
import requests
from github import Auth, Github, GithubException

from pr_review_agent.config import get_settings

T = TypeVar("T")

# HTTP status codes worth retrying
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@lru_cache
def get_github_client() -> Github:
    """Get a GitHub client authenticated with the configured token."""
    settings = get_settings()
    return Github(auth=Auth.Token(settings.github_token))


def is_retryable(error: Exception) -> bool:
    """Check whether an exception from PyGithub is a transient failure."""
    if isinstance(error, GithubException):
        return error.status in RETRYABLE_STATUS_CODES
    return isinstance(error, (requests.ConnectionError, requests.Timeout))


def calculate_backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential backoff with full jitter for the given 0-indexed attempt."""
    capped_delay = min(base_delay * (2**attempt), max_delay)
    return random.uniform(0, capped_delay)


async def call_github(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking PyGithub call in a worker thread.

    Transient failures are retried up to settings.github_max_retries times
    (0 by default, so the first failure propagates).
    """
    settings = get_settings()
    max_retries = max(settings.github_max_retries, 0)

    for attempt in range(max_retries + 1):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except Exception as e:
            if attempt >= max_retries or not is_retryable(e):
                raise
            delay = calculate_backoff(
                attempt,
                settings.github_retry_base_delay,
                settings.github_retry_max_delay,
            )
            logfire.warn(
                f"[github] transient failure, retrying in {delay:.2f}s: {e}",
                attempt=attempt + 1,
                max_retries=max_retries,
            )
            await asyncio.sleep(delay)

    raise AssertionError("unreachable")
