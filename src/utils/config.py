"""Configuration utility for gitcom.

This module provides centralized configuration management with:
- Environment variables as the only source
- Type-safe access to configuration values
"""

import os
from typing import Any

DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITHUB_MAX_PAGES = 100
DEFAULT_REQUEST_TIMEOUT_SECONDS = 60
DEFAULT_TOKEN_COUNT_MODEL = "gpt-4"
DEFAULT_PROJECT_URL = "https://github.com/R44VC0RP/gitcom.dev"
DEFAULT_PORT = 3000


def parse_config_value(value: str) -> str | bool | int | None:
    if value.lower() == "true":
        return True
    elif value.lower() == "false":
        return False
    else:
        # Try to parse as a number
        try:
            return int(value)
        except ValueError:
            return value


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value from environment variables.

    Args:
        key: Configuration key name (e.g., "GITHUB_API_URL")
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    env_value = os.environ.get(key)
    if env_value is not None:
        return parse_config_value(env_value)

    return default


def get_config_value_str(key: str) -> str | None:
    """
    Get a configuration value from environment variables. But sometimes you just want a string.
    """
    return os.environ.get(key)


def get_github_token() -> str | None:
    """Get the fallback GitHub token used when a request does not carry one."""
    # Tokens are opaque strings, never parse them
    token = get_config_value_str("GITHUB_TOKEN")
    return token or None


def get_github_api_url() -> str:
    """Get the GitHub REST API base URL, without a trailing slash."""
    url = get_config_value_str("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL
    return url.rstrip("/")


def get_github_max_pages() -> int:
    """Maximum number of pages followed for a single paginated list."""
    return int(get_config_value("GITHUB_MAX_PAGES", DEFAULT_GITHUB_MAX_PAGES))


def get_request_timeout_seconds() -> float:
    """Overall deadline for fetching and rendering one request."""
    return float(get_config_value("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS))


def get_token_count_model() -> str:
    """Model whose tokenizer is used for token accounting."""
    return get_config_value_str("TOKEN_COUNT_MODEL") or DEFAULT_TOKEN_COUNT_MODEL


def get_project_url() -> str:
    return get_config_value_str("PROJECT_URL") or DEFAULT_PROJECT_URL


def get_port() -> int:
    return int(get_config_value("PORT", DEFAULT_PORT))


def get_gitcom_environment() -> str:
    return get_config_value_str("GITCOM_ENVIRONMENT") or "local"
