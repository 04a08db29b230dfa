"""
Secure Configuration Management

Provides centralized, validated configuration for the dashboard data layer.
Replaces ad-hoc os.getenv() calls with strict validation and fail-fast behavior.

Usage:
    from strikeboard.secure_config import get_config

    config = get_config()
    autostrike = config.get_autostrike_config()
    print(autostrike.base_url)

Environment:
    AUTOSTRIKE_API_BASE_URL     Base URL of the AutoStrike REST API (required)
    AUTOSTRIKE_API_TOKEN        Bearer token passed through to the API (optional)
    AUTOSTRIKE_REQUEST_TIMEOUT  Per-request deadline in seconds (default: 30)
    AUTOSTRIKE_CACHE_TTL        Query cache freshness window in seconds (default: 60)

Raises:
    ConfigurationError: If configuration is missing or invalid
"""

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

from .domain.constants import api_config, cache_config

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}
PLACEHOLDERS = ["your_token", "example", "placeholder", "xxx", "replace_me", "changeme"]


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class AutoStrikeConfig:
    """
    Validated AutoStrike API configuration.
    """

    base_url: str
    api_token: str | None = None
    request_timeout: float = api_config.DEFAULT_TIMEOUT_SECONDS
    cache_ttl: float = cache_config.DEFAULT_TTL_SECONDS

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """
        Validate AutoStrike configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.base_url:
            raise ConfigurationError("AUTOSTRIKE_API_BASE_URL is required")

        parsed = urlparse(self.base_url)
        if parsed.scheme == "http":
            if parsed.hostname not in LOCAL_HOSTS:
                raise ConfigurationError(f"AUTOSTRIKE_API_BASE_URL must use HTTPS: {self.base_url}")
        elif parsed.scheme != "https":
            raise ConfigurationError(f"AUTOSTRIKE_API_BASE_URL must be an absolute URL: {self.base_url}")

        if not parsed.hostname:
            raise ConfigurationError(f"AUTOSTRIKE_API_BASE_URL has no host: {self.base_url}")

        if self.api_token is not None:
            if any(placeholder in self.api_token.lower() for placeholder in PLACEHOLDERS):
                raise ConfigurationError("AUTOSTRIKE_API_TOKEN contains a placeholder value")

        if self.request_timeout <= 0:
            raise ConfigurationError(f"AUTOSTRIKE_REQUEST_TIMEOUT must be positive: {self.request_timeout}")

        if self.cache_ttl < 0:
            raise ConfigurationError(f"AUTOSTRIKE_CACHE_TTL must not be negative: {self.cache_ttl}")


def _read_seconds(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds: {raw!r}") from None


class SecureConfig:
    """
    Centralized secure configuration manager.

    Loads and validates all application configuration from environment variables.
    Provides fail-fast behavior to catch configuration issues early.
    """

    def __init__(self):
        """Initialize configuration (loads .env file)."""
        load_dotenv()

    def get_autostrike_config(self) -> AutoStrikeConfig:
        """
        Get validated AutoStrike API configuration.

        Returns:
            AutoStrikeConfig: Validated configuration

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        token = os.getenv("AUTOSTRIKE_API_TOKEN") or None

        return AutoStrikeConfig(
            base_url=(os.getenv("AUTOSTRIKE_API_BASE_URL") or "").strip(),
            api_token=token,
            request_timeout=_read_seconds("AUTOSTRIKE_REQUEST_TIMEOUT", api_config.DEFAULT_TIMEOUT_SECONDS),
            cache_ttl=_read_seconds("AUTOSTRIKE_CACHE_TTL", cache_config.DEFAULT_TTL_SECONDS),
        )


_config_instance = None


def get_config() -> SecureConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        SecureConfig: The configuration manager
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = SecureConfig()
    return _config_instance


def validate_config_on_startup(required_services: list[str]) -> None:
    """
    Validate required configuration at application startup.

    Args:
        required_services: List of services to validate (e.g., ['autostrike'])

    Raises:
        ConfigurationError: If any required configuration is missing or invalid
        ValueError: If a service name is unknown
    """
    config = get_config()

    for service in required_services:
        if service == "autostrike":
            config.get_autostrike_config()  # Raises if invalid
        else:
            raise ValueError(f"Unknown service: {service}")
