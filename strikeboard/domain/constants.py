"""
Application Constants

Centralized constants for analytics thresholds, API calls, caching and export.
Provides type-safe, immutable configuration values used across collectors and dashboards.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalyticsThresholds:
    """
    Score classification constants.

    Attributes:
        SCORE_TREND_EPSILON: Minimum score change (in score points) that counts as improving/declining
        SCORE_MIN: Lowest displayable security score
        SCORE_MAX: Highest displayable security score

    Example:
        >>> thresholds = analytics_thresholds
        >>> print(thresholds.SCORE_TREND_EPSILON)
        5.0
    """

    SCORE_TREND_EPSILON: float = 5.0
    """Changes within +/- epsilon are classified as stable (matches the AutoStrike server)"""

    SCORE_MIN: float = 0.0
    """Lowest displayable security score"""

    SCORE_MAX: float = 100.0
    """Highest displayable security score"""


@dataclass(frozen=True)
class APIConfig:
    """
    API call configuration constants.

    Attributes:
        DEFAULT_TIMEOUT_SECONDS: Default deadline for a single API call (30 seconds)
        MAX_CONNECTIONS: Connection pool size for the async HTTP client
        MAX_KEEPALIVE_CONNECTIONS: Persistent connections kept in the pool
    """

    DEFAULT_TIMEOUT_SECONDS: float = 30.0
    """Default deadline for a single API call"""

    MAX_CONNECTIONS: int = 20
    """Connection pool size for the async HTTP client"""

    MAX_KEEPALIVE_CONNECTIONS: int = 10
    """Persistent connections kept in the pool"""


@dataclass(frozen=True)
class CacheConfig:
    """
    Query cache constants.

    Attributes:
        DEFAULT_TTL_SECONDS: Freshness window for cached query results (60 seconds)
    """

    DEFAULT_TTL_SECONDS: float = 60.0
    """Freshness window for cached query results"""


@dataclass(frozen=True)
class ExportConfig:
    """
    Scenario import/export constants.

    Attributes:
        EXPORT_VERSION: Version tag assumed when an export response carries none
        DEFAULT_IMPORT_VERSION: Version assigned to uploads that carry none (bare arrays)
        FILENAME_PREFIX: Prefix of the exported file name, followed by the ISO date

    Example:
        >>> print(export_config.FILENAME_PREFIX)
        autostrike-scenarios
    """

    EXPORT_VERSION: str = "1.0"
    """Version tag assumed when an export response carries none"""

    DEFAULT_IMPORT_VERSION: str = "1.0"
    """Version assigned to uploads that carry none"""

    FILENAME_PREFIX: str = "autostrike-scenarios"
    """Prefix of the exported file name"""


# Singleton instances for easy import
analytics_thresholds = AnalyticsThresholds()
api_config = APIConfig()
cache_config = CacheConfig()
export_config = ExportConfig()
