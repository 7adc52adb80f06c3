"""Statistics provider integration."""

from .client import (
    DEFAULT_CACHE_SIZE,
    DEFAULT_CACHE_TTL,
    MLB_API_BASE,
    StatBundle,
    StatsClient,
    StatsNotFoundError,
    StatsProviderError,
)

__all__ = [
    "DEFAULT_CACHE_SIZE",
    "DEFAULT_CACHE_TTL",
    "MLB_API_BASE",
    "StatBundle",
    "StatsClient",
    "StatsNotFoundError",
    "StatsProviderError",
]
