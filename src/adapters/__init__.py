"""Adapters — bindings for the cache service and the CI platform.

Public re-exports for convenient access.
"""

from src.adapters.base import CacheBackend, CacheError, Platform
from src.adapters.mock import MockCacheBackend, MockPlatform

__all__ = [
    "CacheBackend",
    "CacheError",
    "MockCacheBackend",
    "MockPlatform",
    "Platform",
]
