"""Cache backends."""

from src.adapters.cache.local import LocalCacheBackend

__all__ = ["LocalCacheBackend"]
