"""
Adapter base — the contracts between the acquisition core and the
outside world.

The core never talks to the cache service or the CI runner
directly, only through these two interfaces:

    CacheBackend  — opaque restore/save blob store keyed by a string
    Platform      — the CI runner's input/output/state/PATH surface
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class CacheError(Exception):
    """Raised by a cache backend when an operation cannot complete."""


class CacheBackend(ABC):
    """Abstract base class for cache backends.

    To create a new backend:
        1. Subclass CacheBackend
        2. Implement name, is_available, restore, save
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The backend identifier (e.g., 'local', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether caching can work in the current environment.

        Should be fast and never raise.
        """

    @abstractmethod
    def restore(self, paths: list[str], key: str) -> bool:
        """Place the content stored under ``key`` back at ``paths``.

        Returns:
            True on a hit, False when nothing is stored under ``key``.
        """

    @abstractmethod
    def save(self, paths: list[str], key: str) -> None:
        """Store ``paths`` under ``key``.

        Conflicts with an existing entry are logged, not raised.
        Anything else that stops the save raises ``CacheError``.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class Platform(ABC):
    """The CI runner's key/value surface."""

    @property
    def running_in_actions(self) -> bool:
        """Whether workflow commands are understood by whoever reads stdout."""
        return False

    @property
    def debug_enabled(self) -> bool:
        """Whether the runner asked for step debug logging."""
        return False

    @abstractmethod
    def get_input(self, name: str) -> str:
        """Raw input value, stripped. Empty string when unset."""

    @abstractmethod
    def set_output(self, name: str, value: str) -> None:
        """Publish a step output."""

    @abstractmethod
    def save_state(self, name: str, value: str) -> None:
        """Persist a value for the post-job phase of this action."""

    @abstractmethod
    def get_state(self, name: str) -> str:
        """Value saved by the main phase. Empty string when absent."""

    @abstractmethod
    def add_path(self, path: str) -> None:
        """Prepend ``path`` to PATH for this and all later steps."""
