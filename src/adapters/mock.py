"""
Mock adapters — test doubles for the cache backend and CI platform.

Both record every call so tests can assert on what the acquisition
core asked for, and both are configurable to hit, miss or fail.
"""

from __future__ import annotations

from collections.abc import Callable

from src.adapters.base import CacheBackend, CacheError, Platform


class MockCacheBackend(CacheBackend):
    """In-memory cache backend.

    ``entries`` holds the keys that restore as a hit. ``on_restore``
    runs on every hit and may place files on disk, standing in for
    the archive extraction a real backend performs.
    """

    def __init__(
        self,
        available: bool = True,
        entries: set[str] | None = None,
        on_restore: Callable[[list[str], str], None] | None = None,
    ):
        self._available = available
        self.entries: set[str] = set(entries or ())
        self._on_restore = on_restore
        self._failing_saves: dict[str, str] = {}
        self.restore_calls: list[tuple[list[str], str]] = []
        self.save_calls: list[tuple[list[str], str]] = []

    @property
    def name(self) -> str:
        return "mock"

    def is_available(self) -> bool:
        return self._available

    def set_save_failure(self, key: str, error: str = "Mock save failure") -> None:
        """Configure saves under ``key`` to raise ``CacheError``."""
        self._failing_saves[key] = error

    def restore(self, paths: list[str], key: str) -> bool:
        self.restore_calls.append((list(paths), key))
        if key not in self.entries:
            return False
        if self._on_restore:
            self._on_restore(paths, key)
        return True

    def save(self, paths: list[str], key: str) -> None:
        self.save_calls.append((list(paths), key))
        if key in self._failing_saves:
            raise CacheError(self._failing_saves[key])
        self.entries.add(key)

    def reset(self) -> None:
        """Clear call logs and configured failures."""
        self.restore_calls.clear()
        self.save_calls.clear()
        self._failing_saves.clear()


class MockPlatform(Platform):
    """In-memory CI platform."""

    def __init__(
        self,
        inputs: dict[str, str] | None = None,
        state: dict[str, str] | None = None,
    ):
        self.inputs: dict[str, str] = dict(inputs or {})
        self.outputs: dict[str, str] = {}
        self.state: dict[str, str] = dict(state or {})
        self.paths: list[str] = []

    def get_input(self, name: str) -> str:
        return self.inputs.get(name, "").strip()

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value

    def save_state(self, name: str, value: str) -> None:
        self.state[name] = value

    def get_state(self, name: str) -> str:
        return self.state.get(name, "")

    def add_path(self, path: str) -> None:
        self.paths.append(path)
