"""
Shared test fixtures and configuration.
"""

import stat
from collections.abc import Callable
from pathlib import Path

import pytest

from src.adapters.mock import MockCacheBackend, MockPlatform
from src.core.models.acquisition import AcquisitionRequest, InstallLayout


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def layout(tmp_path: Path) -> InstallLayout:
    """A POSIX install layout under a throwaway home directory."""
    return InstallLayout.for_home(tmp_path / "home", platform="linux")


@pytest.fixture
def backend() -> MockCacheBackend:
    return MockCacheBackend()


@pytest.fixture
def platform() -> MockPlatform:
    return MockPlatform()


@pytest.fixture
def pinned_request() -> AcquisitionRequest:
    return AcquisitionRequest(version="1.2.3", cache_tool=True, cache_store=True)


@pytest.fixture
def fake_tool() -> Callable[..., Path]:
    """Factory writing an executable shell script that prints ``output``."""

    def _write(path: Path, output: str = "utoo 1.2.3\n", exit_code: int = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        escaped = output.replace("'", "'\\''")
        path.write_text(f"#!/bin/sh\nprintf '%s' '{escaped}'\nexit {exit_code}\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write
