"""
L4 Execution — Global npm install into a fixed prefix.

One call is one attempt. A non-zero npm exit is raised as a
retryable ``InstallError``; the caller wraps this in the retry
policy. A successful npm run that leaves nothing probeable behind
is raised as a non-retryable ``InstallError``.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

from src.core.models.acquisition import InstallLayout
from src.core.services.tool_install.data.constants import (
    DEFAULT_VERSION,
    INSTALL_TIMEOUT,
    PACKAGE_NAME,
)
from src.core.services.tool_install.detection.tool_version import probe_first
from src.core.services.tool_install.domain.errors import ErrorKind, InstallError
from src.core.services.tool_install.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)


def package_spec(version: str, package: str = PACKAGE_NAME) -> str:
    """``utoo`` for latest, ``utoo@<version>`` otherwise."""
    if version == DEFAULT_VERSION:
        return package
    return f"{package}@{version}"


def build_install_command(
    version: str,
    registry: str,
    layout: InstallLayout,
    *,
    npm: str | None = None,
) -> list[str]:
    """Build the ``npm install -g`` argument list."""
    return [
        npm or shutil.which("npm") or "npm",
        "install",
        "-g",
        package_spec(version),
        f"--registry={registry}",
        f"--prefix={layout.prefix}",
        f"--cache={layout.store_dir}",
    ]


def install_tool(
    version: str,
    registry: str,
    layout: InstallLayout,
    *,
    runner: Callable[..., dict[str, Any]] = _run_subprocess,
    probe: Callable[[Path], str | None] | None = None,
) -> str:
    """Install the tool once and return the version the executable reports.

    Raises:
        InstallError: ``kind=SUBPROCESS`` when npm fails (retry it),
            ``kind=UNUSABLE`` when npm succeeded but no candidate
            executable answers ``--version`` (do not retry).
    """
    cmd = build_install_command(version, registry, layout)
    result = runner(cmd, timeout=INSTALL_TIMEOUT)

    if result.get("returncode") != 0:
        stderr = result.get("stderr") or result.get("error", "")
        raise InstallError(
            f"Failed to install {PACKAGE_NAME}: {stderr.strip()}",
            kind=ErrorKind.SUBPROCESS,
            stderr=stderr,
            returncode=result.get("returncode"),
        )

    logger.debug("npm install finished in %sms", result.get("elapsed_ms", "?"))

    found = probe_first(layout.candidate_paths(), probe=probe)
    if found is None:
        raise InstallError(
            f"{PACKAGE_NAME} was installed but the executable could not be found or verified",
            kind=ErrorKind.UNUSABLE,
        )

    path, installed = found
    logger.debug("Found %s %s at %s", PACKAGE_NAME, installed, path)
    return installed
