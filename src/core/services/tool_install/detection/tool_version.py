"""
L3 Detection — Executable version probe.

Read-only: runs ``<executable> --version`` and parses the output.
Used both to validate a restored cache and to locate the executable
right after ``npm install``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from src.core.services.tool_install.data.constants import PROBE_TIMEOUT
from src.core.services.tool_install.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)

# MAJOR.MINOR.PATCH with an optional hyphenated pre-release tag.
VERSION_PATTERN = re.compile(r"(\d+\.\d+\.\d+(?:-[^\s]+)?)")

Runner = Callable[..., dict[str, Any]]


def parse_version_output(output: str) -> str | None:
    """Extract a version from ``--version`` output.

    Falls back to the trimmed output when it holds no semver, and
    returns ``None`` only for empty output.
    """
    text = output.strip()
    if not text:
        return None
    match = VERSION_PATTERN.search(text)
    return match.group(1) if match else text


def get_tool_version(
    executable: str | Path,
    *,
    runner: Runner = _run_subprocess,
) -> str | None:
    """Get the version of the executable at ``executable``.

    Returns:
        Version string (e.g. ``"1.2.3-beta.1"``) or ``None`` if the path
        does not exist or the executable is unusable.
    """
    path = Path(executable)
    if not path.exists():
        return None

    try:
        result = runner([str(path), "--version"], timeout=PROBE_TIMEOUT)
    except Exception as e:
        logger.debug("Version probe of %s raised: %s", path, e)
        return None

    if result.get("returncode") != 0:
        logger.debug(
            "Version probe of %s failed: %s", path, result.get("error", "unknown error"),
        )
        return None

    return parse_version_output(result.get("stdout", ""))


def probe_first(
    candidates: Iterable[str | Path],
    *,
    probe: Callable[[Path], str | None] | None = None,
) -> tuple[Path, str] | None:
    """Return ``(path, version)`` for the first candidate that probes."""
    check = probe or get_tool_version
    for candidate in candidates:
        path = Path(candidate)
        version = check(path)
        if version:
            return path, version
    return None
