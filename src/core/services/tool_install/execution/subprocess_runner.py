"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called, for both the
``npm install`` and the executable version probe. A non-zero exit is
a normal outcome here, never an exception: callers decide what it
means.
"""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)

# Trim captured streams; npm can be very chatty.
_MAX_STREAM = 4000


def _run_subprocess(
    cmd: list[str],
    *,
    timeout: int = 120,
) -> dict[str, Any]:
    """Run a command and capture its outcome.

    Args:
        cmd: Command list for ``subprocess.run()``.
        timeout: Seconds before ``TimeoutExpired``.

    Returns:
        ``{"ok": bool, "returncode": int | None, "stdout": "...",
        "stderr": "...", "elapsed_ms": N}``. When the process could not
        be spawned or timed out, ``returncode`` is ``None`` and ``error``
        describes why.
    """
    logger.debug("Running: %s", " ".join(cmd))
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return {
            "ok": False,
            "returncode": None,
            "stdout": "",
            "stderr": "",
            "error": f"Command timed out ({timeout}s)",
        }
    except OSError as e:
        logger.debug("Cannot spawn %s: %s", cmd[0], e)
        return {
            "ok": False,
            "returncode": None,
            "stdout": "",
            "stderr": "",
            "error": str(e),
        }

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout[-_MAX_STREAM:] if result.stdout else ""
    stderr = result.stderr[-_MAX_STREAM:] if result.stderr else ""

    outcome: dict[str, Any] = {
        "ok": result.returncode == 0,
        "returncode": result.returncode,
        "stdout": stdout,
        "stderr": stderr,
        "elapsed_ms": elapsed_ms,
    }
    if result.returncode != 0:
        outcome["error"] = f"Command failed (exit {result.returncode})"
    return outcome
