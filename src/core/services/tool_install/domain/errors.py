"""
L1 Domain — Acquisition error taxonomy.

Install failures are tagged with an ``ErrorKind`` so the retry
wrapper can tell a flaky ``npm install`` (worth another attempt)
from an install that "succeeded" without producing a usable
executable (no retry will fix that).
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """What went wrong during an install attempt."""

    SUBPROCESS = "subprocess"   # npm exited non-zero, or could not be spawned
    UNUSABLE = "unusable"       # npm succeeded but no executable probes


class InstallError(Exception):
    """Raised by the install orchestrator."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.SUBPROCESS,
        stderr: str = "",
        returncode: int | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.stderr = stderr
        self.returncode = returncode

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.SUBPROCESS


class AcquisitionError(Exception):
    """The tool could not be acquired. The run must not proceed."""
