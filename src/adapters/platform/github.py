"""
GitHub Actions platform adapter — the runner's file-command surface.

Inputs arrive as ``INPUT_<NAME>`` environment variables. Outputs,
saved state and PATH additions are appended to the files named by
``$GITHUB_OUTPUT``, ``$GITHUB_STATE`` and ``$GITHUB_PATH``; saved
state comes back to the post-job step as ``STATE_<name>``.

When a file variable is missing (older runners, local runs) the
legacy ``::set-output``/``::save-state`` workflow commands are
written to stdout instead.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import MutableMapping
from pathlib import Path
from typing import TextIO

from src.adapters.base import Platform

logger = logging.getLogger(__name__)


def escape_data(value: str) -> str:
    """Encode a workflow-command value so it stays on one line."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def input_env_name(name: str) -> str:
    """``cache-store`` → ``INPUT_CACHE-STORE`` (hyphens are kept)."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


class GitHubActionsPlatform(Platform):
    """Platform bound to a process environment.

    Args:
        environ: Environment mapping. Defaults to ``os.environ``;
            ``add_path`` mutates its ``PATH``.
        stdout: Stream for legacy workflow commands.
    """

    def __init__(
        self,
        environ: MutableMapping[str, str] | None = None,
        stdout: TextIO | None = None,
    ):
        self._env = os.environ if environ is None else environ
        self._stdout = stdout

    @property
    def running_in_actions(self) -> bool:
        return self._env.get("GITHUB_ACTIONS") == "true"

    @property
    def debug_enabled(self) -> bool:
        return self._env.get("RUNNER_DEBUG") == "1"

    def get_input(self, name: str) -> str:
        return self._env.get(input_env_name(name), "").strip()

    def set_output(self, name: str, value: str) -> None:
        if not self._append_file_command("GITHUB_OUTPUT", name, value):
            self._issue(
                f"::set-output name={escape_property(name)}::{escape_data(value)}"
            )

    def save_state(self, name: str, value: str) -> None:
        if not self._append_file_command("GITHUB_STATE", name, value):
            self._issue(
                f"::save-state name={escape_property(name)}::{escape_data(value)}"
            )

    def get_state(self, name: str) -> str:
        return self._env.get(f"STATE_{name}", "")

    def add_path(self, path: str) -> None:
        path_file = self._env.get("GITHUB_PATH")
        if path_file:
            with open(path_file, "a", encoding="utf-8") as fh:
                fh.write(f"{path}\n")
        else:
            self._issue(f"::add-path::{escape_data(path)}")

        current = self._env.get("PATH", "")
        self._env["PATH"] = f"{path}{os.pathsep}{current}" if current else path
        logger.debug("Added %s to PATH", path)

    # ── Internals ────────────────────────────────────────────────

    def _append_file_command(self, variable: str, name: str, value: str) -> bool:
        target = self._env.get(variable)
        if not target:
            return False
        if not Path(target).exists():
            raise FileNotFoundError(f"Unable to find {variable} file: {target}")

        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        if delimiter in name or delimiter in value:
            raise ValueError(f"Unexpected input: delimiter found in {name!r}")
        with open(target, "a", encoding="utf-8") as fh:
            fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        return True

    def _issue(self, command: str) -> None:
        stream = self._stdout or sys.stdout
        stream.write(command + "\n")
        stream.flush()
