"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

# ── Tool identity ──────────────────────────────────────────────

TOOL_NAME = "utoo"
PACKAGE_NAME = "utoo"

# ── Input defaults ─────────────────────────────────────────────

DEFAULT_VERSION = "latest"
DEFAULT_REGISTRY = "https://registry.npmjs.org/"

# ── Install layout (relative to the runner's home directory) ───

BIN_DIR_PARTS: tuple[str, ...] = (".npm", "bin")
STORE_DIR_PARTS: tuple[str, ...] = (".cache", "nm")

# Windows-family npm shims carry this extension.
WINDOWS_SHIM_EXT = ".cmd"

# ── Install retry policy ───────────────────────────────────────

INSTALL_RETRIES = 3
RETRY_BASE_DELAY = 1.0  # seconds; attempt N waits N × base

# ── Subprocess timeouts (seconds) ──────────────────────────────

INSTALL_TIMEOUT = 600
PROBE_TIMEOUT = 30

# Name of the persisted state slot shared by the two phases.
STATE_NAME = "cache"
