"""
L1 Domain — Version/registry normalization (pure).

Empty inputs are indistinguishable from absent ones on the action
boundary, so both collapse to the documented defaults.
"""

from __future__ import annotations

from src.core.services.tool_install.data.constants import (
    DEFAULT_REGISTRY,
    DEFAULT_VERSION,
)


def normalize_version(version: str | None) -> str:
    return (version or "").strip() or DEFAULT_VERSION


def normalize_registry(registry: str | None) -> str:
    # Kept exactly as typed otherwise: ``https://x/`` and ``https://x``
    # produce different cache keys.
    return (registry or "").strip() or DEFAULT_REGISTRY


def normalize_inputs(
    version: str | None = None,
    registry: str | None = None,
) -> tuple[str, str]:
    """Resolve user input into a concrete ``(version, registry)`` pair."""
    return normalize_version(version), normalize_registry(registry)
