"""
L1 Domain — Cache tier planning (pure).

Decides which tiers are enabled for a request and fills in their
keys and directories. Restore results are recorded later by the
orchestrator.
"""

from __future__ import annotations

from src.core.models.acquisition import (
    AcquisitionRequest,
    CacheTier,
    InstallLayout,
    TierKind,
)
from src.core.services.tool_install.domain.cache_keys import (
    KeyPolicy,
    store_cache_key,
    tool_cache_key,
)


def is_tool_cache_enabled(request: AcquisitionRequest, backend_available: bool) -> bool:
    """Binary tier needs a pinned version; "latest" moves under our feet."""
    if not request.cache_tool:
        return False
    if not request.pinned:
        return False
    return backend_available


def is_store_cache_enabled(request: AcquisitionRequest, backend_available: bool) -> bool:
    return request.cache_store and backend_available


def plan_tiers(
    request: AcquisitionRequest,
    layout: InstallLayout,
    *,
    backend_available: bool,
    policy: KeyPolicy = KeyPolicy.DIGEST,
) -> tuple[CacheTier, CacheTier]:
    """Return ``(binary_tier, store_tier)`` for a request."""
    binary = CacheTier(
        kind=TierKind.BINARY,
        enabled=is_tool_cache_enabled(request, backend_available),
        key=tool_cache_key(request.version, request.registry, policy=policy),
        directory=str(layout.bin_dir),
    )
    store = CacheTier(
        kind=TierKind.STORE,
        enabled=is_store_cache_enabled(request, backend_available),
        key=store_cache_key(request.registry, policy=policy),
        directory=str(layout.store_dir),
    )
    return binary, store
