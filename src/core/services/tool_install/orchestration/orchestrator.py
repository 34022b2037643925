"""
L5 Orchestration — Tiered cache coordinator.

Two entry points, one per job phase:

    acquire_tool()    main step:  restore tiers → probe → install → carry state
    run_save_phase()  post step:  load carried state → save tiers

Operations run strictly in sequence; there is one acquisition per job.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from src.adapters.base import CacheBackend, Platform
from src.core.models.acquisition import (
    AcquisitionRequest,
    AcquisitionResult,
    CacheTier,
    CarriedState,
    InstallLayout,
    TierKind,
)
from src.core.persistence.carried_state import load_state, save_state
from src.core.reliability.retry import retry
from src.core.services.tool_install.data.constants import (
    INSTALL_RETRIES,
    PACKAGE_NAME,
    RETRY_BASE_DELAY,
)
from src.core.services.tool_install.detection.tool_version import get_tool_version
from src.core.services.tool_install.domain.cache_keys import (
    KeyPolicy,
    store_cache_key,
    tool_cache_key,
)
from src.core.services.tool_install.domain.cache_tiers import plan_tiers
from src.core.services.tool_install.domain.errors import AcquisitionError
from src.core.services.tool_install.execution.npm_install import install_tool

logger = logging.getLogger(__name__)

Installer = Callable[[str, str, InstallLayout], str]
Probe = Callable[[Path], str | None]


def prepare_directories(layout: InstallLayout) -> None:
    """Create the bin and store directories.

    An existing directory is fine. Anything else at those paths, or any
    other filesystem error, is fatal before cache or install work begins.
    """
    for directory in (layout.bin_dir, layout.store_dir):
        directory.mkdir(parents=True, exist_ok=True)


# ── Restore phase ───────────────────────────────────────────────


def _restore_store(tier: CacheTier, backend: CacheBackend) -> CacheTier:
    hit = backend.restore([tier.directory], tier.key)
    if hit:
        logger.info("Restored npm cache from store cache")
    else:
        logger.info("No npm store cache found for this registry")
    return tier.model_copy(update={"hit": hit})


def _restore_tool(
    tier: CacheTier,
    backend: CacheBackend,
    layout: InstallLayout,
    probe: Probe,
) -> tuple[CacheTier, str | None]:
    """Restore the binary tier. Returns the version on a usable hit."""
    if not backend.restore([tier.directory], tier.key):
        logger.info("No cached %s found", PACKAGE_NAME)
        return tier, None

    version = probe(layout.tool_path)
    if not version:
        logger.warning(
            "Found a cached version of %s but it appears to be corrupted", PACKAGE_NAME,
        )
        return tier, None

    logger.info("Using a cached version of %s: %s", PACKAGE_NAME, version)
    return tier.model_copy(update={"hit": True}), version


def acquire_tool(
    request: AcquisitionRequest,
    *,
    backend: CacheBackend,
    platform: Platform,
    layout: InstallLayout | None = None,
    installer: Installer = install_tool,
    probe: Probe = get_tool_version,
    retries: int = INSTALL_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    key_policy: KeyPolicy = KeyPolicy.DIGEST,
) -> AcquisitionResult:
    """Make the tool available, from cache when possible.

    Raises:
        OSError: Directory setup failed.
        InstallError: Installation failed after retries, or produced
            no usable executable.
        AcquisitionError: No version could be resolved.
    """
    layout = layout or InstallLayout.for_home(Path.home())

    prepare_directories(layout)
    platform.add_path(str(layout.bin_dir))

    binary, store = plan_tiers(
        request,
        layout,
        backend_available=backend.is_available(),
        policy=key_policy,
    )

    if store.enabled:
        store = _restore_store(store, backend)

    version: str | None = None
    if binary.enabled:
        binary, version = _restore_tool(binary, backend, layout, probe)

    if not binary.hit:
        logger.info(
            "Installing %s version %s from %s", PACKAGE_NAME, request.version, request.registry,
        )
        version = retry(
            lambda: installer(request.version, request.registry, layout),
            retries,
            base_delay=base_delay,
            sleep=sleep,
        )

    if not version:
        raise AcquisitionError(
            f"Failed to install {PACKAGE_NAME} or get its version. Please try again."
        )

    tool_path = str(layout.tool_path)
    save_state(
        platform,
        CarriedState(
            tool_cache_enabled=binary.enabled,
            store_cache_enabled=store.enabled,
            cache_hit=binary.hit,
            tool_path=tool_path,
            store_dir=str(layout.store_dir),
            version=version,
            registry=request.registry,
            tool_cache_key=binary.key if binary.enabled else None,
        ),
    )

    return AcquisitionResult(version=version, path=tool_path, cache_hit=binary.hit)


# ── Save phase ──────────────────────────────────────────────────


def _save_tier(backend: CacheBackend, kind: TierKind, paths: list[str], key: str) -> bool:
    logger.info("Saving %s cache with key: %s", kind, key)
    try:
        backend.save(paths, key)
    except Exception as e:
        logger.warning("Failed to save %s cache: %s", kind, e)
        return False
    logger.info("%s cache saved successfully", kind.capitalize())
    return True


def save_caches(
    state: CarriedState,
    *,
    backend: CacheBackend,
    key_policy: KeyPolicy = KeyPolicy.DIGEST,
) -> list[TierKind]:
    """Save every tier the acquire phase enabled.

    The binary tier is skipped when it was restored as a hit. The store
    tier is saved whenever enabled: its contents grow from run to run.
    Each save is independent; one failing does not stop the other.

    Returns:
        The tiers that saved successfully.
    """
    saved: list[TierKind] = []

    if state.tool_cache_enabled and not state.cache_hit:
        key = state.tool_cache_key or tool_cache_key(
            state.version, state.registry, policy=key_policy,
        )
        bin_dir = str(Path(state.tool_path).parent)
        if _save_tier(backend, TierKind.BINARY, [bin_dir], key):
            saved.append(TierKind.BINARY)

    if state.store_cache_enabled:
        key = store_cache_key(state.registry, policy=key_policy)
        if _save_tier(backend, TierKind.STORE, [state.store_dir], key):
            saved.append(TierKind.STORE)

    if not state.tool_cache_enabled and not state.store_cache_enabled:
        logger.info("All caching is disabled")

    return saved


def run_save_phase(
    platform: Platform,
    backend: CacheBackend,
    *,
    key_policy: KeyPolicy = KeyPolicy.DIGEST,
) -> list[TierKind]:
    """Post-job entry point. Never raises: it must not fail a finished job."""
    try:
        state = load_state(platform)
        if state is None:
            logger.info("No cache state found")
            return []
        return save_caches(state, backend=backend, key_policy=key_policy)
    except Exception as e:
        logger.warning("Failed to save cache: %s", e)
        return []
