"""
Acquisition models — request, cache tiers, result, and carried state.

The request is built once from action inputs. The carried state is the
only thing the acquire phase hands to the post-job save phase: the two
run in separate processes, so it must round-trip through JSON.
"""

from __future__ import annotations

import re
import sys
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from src.core.services.tool_install.data.constants import (
    BIN_DIR_PARTS,
    DEFAULT_REGISTRY,
    DEFAULT_VERSION,
    STORE_DIR_PARTS,
    TOOL_NAME,
    WINDOWS_SHIM_EXT,
)

_LATEST_RE = re.compile(r"latest", re.IGNORECASE)


class AcquisitionRequest(BaseModel):
    """What the user asked for. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    version: str = DEFAULT_VERSION
    registry: str = DEFAULT_REGISTRY
    cache_tool: bool = True
    cache_store: bool = False

    @property
    def pinned(self) -> bool:
        """Whether a concrete (non-"latest") version was requested."""
        return bool(self.version) and not _LATEST_RE.search(self.version)


class TierKind(StrEnum):
    """The two independently enabled cache scopes."""

    BINARY = "binary"
    STORE = "store"


class CacheTier(BaseModel):
    """One cache scope: its key, its directory, and what restore found."""

    kind: TierKind
    enabled: bool = False
    key: str = ""
    directory: str = ""
    hit: bool = False


class AcquisitionResult(BaseModel):
    """Outcome of the acquire phase."""

    version: str
    path: str
    cache_hit: bool = False

    def to_outputs(self) -> dict[str, str]:
        """Render as action outputs (all values are strings on the wire)."""
        return {
            "utoo-version": self.version,
            "utoo-path": self.path,
            "cache-hit": "true" if self.cache_hit else "false",
        }


class CarriedState(BaseModel):
    """Snapshot handed from the acquire phase to the save phase.

    Serialized with the camelCase field names used by the JavaScript
    action, so either implementation can read the other's state blob.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tool_cache_enabled: bool = Field(alias="utooCacheEnabled")
    store_cache_enabled: bool = Field(alias="storeCacheEnabled")
    cache_hit: bool = Field(alias="cacheHit")
    tool_path: str = Field(alias="utooPath")
    store_dir: str = Field(alias="npmCacheDir")
    version: str
    registry: str
    # Key the binary tier was restored under; absent in older blobs.
    tool_cache_key: str | None = Field(default=None, alias="utooCacheKey")


class InstallLayout(BaseModel):
    """Where the tool gets installed and where npm keeps its store."""

    model_config = ConfigDict(frozen=True)

    bin_dir: Path
    store_dir: Path
    platform: str = sys.platform

    @classmethod
    def for_home(cls, home: Path, platform: str | None = None) -> InstallLayout:
        return cls(
            bin_dir=home.joinpath(*BIN_DIR_PARTS),
            store_dir=home.joinpath(*STORE_DIR_PARTS),
            platform=platform or sys.platform,
        )

    @property
    def prefix(self) -> Path:
        """The ``--prefix`` handed to ``npm install -g``."""
        if self.bin_dir.name == "bin":
            return self.bin_dir.parent
        return self.bin_dir

    def executable_name(self, name: str = TOOL_NAME) -> str:
        if self.platform == "win32":
            return name + WINDOWS_SHIM_EXT
        return name

    @property
    def tool_path(self) -> Path:
        return self.bin_dir / self.executable_name()

    def candidate_paths(self, name: str = TOOL_NAME) -> list[Path]:
        """Ordered executable locations to probe after an install."""
        candidates = [
            self.bin_dir / self.executable_name(name),
            self.bin_dir / name,
            self.bin_dir / (name + WINDOWS_SHIM_EXT),
        ]
        ordered: list[Path] = []
        for path in candidates:
            if path not in ordered:
                ordered.append(path)
        return ordered
