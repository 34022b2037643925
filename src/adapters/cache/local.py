"""
Local cache backend — content stored as tar archives under a root dir.

Each key maps to ``<root>/<sha256(key)>.tar.gz``. Inside the archive,
the Nth cached path is stored under the top-level name ``N`` next to
a small JSON manifest, so a restore can put every path back where the
caller asks for it.

Entries are immutable once written: saving onto an existing key is
logged and skipped (last writer does not win).
"""

from __future__ import annotations

import hashlib
import io
import json
import logging
import os
import tarfile
import tempfile
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath

from src.adapters.base import CacheBackend, CacheError

logger = logging.getLogger(__name__)

CACHE_DIR_ENV = "SETUP_UTOO_CACHE_DIR"
TOOL_CACHE_ENV = "RUNNER_TOOL_CACHE"
_TOOL_CACHE_SUBDIR = "setup-utoo-cache"
_MANIFEST_NAME = "cache_manifest.json"


class LocalCacheBackend(CacheBackend):
    """Filesystem-backed cache.

    Unavailable when constructed without a root directory.
    """

    def __init__(self, root: Path | None):
        self._root = root

    @classmethod
    def from_environment(
        cls,
        cache_dir: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> LocalCacheBackend:
        """Resolve the cache root.

        Precedence: explicit ``cache_dir`` > ``$SETUP_UTOO_CACHE_DIR``
        > ``$RUNNER_TOOL_CACHE/setup-utoo-cache`` > unavailable.
        """
        env = os.environ if environ is None else environ
        if cache_dir:
            return cls(Path(cache_dir))
        if env.get(CACHE_DIR_ENV):
            return cls(Path(env[CACHE_DIR_ENV]))
        if env.get(TOOL_CACHE_ENV):
            return cls(Path(env[TOOL_CACHE_ENV]) / _TOOL_CACHE_SUBDIR)
        return cls(None)

    @property
    def name(self) -> str:
        return "local"

    @property
    def root(self) -> Path | None:
        return self._root

    def is_available(self) -> bool:
        return self._root is not None

    def archive_path(self, key: str) -> Path:
        if self._root is None:
            raise CacheError("Cache backend is not available (no cache root)")
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._root / f"{digest}.tar.gz"

    # ── Restore ──────────────────────────────────────────────────

    def restore(self, paths: list[str], key: str) -> bool:
        archive = self.archive_path(key)
        if not archive.is_file():
            logger.debug("Cache miss for key %s", key)
            return False

        try:
            with tarfile.open(archive, "r:gz") as tar:
                for member in tar.getmembers():
                    if member.name == _MANIFEST_NAME:
                        continue
                    self._extract_member(tar, member, paths)
        except (tarfile.TarError, OSError) as e:
            logger.warning("Cannot restore cache entry %s: %s", archive.name, e)
            return False

        logger.debug("Restored %d path(s) from %s", len(paths), archive.name)
        return True

    def _extract_member(
        self,
        tar: tarfile.TarFile,
        member: tarfile.TarInfo,
        paths: list[str],
    ) -> None:
        parts = PurePosixPath(member.name).parts
        if not parts or not parts[0].isdigit() or int(parts[0]) >= len(paths):
            logger.debug("Skipping unexpected archive member %s", member.name)
            return

        if ".." in parts[1:]:
            logger.warning("Skipping archive member outside its target: %s", member.name)
            return

        root = Path(paths[int(parts[0])])
        dest = root.joinpath(*parts[1:])

        if member.isdir():
            dest.mkdir(parents=True, exist_ok=True)
            return

        dest.parent.mkdir(parents=True, exist_ok=True)
        if member.issym():
            if dest.is_symlink() or dest.exists():
                dest.unlink()
            dest.symlink_to(member.linkname)
            return

        if not member.isfile():
            return

        fobj = tar.extractfile(member)
        if fobj is None:
            return
        if dest.is_symlink():
            dest.unlink()
        dest.write_bytes(fobj.read())
        dest.chmod(member.mode & 0o777)

    # ── Save ─────────────────────────────────────────────────────

    def save(self, paths: list[str], key: str) -> None:
        archive = self.archive_path(key)
        if archive.is_file():
            logger.info("Cache entry for key %s already exists, not saving", key)
            return

        existing = [(i, Path(p)) for i, p in enumerate(paths) if Path(p).exists()]
        if not existing:
            logger.warning("No cache paths exist, nothing to save for key %s", key)
            return

        manifest = {
            "key": key,
            "paths": [str(p) for p in paths],
            "created_at": datetime.now(UTC).isoformat(),
        }

        try:
            archive.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=archive.parent, prefix=".cache_", suffix=".tmp",
            )
            os.close(fd)
            tmp = Path(tmp_name)
            try:
                with tarfile.open(tmp, "w:gz") as tar:
                    body = json.dumps(manifest, indent=2).encode("utf-8")
                    info = tarfile.TarInfo(name=_MANIFEST_NAME)
                    info.size = len(body)
                    info.mtime = int(datetime.now(UTC).timestamp())
                    tar.addfile(info, io.BytesIO(body))
                    for index, path in existing:
                        tar.add(str(path), arcname=str(index))
                os.replace(tmp, archive)
            except BaseException:
                tmp.unlink(missing_ok=True)
                raise
        except (tarfile.TarError, OSError) as e:
            raise CacheError(f"Failed to save cache entry for key {key}: {e}") from e

        logger.debug("Saved %d path(s) to %s", len(existing), archive.name)
