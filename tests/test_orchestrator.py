"""
Tests for the tiered cache coordinator — acquire and save phases.
"""

import json
from pathlib import Path

import pytest

from src.adapters.mock import MockCacheBackend, MockPlatform
from src.core.models.acquisition import (
    AcquisitionRequest,
    CarriedState,
    InstallLayout,
    TierKind,
)
from src.core.persistence.carried_state import dump_state, load_state
from src.core.services.tool_install.domain.cache_keys import store_cache_key, tool_cache_key
from src.core.services.tool_install.domain.errors import (
    AcquisitionError,
    ErrorKind,
    InstallError,
)
from src.core.services.tool_install.orchestration import orchestrator
from src.core.services.tool_install.orchestration.orchestrator import (
    acquire_tool,
    prepare_directories,
    run_save_phase,
    save_caches,
)

REGISTRY = "https://registry.npmjs.org/"


class FakeInstaller:
    """Plays back ``outcomes`` (versions or exceptions), repeating the last."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes) or ["1.2.3"]
        self.calls: list[tuple[str, str, InstallLayout]] = []

    def __call__(self, version: str, registry: str, layout: InstallLayout) -> str:
        self.calls.append((version, registry, layout))
        outcome = self.outcomes[min(len(self.calls), len(self.outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _probe_existing(version: str = "1.2.3"):
    """Probe that reports ``version`` for any file that exists."""
    return lambda path: version if Path(path).is_file() else None


def _restores_tool(layout: InstallLayout):
    """on_restore hook placing a tool binary, like a real archive extract."""

    def place(paths, key):
        for p in paths:
            if Path(p) == layout.bin_dir:
                layout.tool_path.parent.mkdir(parents=True, exist_ok=True)
                layout.tool_path.write_text("#!/bin/sh\n")

    return place


def _acquire(request, backend, platform, layout, installer, probe):
    return acquire_tool(
        request,
        backend=backend,
        platform=platform,
        layout=layout,
        installer=installer,
        probe=probe,
        sleep=lambda s: None,
    )


class TestPrepareDirectories:
    def test_creates_both(self, layout: InstallLayout):
        prepare_directories(layout)
        assert layout.bin_dir.is_dir()
        assert layout.store_dir.is_dir()

    def test_existing_is_fine(self, layout: InstallLayout):
        prepare_directories(layout)
        prepare_directories(layout)
        assert layout.bin_dir.is_dir()

    def test_other_errors_are_fatal(self, tmp_path: Path):
        blocker = tmp_path / "home"
        blocker.write_text("a file where a directory should be")
        layout = InstallLayout.for_home(blocker, platform="linux")
        with pytest.raises(OSError):
            prepare_directories(layout)

    def test_file_in_place_of_directory_is_fatal(self, layout: InstallLayout):
        layout.bin_dir.parent.mkdir(parents=True)
        layout.bin_dir.write_text("not a directory")
        with pytest.raises(FileExistsError):
            prepare_directories(layout)
        assert not layout.store_dir.exists()

class TestAcquireRestorePhase:
    def test_skip_on_hit(self, layout: InstallLayout, platform: MockPlatform):
        request = AcquisitionRequest(version="1.2.3")
        key = tool_cache_key("1.2.3", REGISTRY)
        backend = MockCacheBackend(entries={key}, on_restore=_restores_tool(layout))
        installer = FakeInstaller()

        result = _acquire(request, backend, platform, layout, installer, _probe_existing("1.2.3"))

        assert installer.calls == []
        assert result.cache_hit
        assert result.version == "1.2.3"
        assert result.path == str(layout.tool_path)

    def test_corruption_falls_back_to_install(
        self, layout: InstallLayout, platform: MockPlatform, caplog,
    ):
        request = AcquisitionRequest(version="1.2.3")
        key = tool_cache_key("1.2.3", REGISTRY)
        backend = MockCacheBackend(entries={key})  # hit, but nothing lands on disk
        installer = FakeInstaller("1.2.3")

        with caplog.at_level("WARNING"):
            result = _acquire(
                request, backend, platform, layout, installer, _probe_existing(),
            )

        assert len(installer.calls) == 1
        assert not result.cache_hit
        assert result.version == "1.2.3"
        assert "corrupted" in caplog.text

    def test_store_entry_never_restores_into_bin_dir(
        self, layout: InstallLayout, platform: MockPlatform,
    ):
        request = AcquisitionRequest(version="store", cache_store=True)
        backend = MockCacheBackend(entries={store_cache_key(REGISTRY)})
        installer = FakeInstaller("1.2.3")

        result = _acquire(request, backend, platform, layout, installer, _probe_existing())

        restored = {key: paths for paths, key in backend.restore_calls}
        assert restored[store_cache_key(REGISTRY)] == [str(layout.store_dir)]
        assert restored[tool_cache_key("store", REGISTRY)] == [str(layout.bin_dir)]
        assert len(installer.calls) == 1
        assert not result.cache_hit

    def test_miss_installs(self, layout, platform, backend):
        installer = FakeInstaller("1.2.3")
        result = _acquire(
            AcquisitionRequest(version="1.2.3"), backend, platform, layout, installer,
            _probe_existing(),
        )
        assert len(installer.calls) == 1
        assert installer.calls[0][:2] == ("1.2.3", REGISTRY)
        assert not result.cache_hit

    def test_latest_never_restores_binary_tier(self, layout, platform, backend):
        installer = FakeInstaller("2.0.0")
        result = _acquire(
            AcquisitionRequest(version="latest"), backend, platform, layout, installer,
            _probe_existing(),
        )
        assert backend.restore_calls == []
        assert result.version == "2.0.0"
        assert result.version != "latest"

    def test_store_restored_before_binary(self, layout, platform, backend):
        request = AcquisitionRequest(version="1.2.3", cache_store=True)
        _acquire(request, backend, platform, layout, FakeInstaller(), _probe_existing())

        keys = [key for _, key in backend.restore_calls]
        assert keys == [store_cache_key(REGISTRY), tool_cache_key("1.2.3", REGISTRY)]
        assert backend.restore_calls[0][0] == [str(layout.store_dir)]
        assert backend.restore_calls[1][0] == [str(layout.bin_dir)]

    def test_unavailable_backend_skips_caches(self, layout, platform):
        backend = MockCacheBackend(available=False)
        request = AcquisitionRequest(version="1.2.3", cache_store=True)
        _acquire(request, backend, platform, layout, FakeInstaller(), _probe_existing())

        assert backend.restore_calls == []
        state = load_state(platform)
        assert not state.tool_cache_enabled
        assert not state.store_cache_enabled

    def test_bin_dir_added_to_path(self, layout, platform, backend):
        _acquire(
            AcquisitionRequest(), backend, platform, layout, FakeInstaller(), _probe_existing(),
        )
        assert platform.paths == [str(layout.bin_dir)]
        assert layout.bin_dir.is_dir()
        assert layout.store_dir.is_dir()

    def test_install_retried_then_succeeds(self, layout, platform, backend):
        flaky = InstallError("npm ERR! network", kind=ErrorKind.SUBPROCESS)
        installer = FakeInstaller(flaky, flaky, "1.2.3")
        result = _acquire(
            AcquisitionRequest(version="1.2.3"), backend, platform, layout, installer,
            _probe_existing(),
        )
        assert len(installer.calls) == 3
        assert result.version == "1.2.3"

    def test_install_exhaustion_is_fatal(self, layout, platform, backend):
        flaky = InstallError("npm ERR! network", kind=ErrorKind.SUBPROCESS)
        installer = FakeInstaller(flaky)
        with pytest.raises(InstallError) as exc_info:
            _acquire(
                AcquisitionRequest(version="1.2.3"), backend, platform, layout, installer,
                _probe_existing(),
            )
        assert exc_info.value is flaky
        assert len(installer.calls) == 4
        assert platform.state == {}

    def test_unusable_install_not_retried(self, layout, platform, backend):
        unusable = InstallError("installed but unusable", kind=ErrorKind.UNUSABLE)
        installer = FakeInstaller(unusable)
        with pytest.raises(InstallError):
            _acquire(
                AcquisitionRequest(version="1.2.3"), backend, platform, layout, installer,
                _probe_existing(),
            )
        assert len(installer.calls) == 1

    def test_empty_version_is_fatal(self, layout, platform, backend):
        with pytest.raises(AcquisitionError):
            _acquire(
                AcquisitionRequest(), backend, platform, layout, FakeInstaller(""),
                _probe_existing(),
            )
        assert platform.state == {}

    def test_carried_state_written(self, layout, platform):
        key = tool_cache_key("1.2.3", REGISTRY)
        backend = MockCacheBackend(entries={key}, on_restore=_restores_tool(layout))
        request = AcquisitionRequest(version="1.2.3", cache_store=True)

        _acquire(request, backend, platform, layout, FakeInstaller(), _probe_existing())

        raw = json.loads(platform.state["cache"])
        assert raw == {
            "utooCacheEnabled": True,
            "storeCacheEnabled": True,
            "cacheHit": True,
            "utooPath": str(layout.tool_path),
            "npmCacheDir": str(layout.store_dir),
            "version": "1.2.3",
            "registry": REGISTRY,
            "utooCacheKey": key,
        }


def _state(**overrides) -> CarriedState:
    fields = {
        "tool_cache_enabled": True,
        "store_cache_enabled": True,
        "cache_hit": False,
        "tool_path": "/home/runner/.npm/bin/utoo",
        "store_dir": "/home/runner/.cache/nm",
        "version": "1.2.3",
        "registry": REGISTRY,
    }
    fields.update(overrides)
    return CarriedState(**fields)


class TestSavePhase:
    def test_saves_both_tiers(self, backend: MockCacheBackend):
        saved = save_caches(_state(), backend=backend)
        assert saved == [TierKind.BINARY, TierKind.STORE]
        assert backend.save_calls == [
            (["/home/runner/.npm/bin"], tool_cache_key("1.2.3", REGISTRY)),
            (["/home/runner/.cache/nm"], store_cache_key(REGISTRY)),
        ]

    def test_binary_hit_not_resaved_but_store_is(self, backend: MockCacheBackend):
        saved = save_caches(_state(cache_hit=True), backend=backend)
        assert saved == [TierKind.STORE]
        assert [key for _, key in backend.save_calls] == [store_cache_key(REGISTRY)]

    def test_store_saved_when_binary_disabled(self, backend: MockCacheBackend):
        saved = save_caches(_state(tool_cache_enabled=False), backend=backend)
        assert saved == [TierKind.STORE]

    def test_uses_carried_key(self, backend: MockCacheBackend):
        save_caches(_state(tool_cache_key="restore-key"), backend=backend)
        assert backend.save_calls[0][1] == "restore-key"

    def test_all_disabled(self, backend: MockCacheBackend, caplog):
        with caplog.at_level("INFO"):
            saved = save_caches(
                _state(tool_cache_enabled=False, store_cache_enabled=False),
                backend=backend,
            )
        assert saved == []
        assert backend.save_calls == []
        assert "All caching is disabled" in caplog.text

    def test_tier_failures_are_independent(self, backend: MockCacheBackend):
        backend.set_save_failure(tool_cache_key("1.2.3", REGISTRY))
        saved = save_caches(_state(), backend=backend)
        assert saved == [TierKind.STORE]
        assert len(backend.save_calls) == 2

    def test_no_state_is_noop(self, backend: MockCacheBackend):
        assert run_save_phase(MockPlatform(), backend) == []
        assert backend.save_calls == []

    def test_corrupt_state_is_noop(self, backend: MockCacheBackend):
        platform = MockPlatform(state={"cache": "{not json"})
        assert run_save_phase(platform, backend) == []
        assert backend.save_calls == []

    def test_reads_carried_state(self, backend: MockCacheBackend):
        platform = MockPlatform(state={"cache": dump_state(_state(cache_hit=True))})
        assert run_save_phase(platform, backend) == [TierKind.STORE]

    def test_unexpected_error_swallowed(self, backend, monkeypatch, caplog):
        def broken_load(platform):
            raise RuntimeError("boom")

        monkeypatch.setattr(orchestrator, "load_state", broken_load)
        platform = MockPlatform(state={"cache": dump_state(_state())})

        with caplog.at_level("WARNING"):
            assert run_save_phase(platform, backend) == []
        assert "Failed to save cache: boom" in caplog.text
        assert backend.save_calls == []


class TestEndToEnd:
    def test_acquire_then_save_round_trip(self, layout: InstallLayout):
        platform = MockPlatform()
        backend = MockCacheBackend(on_restore=_restores_tool(layout))
        request = AcquisitionRequest(version="1.2.3", cache_store=True)

        def installer(version, registry, lay):
            lay.tool_path.write_text("#!/bin/sh\n")
            return "1.2.3"

        first = _acquire(request, backend, platform, layout, installer, _probe_existing())
        assert not first.cache_hit
        assert run_save_phase(platform, backend) == [TierKind.BINARY, TierKind.STORE]

        layout.tool_path.unlink()
        second_platform = MockPlatform()
        second = _acquire(
            request, backend, second_platform, layout, FakeInstaller(), _probe_existing(),
        )
        assert second.cache_hit
        assert run_save_phase(second_platform, backend) == [TierKind.STORE]
