"""
Tests for configuration loading — action inputs into a request.
"""

import textwrap
from pathlib import Path

import pytest

from src.adapters.mock import MockPlatform
from src.core.config.loader import (
    ACTION_MANIFEST,
    ConfigError,
    load_manifest,
    load_request,
    parse_boolean,
)


class TestManifest:
    def test_bundled_manifest(self):
        manifest = load_manifest()
        assert set(manifest.inputs) == {"utoo-version", "registry", "cache-utoo", "cache-store"}
        assert manifest.default("utoo-version") == "latest"
        assert manifest.default("registry") == "https://registry.npmjs.org/"
        assert manifest.default("cache-store") == "false"
        assert ACTION_MANIFEST.is_file()

    def test_unquoted_boolean_default(self, tmp_path: Path):
        path = tmp_path / "action.yml"
        path.write_text(textwrap.dedent("""\
            inputs:
              cache-store:
                default: true
        """))
        assert load_manifest(path).default("cache-store") == "true"

    def test_missing(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_manifest(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "action.yml"
        path.write_text("inputs: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_manifest(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "action.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_manifest(path)


class TestParseBoolean:
    @pytest.mark.parametrize("value", ["true", "True", "TRUE"])
    def test_true(self, value):
        assert parse_boolean(value, "x") is True

    @pytest.mark.parametrize("value", ["false", "False", "FALSE"])
    def test_false(self, value):
        assert parse_boolean(value, "x") is False

    @pytest.mark.parametrize("value", ["yes", "1", "", "tRue"])
    def test_invalid(self, value):
        with pytest.raises(ConfigError, match="cache-store"):
            parse_boolean(value, "cache-store")


class TestLoadRequest:
    def test_defaults(self):
        request = load_request(MockPlatform())
        assert request.version == "latest"
        assert request.registry == "https://registry.npmjs.org/"
        assert request.cache_tool is True
        assert request.cache_store is False

    def test_inputs_from_platform(self):
        platform = MockPlatform(inputs={
            "utoo-version": "1.2.3",
            "registry": "https://registry.npmmirror.com/",
            "cache-utoo": "false",
            "cache-store": "TRUE",
        })
        request = load_request(platform)
        assert request.version == "1.2.3"
        assert request.registry == "https://registry.npmmirror.com/"
        assert request.cache_tool is False
        assert request.cache_store is True

    def test_overrides_win(self):
        platform = MockPlatform(inputs={"utoo-version": "1.0.0", "cache-store": "false"})
        request = load_request(
            platform,
            overrides={"utoo-version": "2.0.0", "cache-store": True, "registry": None},
        )
        assert request.version == "2.0.0"
        assert request.cache_store is True
        assert request.registry == "https://registry.npmjs.org/"

    def test_blank_inputs_fall_back(self):
        platform = MockPlatform(inputs={"utoo-version": "   ", "registry": ""})
        request = load_request(platform)
        assert request.version == "latest"
        assert request.registry == "https://registry.npmjs.org/"

    def test_malformed_boolean(self):
        platform = MockPlatform(inputs={"cache-utoo": "yes please"})
        with pytest.raises(ConfigError):
            load_request(platform)

    def test_registry_kept_as_typed(self):
        platform = MockPlatform(inputs={"registry": "https://Registry.Example.test"})
        assert load_request(platform).registry == "https://Registry.Example.test"
