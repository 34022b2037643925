"""
Configuration loader — action inputs into an AcquisitionRequest.

Input declarations and their defaults live in ``action.yml`` next to
this module. Values resolve in precedence order:

    CLI option  >  INPUT_<NAME> env var (via the platform)  >  action.yml default

Booleans follow the YAML 1.2 core schema, as the runner does:
``true | True | TRUE | false | False | FALSE``. Anything else is a
configuration error.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from src.adapters.base import Platform
from src.core.models.acquisition import AcquisitionRequest
from src.core.services.tool_install.domain.normalize import normalize_inputs

logger = logging.getLogger(__name__)

ACTION_MANIFEST = Path(__file__).with_name("action.yml")

_TRUE_VALUES = ("true", "True", "TRUE")
_FALSE_VALUES = ("false", "False", "FALSE")


class ConfigError(Exception):
    """Raised when action inputs or the input manifest are invalid."""


class InputSpec(BaseModel):
    """One ``inputs:`` entry of the action manifest."""

    name: str
    description: str = ""
    required: bool = False
    default: str = ""


class ActionManifest(BaseModel):
    name: str = ""
    description: str = ""
    inputs: dict[str, InputSpec] = Field(default_factory=dict)

    def default(self, name: str) -> str:
        spec = self.inputs.get(name)
        return spec.default if spec else ""


def load_manifest(path: Path | None = None) -> ActionManifest:
    """Load and validate the action manifest.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    path = path or ACTION_MANIFEST
    if not path.is_file():
        raise ConfigError(f"Action manifest not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    inputs: dict[str, Any] = {}
    for name, spec in (data.get("inputs") or {}).items():
        spec = dict(spec or {})
        # YAML may hand back native bools/ints for unquoted defaults.
        if "default" in spec and spec["default"] is not None:
            spec["default"] = _yaml_scalar_text(spec["default"])
        inputs[name] = {"name": name, **spec}

    try:
        return ActionManifest.model_validate({
            "name": data.get("name", ""),
            "description": data.get("description", ""),
            "inputs": inputs,
        })
    except Exception as e:
        raise ConfigError(f"Invalid action manifest {path}: {e}") from e


def parse_boolean(value: str, name: str) -> bool:
    """Parse a boolean input the way the runner does."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def _yaml_scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _resolve(
    name: str,
    platform: Platform,
    manifest: ActionManifest,
    overrides: dict[str, Any],
) -> Any:
    if overrides.get(name) is not None:
        return overrides[name]
    return platform.get_input(name) or manifest.default(name)


def load_request(
    platform: Platform,
    *,
    overrides: dict[str, Any] | None = None,
    manifest_path: Path | None = None,
) -> AcquisitionRequest:
    """Build the acquisition request from inputs.

    Args:
        platform: Source of ``INPUT_*`` values.
        overrides: Values given explicitly (e.g. CLI options), keyed by
            input name. ``None`` values are ignored.
        manifest_path: Alternative manifest, for tests.

    Raises:
        ConfigError: If a boolean input is malformed.
    """
    manifest = load_manifest(manifest_path)
    given = overrides or {}

    version, registry = normalize_inputs(
        _resolve("utoo-version", platform, manifest, given),
        _resolve("registry", platform, manifest, given),
    )

    flags: dict[str, bool] = {}
    for name in ("cache-utoo", "cache-store"):
        value = _resolve(name, platform, manifest, given)
        flags[name] = value if isinstance(value, bool) else parse_boolean(value, name)

    request = AcquisitionRequest(
        version=version,
        registry=registry,
        cache_tool=flags["cache-utoo"],
        cache_store=flags["cache-store"],
    )
    logger.debug("Resolved request: %s", request)
    return request
