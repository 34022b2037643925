"""
L1 Domain — Cache key derivation (pure).

Keys are a function of a small ordered tuple of identifying fields,
the tier kind always among them:

    binary tier:  ["utoo", "binary", <version>, <registry>]
    store tier:   ["utoo", "store", <registry>]

The tuple is encoded as a JSON array, so no field can borrow text
from its neighbour. The default ``digest`` policy hashes that
encoding (SHA-1, base64) so the key has a bounded length and no
registry-URL characters leak into the backend's key namespace.
``raw`` returns the encoding as-is for backends that accept anything.
"""

from __future__ import annotations

import base64
import hashlib
import json
from enum import StrEnum

from src.core.models.acquisition import TierKind
from src.core.services.tool_install.data.constants import TOOL_NAME


class KeyPolicy(StrEnum):
    DIGEST = "digest"
    RAW = "raw"


def encode_fields(*fields: str) -> str:
    """Unambiguous text form of an ordered field tuple."""
    return json.dumps(list(fields), separators=(",", ":"), ensure_ascii=False)


def derive_key(*fields: str, policy: KeyPolicy = KeyPolicy.DIGEST) -> str:
    """Derive a deterministic cache key from ordered fields."""
    material = encode_fields(*fields)
    if policy is KeyPolicy.RAW:
        return material
    digest = hashlib.sha1(material.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def tool_cache_key(
    version: str,
    registry: str,
    *,
    tool: str = TOOL_NAME,
    policy: KeyPolicy = KeyPolicy.DIGEST,
) -> str:
    """Key for the binary tier: one entry per tool, version and registry."""
    return derive_key(tool, TierKind.BINARY, version, registry, policy=policy)


def store_cache_key(
    registry: str,
    *,
    tool: str = TOOL_NAME,
    policy: KeyPolicy = KeyPolicy.DIGEST,
) -> str:
    """Key for the store tier: shared by every version from one registry."""
    return derive_key(tool, TierKind.STORE, registry, policy=policy)
