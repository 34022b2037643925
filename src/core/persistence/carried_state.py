"""
Carried state — the acquire → save phase handoff.

The post-job save step runs in a fresh process, so everything it
needs travels as one JSON blob in the platform's state slot. Written
once at the end of the acquire phase, read once by the save phase.

A missing or unreadable blob is not an error: it means the acquire
phase never got that far, and the save phase simply does nothing.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from src.adapters.base import Platform
from src.core.models.acquisition import CarriedState
from src.core.services.tool_install.data.constants import STATE_NAME

logger = logging.getLogger(__name__)


def dump_state(state: CarriedState) -> str:
    """Serialize to the JSON wire form (camelCase field names)."""
    return state.model_dump_json(by_alias=True, exclude_none=True)


def parse_state(raw: str | None) -> CarriedState | None:
    """Parse a state blob. Returns None for empty or unreadable input."""
    if not raw or not raw.strip():
        return None
    try:
        return CarriedState.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        logger.warning("Corrupt cache state, ignoring: %s", e)
    except ValidationError as e:
        logger.warning("Invalid cache state, ignoring: %s", e)
    return None


def save_state(platform: Platform, state: CarriedState) -> None:
    platform.save_state(STATE_NAME, dump_state(state))
    logger.debug("Cache state saved under %r", STATE_NAME)


def load_state(platform: Platform) -> CarriedState | None:
    return parse_state(platform.get_state(STATE_NAME))
