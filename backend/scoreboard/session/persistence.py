"""Load and save the session document through a StateStorage collaborator.

The stored document carries a schema version. A document written under any
other version, or one that no longer validates, is discarded and replaced by
an empty session; fields are never migrated.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from scoreboard.logic.state import SCHEMA_VERSION, SessionState

if TYPE_CHECKING:
    from shared.storage import StateStorage

logger = structlog.get_logger()


def parse_session_state(content: str | None) -> SessionState:
    """Decode a stored document, falling back to an empty session."""
    if not content:
        return SessionState()
    try:
        raw = json.loads(content)
    except json.JSONDecodeError:
        logger.warning("stored state is not valid json, resetting")
        return SessionState()

    version = raw.get("schema_version") if isinstance(raw, dict) else None
    if version != SCHEMA_VERSION:
        logger.warning("stored state version mismatch, resetting", found=version, expected=SCHEMA_VERSION)
        return SessionState()

    try:
        return SessionState.model_validate(raw)
    except ValidationError as e:
        logger.warning("stored state failed validation, resetting", errors=e.error_count())
        return SessionState()


def load_session_state(storage: StateStorage) -> SessionState:
    state = parse_session_state(storage.load())
    logger.info("session state loaded", games=len(state.games), current_game_id=state.current_game_id)
    return state


def save_session_state(storage: StateStorage, state: SessionState) -> None:
    storage.save(state.model_dump_json())
