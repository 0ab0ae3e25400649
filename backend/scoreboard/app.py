"""Compose a ready-to-use session directory from process settings."""

from __future__ import annotations

from functools import partial

import structlog

from scoreboard.session.directory import SessionDirectory
from scoreboard.session.persistence import load_session_state, save_session_state
from scoreboard.settings import ScoreboardSettings
from shared.logging import setup_logging
from shared.storage import LocalStateStorage, StateStorage

logger = structlog.get_logger()


def create_directory(
    settings: ScoreboardSettings | None = None,
    storage: StateStorage | None = None,
) -> SessionDirectory:
    """Load the stored session and return a directory that autosaves when configured to."""
    if settings is None:
        settings = ScoreboardSettings()
    if storage is None:
        storage = LocalStateStorage(settings.state_path)

    state = load_session_state(storage)
    listener = partial(save_session_state, storage) if settings.autosave else None
    logger.info("session directory ready", autosave=settings.autosave, games=len(state.games))
    return SessionDirectory(state, listener=listener)


def create_app(settings: ScoreboardSettings | None = None) -> SessionDirectory:
    """Configure logging and build the directory for an interactive process."""
    if settings is None:
        settings = ScoreboardSettings()
    setup_logging(log_dir=settings.log_dir)
    return create_directory(settings)
