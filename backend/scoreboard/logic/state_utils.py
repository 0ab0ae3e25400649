"""
Immutable state update utilities using Pydantic model_copy.

Provides helper functions for common immutable updates on the frozen game
models and the session document. These functions never mutate their input;
they always return new objects with the requested changes applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel

from scoreboard.logic.enums import GameStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scoreboard.logic.state import Game, SessionState
    from scoreboard.logic.types import AuditEntry, StakeEntry, WinHistoryEntry

_StateT = TypeVar("_StateT", bound=BaseModel)


def lowest_total(player_states: Sequence[BaseModel]) -> str:
    """
    Return the player_id with the lowest total_score.

    Ties go to the player seated first: min() keeps the earliest of equal keys
    and player states are always stored in seating order.
    """
    return min(player_states, key=lambda s: s.total_score).player_id  # type: ignore[attr-defined]


def complete_game(game: _StateT, winner_id: str, now: int) -> _StateT:
    """Return the game frozen as COMPLETED with the given winner."""
    return game.model_copy(
        update={
            "status": GameStatus.COMPLETED,
            "winner_id": winner_id,
            "ended_at": now,
            "pause_snapshot": None,
        },
    )


# ---------------------------------------------------------------------------
# Session document helpers
# ---------------------------------------------------------------------------


def find_game(state: SessionState, game_id: str | None) -> Game | None:
    """Look up a game by id. Returns None for a missing or None id."""
    if game_id is None:
        return None
    return next((g for g in state.games if g.id == game_id), None)


def add_game(state: SessionState, game: Game) -> SessionState:
    return state.model_copy(update={"games": (*state.games, game)})


def replace_game(state: SessionState, game: Game) -> SessionState:
    """Return new session state with the game sharing game.id swapped in."""
    games = tuple(game if g.id == game.id else g for g in state.games)
    return state.model_copy(update={"games": games})


def remove_game(state: SessionState, game_id: str) -> SessionState:
    """Return new session state without the game, clearing pointers that referenced it."""
    return state.model_copy(
        update={
            "games": tuple(g for g in state.games if g.id != game_id),
            "current_game_id": None if state.current_game_id == game_id else state.current_game_id,
            "active_game_id": None if state.active_game_id == game_id else state.active_game_id,
        },
    )


def append_audit_entry(state: SessionState, entry: AuditEntry) -> SessionState:
    return state.model_copy(update={"game_snapshots": (*state.game_snapshots, entry)})


def append_win(state: SessionState, entry: WinHistoryEntry) -> SessionState:
    return state.model_copy(update={"game_history": (*state.game_history, entry)})


def append_stake(state: SessionState, entry: StakeEntry) -> SessionState:
    return state.model_copy(update={"stakes_history": (*state.stakes_history, entry)})


def stake_for_game(state: SessionState, game_id: str) -> StakeEntry | None:
    """Return the most recent stake written for the game, if any."""
    return next((s for s in reversed(state.stakes_history) if s.game_id == game_id), None)
