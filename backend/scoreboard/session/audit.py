"""Append-only lifecycle audit log and pause snapshots.

Every lifecycle action (created, paused, resumed, switched, updated,
completed) appends one AuditEntry carrying a PauseSnapshot of the game at that
moment. Entries are never mutated or removed, including when the game they
describe is deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scoreboard.logic.enums import GameType
from scoreboard.logic.types import AuditEntry, PauseSnapshot

if TYPE_CHECKING:
    from scoreboard.logic.enums import SnapshotAction
    from scoreboard.logic.state import Game, SessionState


def build_pause_snapshot(game: Game) -> PauseSnapshot:
    """
    Summarize a game's position for a resume banner or an audit entry.

    Each variant reports its own notion of round and scores: hands played for
    the phase game, the deal counter for pegging, the round number derived from
    the engine for the domino train, and stock piles left for stock elimination.
    """
    match game.game_type:
        case GameType.PHASE:
            return PauseSnapshot(
                dealer_id=game.current_dealer_id,
                current_player_id=game.current_dealer_id,
                round=len(game.hands) + 1,
                scores={ps.player_id: ps.total_score for ps in game.player_states},
                game_specific={"phases": {ps.player_id: ps.current_phase for ps in game.player_states}},
            )
        case GameType.PEGGING:
            return PauseSnapshot(
                dealer_id=game.current_dealer_id,
                current_player_id=game.current_player_id,
                round=game.round,
                scores=game.scores_by_player,
                game_specific={
                    "who_has_crib": game.who_has_crib,
                    "pegs": {p.player_id: [p.front_peg, p.back_peg] for p in game.peg_state},
                },
            )
        case GameType.STOCK:
            return PauseSnapshot(
                dealer_id=game.current_dealer_id,
                current_player_id=game.current_player_id,
                scores=game.stock_by_player,
            )
        case GameType.TRAIN:
            return PauseSnapshot(
                dealer_id=game.current_dealer_id,
                current_player_id=game.current_dealer_id,
                round=game.round_number,
                scores={ps.player_id: ps.total_score for ps in game.player_states},
                game_specific={"engine": game.current_engine},
            )
    raise ValueError(f"unsupported game type: {game.game_type}")


def make_audit_entry(game: Game, action: SnapshotAction, *, entry_id: str, now: int) -> AuditEntry:
    return AuditEntry(
        id=entry_id,
        game_id=game.id,
        game_type=game.game_type,
        action=action,
        timestamp=now,
        snapshot=build_pause_snapshot(game),
    )


def entries_for_game(state: SessionState, game_id: str | None = None) -> tuple[AuditEntry, ...]:
    """Return audit entries in append order, optionally for one game only."""
    if game_id is None:
        return state.game_snapshots
    return tuple(e for e in state.game_snapshots if e.game_id == game_id)
