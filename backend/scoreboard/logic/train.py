"""
Domino train game: round recording, engine countdown and full-replay correction.

The engine double counts down from 12 to 0, one per round; the game ends when
the round played with the double-blank is recorded. Lowest pip total wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from scoreboard.logic.enums import GameType
from scoreboard.logic.exceptions import (
    GameCompletedError,
    InvalidHandError,
    NoHistoryError,
    UnknownHandError,
    UnknownPlayerError,
)
from scoreboard.logic.rotation import next_dealer
from scoreboard.logic.settings import STARTING_ENGINE, TRAIN_ROUND_COUNT, validate_roster
from scoreboard.logic.state import TrainGame, TrainPlayerState, TrainRound, TrainRoundScore
from scoreboard.logic.state_utils import complete_game, lowest_total
from scoreboard.logic.transition import Transition

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scoreboard.logic.types import Player, TrainRoundInput

logger = structlog.get_logger()


def create_train_game(
    *,
    game_id: str,
    players: Sequence[Player],
    dealer_id: str,
    now: int,
) -> TrainGame:
    """
    Create an active domino-train game starting on the double-12 engine.

    Raises:
        InvalidRosterError: If the roster cannot form a game.

    """
    validate_roster(GameType.TRAIN, [p.id for p in players], dealer_id)
    return TrainGame(
        id=game_id,
        players=tuple(players),
        player_states=tuple(TrainPlayerState(player_id=p.id) for p in players),
        current_dealer_id=dealer_id,
        current_engine=STARTING_ENGINE,
        started_at=now,
    )


def apply_round(player_states: Sequence[TrainPlayerState], train_round: TrainRound) -> tuple[TrainPlayerState, ...]:
    """Fold one round's pips and win into the standings."""
    pips = {s.player_id: s.pips for s in train_round.scores}
    return tuple(
        ps.model_copy(
            update={
                "total_score": ps.total_score + pips.get(ps.player_id, 0),
                "rounds_won": ps.rounds_won + 1 if train_round.winner_id == ps.player_id else ps.rounds_won,
            },
        )
        for ps in player_states
    )


def replay_player_states(players: Sequence[Player], rounds: Sequence[TrainRound]) -> tuple[TrainPlayerState, ...]:
    """Recompute standings by replaying the rounds in order from scratch."""
    states = tuple(TrainPlayerState(player_id=p.id) for p in players)
    for train_round in rounds:
        states = apply_round(states, train_round)
    return states


def engine_after(rounds_played: int) -> int:
    """Return the engine double for the next round, clamped at 0 once all rounds are played."""
    return max(STARTING_ENGINE - rounds_played, 0)


def record_round(game: TrainGame, round_input: TrainRoundInput, *, round_id: str, now: int) -> Transition:
    """
    Append a round, update standings, count the engine down and rotate the dealer.

    The winner's pips are forced to 0 whatever was submitted. When the engine
    would drop below 0 the game completes, the engine stays at 0, and the
    lowest total wins with ties going to seating order.

    Raises:
        GameCompletedError: The game is already completed.
        UnknownPlayerError: The winner or dealer is not seated.
        InvalidHandError: The pips do not cover the roster exactly once.

    """
    if game.is_completed:
        raise GameCompletedError(f"game {game.id} is completed")
    if not game.has_player(round_input.winner_id):
        raise UnknownPlayerError(f"winner {round_input.winner_id!r} is not in game {game.id}")
    dealer_id = round_input.dealer_id or game.current_dealer_id
    if not game.has_player(dealer_id):
        raise UnknownPlayerError(f"dealer {dealer_id!r} is not in game {game.id}")

    by_player = {s.player_id: s.pips for s in round_input.scores}
    if len(by_player) != len(round_input.scores) or set(by_player) != set(game.player_ids):
        raise InvalidHandError("round scores must contain exactly one entry per seated player")

    train_round = TrainRound(
        id=round_id,
        round_number=TRAIN_ROUND_COUNT - game.current_engine,
        engine=game.current_engine,
        dealer_id=dealer_id,
        winner_id=round_input.winner_id,
        scores=tuple(
            TrainRoundScore(player_id=pid, pips=0 if pid == round_input.winner_id else by_player[pid])
            for pid in game.player_ids
        ),
        timestamp=now,
    )
    player_states = apply_round(game.player_states, train_round)
    next_engine = game.current_engine - 1
    is_game_over = next_engine < 0

    updated = game.model_copy(
        update={
            "rounds": (*game.rounds, train_round),
            "player_states": player_states,
            "current_engine": 0 if is_game_over else next_engine,
            "current_dealer_id": next_dealer(game.players, game.current_dealer_id),
        },
    )
    logger.debug("round recorded", round_number=train_round.round_number, engine=train_round.engine)

    if not is_game_over:
        return Transition(game=updated)

    winner_id = lowest_total(player_states)
    logger.info("train game completed", winner_id=winner_id)
    return Transition(game=complete_game(updated, winner_id, now), completed=True, winner_id=winner_id)


def delete_round(game: TrainGame, round_id: str) -> TrainGame:
    """
    Remove a round and replay the remaining history. Status and winner are left as they are.

    Raises:
        UnknownHandError: No round has the given id.

    """
    if not any(r.id == round_id for r in game.rounds):
        raise UnknownHandError(f"round {round_id!r} not found in game {game.id}")
    remaining = tuple(r for r in game.rounds if r.id != round_id)
    logger.debug("round deleted", round_id=round_id, remaining=len(remaining))
    return game.model_copy(
        update={
            "rounds": remaining,
            "player_states": replay_player_states(game.players, remaining),
            "current_engine": engine_after(len(remaining)),
        },
    )


def undo_last_round(game: TrainGame) -> TrainGame:
    """Delete the most recently recorded round."""
    if not game.rounds:
        raise NoHistoryError(f"game {game.id} has no rounds to undo")
    return delete_round(game, game.rounds[-1].id)
