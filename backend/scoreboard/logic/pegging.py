"""
Pegging board game tracker.

Tracks cumulative scores and the two-peg leapfrog position of each player.
Individual point events are not kept: the cumulative score is the only truth,
so there is no per-event undo.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from scoreboard.logic.enums import GameType
from scoreboard.logic.exceptions import GameCompletedError, InvalidScoreError, UnknownPlayerError
from scoreboard.logic.rotation import first_non_dealer, next_dealer, player_after
from scoreboard.logic.settings import PEGGING_TARGET_SCORE, validate_roster
from scoreboard.logic.state import PeggingGame, PegState, PlayerScore
from scoreboard.logic.state_utils import complete_game
from scoreboard.logic.transition import Transition

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scoreboard.logic.types import Player

logger = structlog.get_logger()


def create_pegging_game(
    *,
    game_id: str,
    players: Sequence[Player],
    dealer_id: str,
    now: int,
) -> PeggingGame:
    """
    Create an active pegging game with every peg at the start hole.

    The dealer holds the crib and the first non-dealer plays first.

    Raises:
        InvalidRosterError: If the roster cannot form a game.

    """
    validate_roster(GameType.PEGGING, [p.id for p in players], dealer_id)
    return PeggingGame(
        id=game_id,
        players=tuple(players),
        current_dealer_id=dealer_id,
        scores=tuple(PlayerScore(player_id=p.id) for p in players),
        peg_state=tuple(PegState(player_id=p.id) for p in players),
        who_has_crib=dealer_id,
        current_player_id=first_non_dealer(players, dealer_id),
        started_at=now,
    )


def update_score(game: PeggingGame, player_id: str, delta: int, *, now: int) -> Transition:
    """
    Add points to one player and leapfrog their pegs.

    The back peg jumps to the old front position and the front peg to the new
    score. Reaching PEGGING_TARGET_SCORE completes the game with this player as
    winner; only one player moves per call, so the first to cross always wins.

    Raises:
        GameCompletedError: The game is already completed.
        UnknownPlayerError: player_id is not seated.
        InvalidScoreError: delta is not a positive number of points.

    """
    if game.is_completed:
        raise GameCompletedError(f"game {game.id} is completed")
    if not game.has_player(player_id):
        raise UnknownPlayerError(f"player {player_id!r} is not in game {game.id}")
    if delta < 1:
        raise InvalidScoreError(f"score delta must be positive, got {delta}")

    new_score = game.scores_by_player[player_id] + delta
    scores = tuple(
        s.model_copy(update={"score": new_score}) if s.player_id == player_id else s for s in game.scores
    )
    peg_state = tuple(
        peg.model_copy(update={"back_peg": peg.front_peg, "front_peg": new_score}) if peg.player_id == player_id else peg
        for peg in game.peg_state
    )
    updated = game.model_copy(
        update={
            "scores": scores,
            "peg_state": peg_state,
        },
    )
    logger.debug("pegged", player_id=player_id, delta=delta, score=new_score)

    if new_score < PEGGING_TARGET_SCORE:
        return Transition(game=updated)

    logger.info("pegging game completed", winner_id=player_id, score=new_score)
    return Transition(game=complete_game(updated, player_id, now), completed=True, winner_id=player_id)


def advance_deal(game: PeggingGame) -> PeggingGame:
    """
    Start the next deal: dealer and crib pass to the next seat.

    Raises:
        GameCompletedError: The game is already completed.

    """
    if game.is_completed:
        raise GameCompletedError(f"game {game.id} is completed")
    dealer_id = next_dealer(game.players, game.current_dealer_id)
    logger.debug("deal advanced", round=game.round + 1, dealer_id=dealer_id)
    return game.model_copy(
        update={
            "round": game.round + 1,
            "current_dealer_id": dealer_id,
            "who_has_crib": dealer_id,
            "current_player_id": player_after(game.players, dealer_id),
        },
    )
