"""
Phase-progression game: hand recording, completion and full-replay correction.

Player standings are never trusted incrementally. Every path (append, delete,
update) derives them with the same apply_hand fold, so replaying the history
from scratch always reproduces the stored standings exactly. Phase advancement
depends on the order of hands, which is why corrections replay rather than
subtract.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from scoreboard.logic.enums import GameType, PhaseVariant
from scoreboard.logic.exceptions import (
    GameCompletedError,
    InvalidHandError,
    NoHistoryError,
    UnknownHandError,
    UnknownPlayerError,
)
from scoreboard.logic.rotation import next_dealer
from scoreboard.logic.scoring import first_phase, next_phase, score_from_card_counts
from scoreboard.logic.settings import PhaseSettings, validate_roster
from scoreboard.logic.state import Hand, HandScore, PhaseGame, PhasePlayerState
from scoreboard.logic.state_utils import complete_game, lowest_total
from scoreboard.logic.transition import Transition
from scoreboard.logic.types import HandScoreInput

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scoreboard.logic.types import HandInput, HandUpdate, Player

logger = structlog.get_logger()


def initial_player_states(players: Sequence[Player], settings: PhaseSettings) -> tuple[PhasePlayerState, ...]:
    """Return fresh standings in seating order: first phase, no points, no wins."""
    phase = first_phase(settings.variant)
    return tuple(PhasePlayerState(player_id=p.id, current_phase=phase) for p in players)


def create_phase_game(
    *,
    game_id: str,
    players: Sequence[Player],
    dealer_id: str,
    now: int,
    settings: PhaseSettings | None = None,
) -> PhaseGame:
    """
    Create an active phase-progression game.

    Raises:
        InvalidRosterError: If the roster cannot form a game.

    """
    game_settings = settings or PhaseSettings()
    validate_roster(GameType.PHASE, [p.id for p in players], dealer_id)
    return PhaseGame(
        id=game_id,
        players=tuple(players),
        player_states=initial_player_states(players, game_settings),
        current_dealer_id=dealer_id,
        settings=game_settings,
        started_at=now,
    )


def apply_hand(
    player_states: Sequence[PhasePlayerState],
    hand: Hand,
    settings: PhaseSettings,
) -> tuple[PhasePlayerState, ...]:
    """
    Fold one hand into the standings.

    A laid phase advances the player to the next phase of the sequence; laying
    the last phase (judged on the pre-hand phase) marks the player as having
    completed all phases.
    """
    new_states = []
    for ps in player_states:
        hand_score = hand.score_for(ps.player_id)
        total_score = ps.total_score
        current_phase = ps.current_phase
        completed = ps.completed_all_phases

        if hand_score is not None:
            total_score += hand_score.score
            if hand_score.phase_laid:
                following = next_phase(settings.variant, ps.current_phase)
                if following is None:
                    completed = True
                else:
                    current_phase = following

        hands_won = ps.hands_won + 1 if hand.winner_id == ps.player_id else ps.hands_won
        new_states.append(
            ps.model_copy(
                update={
                    "total_score": total_score,
                    "current_phase": current_phase,
                    "completed_all_phases": completed,
                    "hands_won": hands_won,
                },
            ),
        )
    return tuple(new_states)


def replay_player_states(
    players: Sequence[Player],
    hands: Sequence[Hand],
    settings: PhaseSettings,
) -> tuple[PhasePlayerState, ...]:
    """Recompute every player's standing by replaying the hands in order from scratch."""
    states = initial_player_states(players, settings)
    for hand in hands:
        states = apply_hand(states, hand, settings)
    return states


def _build_scores(
    game: PhaseGame,
    player_states: Sequence[PhasePlayerState],
    winner_id: str,
    score_inputs: Sequence[HandScoreInput],
) -> tuple[HandScore, ...]:
    """
    Turn raw per-player inputs into scored HandScore entries in seating order.

    The winner's contribution is always 0 regardless of cards reported.
    """
    by_player = {s.player_id: s for s in score_inputs}
    if len(by_player) != len(score_inputs) or set(by_player) != set(game.player_ids):
        raise InvalidHandError("hand scores must contain exactly one entry per seated player")

    phases = {ps.player_id: ps.current_phase for ps in player_states}
    scores = []
    for player_id in game.player_ids:
        entry = by_player[player_id]
        scores.append(
            HandScore(
                player_id=player_id,
                phase_laid=entry.phase_laid,
                phase_number=phases[player_id],
                cards_left=entry.cards.total_cards,
                score=0 if player_id == winner_id else score_from_card_counts(entry.cards),
                cards=entry.cards,
                hits=entry.hits,
                skipped_this_hand=entry.skipped_this_hand,
            ),
        )
    return tuple(scores)


def decide_winner(
    player_states: Sequence[PhasePlayerState],
    hand_count: int,
    settings: PhaseSettings,
) -> str | None:
    """
    Return the winner if the standings end the game, else None.

    Any player who completed all phases ends the game; the completer with the
    lowest total wins. A fixed-length game ends once hand_count reaches the limit,
    and then the lowest total overall wins, overriding the completer rule.
    Ties resolve to seating order in both cases.
    """
    winner_id = None
    completers = [ps for ps in player_states if ps.completed_all_phases]
    if completers:
        winner_id = lowest_total(completers)
    if settings.variant == PhaseVariant.FIXED and hand_count >= settings.fixed_hand_count:
        winner_id = lowest_total(player_states)
    return winner_id


def record_hand(game: PhaseGame, hand_input: HandInput, *, hand_id: str, now: int) -> Transition:
    """
    Append a hand, update standings, check completion and rotate the dealer.

    Raises:
        GameCompletedError: The game is already completed.
        UnknownPlayerError: The winner or dealer is not seated.
        InvalidHandError: The scores do not cover the roster exactly once.

    """
    if game.is_completed:
        raise GameCompletedError(f"game {game.id} is completed")
    if not game.has_player(hand_input.winner_id):
        raise UnknownPlayerError(f"winner {hand_input.winner_id!r} is not in game {game.id}")
    dealer_id = hand_input.dealer_id or game.current_dealer_id
    if not game.has_player(dealer_id):
        raise UnknownPlayerError(f"dealer {dealer_id!r} is not in game {game.id}")

    hand = Hand(
        id=hand_id,
        hand_number=game.hands[-1].hand_number + 1 if game.hands else 1,
        dealer_id=dealer_id,
        winner_id=hand_input.winner_id,
        scores=_build_scores(game, game.player_states, hand_input.winner_id, hand_input.scores),
        bet=hand_input.bet,
        notes=hand_input.notes,
        timestamp=now,
    )
    hands = (*game.hands, hand)
    player_states = apply_hand(game.player_states, hand, game.settings)

    updated = game.model_copy(
        update={
            "hands": hands,
            "player_states": player_states,
            "current_dealer_id": next_dealer(game.players, game.current_dealer_id),
        },
    )
    logger.debug("hand recorded", hand_number=hand.hand_number, winner_id=hand.winner_id)

    winner_id = decide_winner(player_states, len(hands), game.settings)
    if winner_id is None:
        return Transition(game=updated)

    logger.info("phase game completed", winner_id=winner_id, hands=len(hands))
    return Transition(game=complete_game(updated, winner_id, now), completed=True, winner_id=winner_id)


def delete_hand(game: PhaseGame, hand_id: str) -> PhaseGame:
    """
    Remove a hand and replay the remaining history from the first phase.

    Status and winner are left as they are: a completed game stays completed even
    if the deciding hand is removed.

    Raises:
        UnknownHandError: No hand has the given id.

    """
    if not any(h.id == hand_id for h in game.hands):
        raise UnknownHandError(f"hand {hand_id!r} not found in game {game.id}")
    remaining = tuple(h for h in game.hands if h.id != hand_id)
    logger.debug("hand deleted", hand_id=hand_id, remaining=len(remaining))
    return game.model_copy(
        update={
            "hands": remaining,
            "player_states": replay_player_states(game.players, remaining, game.settings),
        },
    )


def undo_last_hand(game: PhaseGame) -> PhaseGame:
    """Delete the hand with the highest sequence number."""
    if not game.hands:
        raise NoHistoryError(f"game {game.id} has no hands to undo")
    last = max(game.hands, key=lambda h: h.hand_number)
    return delete_hand(game, last.id)


def update_hand(game: PhaseGame, hand_id: str, update: HandUpdate) -> PhaseGame:
    """
    Correct a recorded hand in place and replay the whole history.

    The corrected hand keeps its id, number, dealer and timestamp. Its per-player
    scores are recomputed against the standings as they stood before that hand.

    Raises:
        UnknownHandError: No hand has the given id.
        UnknownPlayerError: The new winner is not seated.
        InvalidHandError: The new scores do not cover the roster exactly once.

    """
    index = next((i for i, h in enumerate(game.hands) if h.id == hand_id), None)
    if index is None:
        raise UnknownHandError(f"hand {hand_id!r} not found in game {game.id}")
    hand = game.hands[index]

    winner_id = update.winner_id or hand.winner_id
    if not game.has_player(winner_id):
        raise UnknownPlayerError(f"winner {winner_id!r} is not in game {game.id}")
    score_inputs = update.scores if update.scores is not None else _inputs_from_hand(hand)

    states_before = replay_player_states(game.players, game.hands[:index], game.settings)
    corrected = hand.model_copy(
        update={
            "winner_id": winner_id,
            "scores": _build_scores(game, states_before, winner_id, score_inputs),
            "bet": update.bet if update.bet is not None else hand.bet,
            "notes": update.notes if update.notes is not None else hand.notes,
        },
    )
    hands = (*game.hands[:index], corrected, *game.hands[index + 1 :])
    logger.debug("hand updated", hand_id=hand_id, hand_number=hand.hand_number)
    return game.model_copy(
        update={
            "hands": hands,
            "player_states": replay_player_states(game.players, hands, game.settings),
        },
    )


def _inputs_from_hand(hand: Hand) -> tuple[HandScoreInput, ...]:
    return tuple(
        HandScoreInput(
            player_id=s.player_id,
            phase_laid=s.phase_laid,
            cards=s.cards,
            hits=s.hits,
            skipped_this_hand=s.skipped_this_hand,
        )
        for s in hand.scores
    )
