"""Centralized rule settings and constants for all supported games."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from scoreboard.logic.enums import BetType, GameType, PhaseVariant
from scoreboard.logic.exceptions import InvalidRosterError

# --- Roster ---
PLAYER_COUNTS: dict[GameType, tuple[int, int]] = {
    GameType.PHASE: (2, 6),
    GameType.PEGGING: (2, 3),
    GameType.STOCK: (2, 6),
    GameType.TRAIN: (2, 8),
}

# --- Pegging ---
PEGGING_TARGET_SCORE = 121

# --- Stock elimination ---
SMALL_TABLE_MAX_PLAYERS = 4
SMALL_TABLE_STOCK_SIZE = 30
LARGE_TABLE_STOCK_SIZE = 20
STOCK_HAND_SIZE = 5
DISCARD_PILES_PER_PLAYER = 4
BUILD_PILE_COUNT = 4

# --- Domino train ---
STARTING_ENGINE = 12
TRAIN_ROUND_COUNT = STARTING_ENGINE + 1


class PhaseSettings(BaseModel):
    """
    Rule configuration for a phase-progression game.

    strict_phase_enforcement is a hint for the input layer; the engine records
    whatever phase results it is given.
    """

    model_config = ConfigDict(frozen=True)

    strict_phase_enforcement: bool = True
    variant: PhaseVariant = PhaseVariant.STANDARD
    fixed_hand_count: int = Field(default=10, ge=1)
    global_bet: str | None = None
    bet_type: BetType = BetType.PER_GAME


def validate_roster(game_type: GameType, player_ids: Sequence[str], dealer_id: str) -> None:
    """
    Reject a roster that cannot form a game of the given type.

    Runs before any game instance exists, so a failure never leaves partial state.

    Raises:
        InvalidRosterError: player count out of range, duplicate ids, or a dealer
            who is not seated.

    """
    min_players, max_players = PLAYER_COUNTS[game_type]
    if not (min_players <= len(player_ids) <= max_players):
        raise InvalidRosterError(
            f"{game_type.value} requires {min_players}-{max_players} players, got {len(player_ids)}",
        )
    if len(set(player_ids)) != len(player_ids):
        raise InvalidRosterError("player ids must be unique")
    if dealer_id not in player_ids:
        raise InvalidRosterError(f"dealer {dealer_id!r} is not in the roster")


def initial_stock_size(num_players: int) -> int:
    """Return the starting stock pile size for a stock-elimination table."""
    if num_players <= SMALL_TABLE_MAX_PLAYERS:
        return SMALL_TABLE_STOCK_SIZE
    return LARGE_TABLE_STOCK_SIZE
