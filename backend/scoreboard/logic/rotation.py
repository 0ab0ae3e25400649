"""
Dealer and turn rotation by fixed seating order.
"""

from collections.abc import Sequence

from scoreboard.logic.exceptions import PlayerNotFoundError
from scoreboard.logic.types import Player


def next_dealer(players: Sequence[Player], current_dealer_id: str) -> str:
    """
    Return the id of the player seated after the current dealer.

    Rotation is a fixed cyclic permutation of the seating order: applying it
    len(players) times returns to the starting dealer.

    Raises:
        PlayerNotFoundError: current_dealer_id is not seated. Game invariants
            make this unreachable, so it is treated as a defect.

    """
    return player_after(players, current_dealer_id)


def player_after(players: Sequence[Player], player_id: str) -> str:
    """Return the id of the player seated after player_id, wrapping around."""
    for index, player in enumerate(players):
        if player.id == player_id:
            return players[(index + 1) % len(players)].id
    raise PlayerNotFoundError(player_id)


def first_non_dealer(players: Sequence[Player], dealer_id: str) -> str:
    """Return the first seated player who is not the dealer, or the dealer if alone."""
    return next((p.id for p in players if p.id != dealer_id), dealer_id)
