"""
Stock-elimination card game tracker.

The engine keeps the table counts (stock piles, hand sizes, discard and build
piles) and applies partial updates from the input layer. It does not judge
whether a card play was legal, and it does not detect an emptied stock pile:
the game is finished manually through end_game.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from scoreboard.logic.enums import GameType
from scoreboard.logic.exceptions import GameCompletedError, InvalidStateUpdateError, UnknownPlayerError
from scoreboard.logic.rotation import first_non_dealer
from scoreboard.logic.settings import (
    BUILD_PILE_COUNT,
    DISCARD_PILES_PER_PLAYER,
    STOCK_HAND_SIZE,
    initial_stock_size,
    validate_roster,
)
from scoreboard.logic.state import PlayerCount, PlayerDiscards, StockGame

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from scoreboard.logic.types import Player, StockStateUpdate

logger = structlog.get_logger()


def create_stock_game(
    *,
    game_id: str,
    players: Sequence[Player],
    dealer_id: str,
    now: int,
) -> StockGame:
    """
    Create an active stock-elimination game.

    Stock size depends on table size only; it is not configurable.

    Raises:
        InvalidRosterError: If the roster cannot form a game.

    """
    ids = [p.id for p in players]
    validate_roster(GameType.STOCK, ids, dealer_id)
    stock_size = initial_stock_size(len(players))
    empty_piles = tuple(() for _ in range(DISCARD_PILES_PER_PLAYER))
    return StockGame(
        id=game_id,
        players=tuple(players),
        current_dealer_id=dealer_id,
        current_player_id=first_non_dealer(players, dealer_id),
        stock_piles=_counts(ids, dict.fromkeys(ids, stock_size)),
        hand_sizes=_counts(ids, dict.fromkeys(ids, STOCK_HAND_SIZE)),
        discard_piles=tuple(PlayerDiscards(player_id=pid, piles=empty_piles) for pid in ids),
        build_piles=tuple(() for _ in range(BUILD_PILE_COUNT)),
        started_at=now,
    )


def _counts(player_ids: Sequence[str], counts: Mapping[str, int]) -> tuple[PlayerCount, ...]:
    return tuple(PlayerCount(player_id=pid, count=counts[pid]) for pid in player_ids)


def _check_players(game: StockGame, player_ids: Iterable[str], field: str) -> None:
    unknown = sorted(set(player_ids) - set(game.player_ids))
    if unknown:
        raise UnknownPlayerError(f"{field} references players not in game {game.id}: {unknown}")


def merge_state(game: StockGame, update: StockStateUpdate) -> StockGame:
    """
    Apply a partial table update. Mapping fields merge per player.

    Raises:
        GameCompletedError: The game is already completed.
        UnknownPlayerError: A referenced player is not seated.
        InvalidStateUpdateError: Pile counts have the wrong shape.

    """
    if game.is_completed:
        raise GameCompletedError(f"game {game.id} is completed")

    changes: dict[str, object] = {}
    for field in ("current_player_id", "current_dealer_id"):
        value = getattr(update, field)
        if value is not None:
            _check_players(game, [value], field)
            changes[field] = value

    for field in ("stock_piles", "hand_sizes"):
        counts = getattr(update, field)
        if counts is not None:
            _check_players(game, counts, field)
            current = {c.player_id: c.count for c in getattr(game, field)}
            changes[field] = _counts(game.player_ids, {**current, **counts})

    if update.discard_piles is not None:
        _check_players(game, update.discard_piles, "discard_piles")
        for player_id, piles in update.discard_piles.items():
            if len(piles) != DISCARD_PILES_PER_PLAYER:
                raise InvalidStateUpdateError(
                    f"player {player_id!r} must have {DISCARD_PILES_PER_PLAYER} discard piles, got {len(piles)}",
                )
        merged = {**game.discards_by_player, **update.discard_piles}
        changes["discard_piles"] = tuple(
            PlayerDiscards(player_id=pid, piles=merged[pid]) for pid in game.player_ids
        )

    if update.build_piles is not None:
        if len(update.build_piles) != BUILD_PILE_COUNT:
            raise InvalidStateUpdateError(
                f"expected {BUILD_PILE_COUNT} build piles, got {len(update.build_piles)}",
            )
        changes["build_piles"] = update.build_piles

    logger.debug("stock state merged", fields=sorted(changes))
    return game.model_copy(update=changes)
