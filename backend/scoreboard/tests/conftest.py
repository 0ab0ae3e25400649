from __future__ import annotations

from itertools import count
from typing import TYPE_CHECKING

import pytest

from scoreboard.logic.pegging import create_pegging_game
from scoreboard.logic.phase import create_phase_game
from scoreboard.logic.stock import create_stock_game
from scoreboard.logic.train import create_train_game
from scoreboard.logic.types import (
    CardCount,
    HandInput,
    HandScoreInput,
    Player,
    TrainRoundInput,
    TrainScoreInput,
)
from scoreboard.session.directory import SessionDirectory

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from scoreboard.logic.settings import PhaseSettings
    from scoreboard.logic.state import PeggingGame, PhaseGame, StockGame, TrainGame

NOW = 1_700_000_000_000


# ============================================================================
# Test State Builder Helpers
# ============================================================================


def make_players(*names: str) -> tuple[Player, ...]:
    """Create players whose ids are the lowercased names: make_players("A", "B") -> ids "a", "b"."""
    return tuple(Player(id=name.lower(), name=name) for name in names)


def create_phase(
    *names: str,
    dealer_id: str | None = None,
    settings: PhaseSettings | None = None,
    game_id: str = "phase-1",
) -> PhaseGame:
    players = make_players(*(names or ("A", "B", "C")))
    return create_phase_game(
        game_id=game_id,
        players=players,
        dealer_id=dealer_id or players[0].id,
        now=NOW,
        settings=settings,
    )


def create_pegging(*names: str, dealer_id: str | None = None, game_id: str = "peg-1") -> PeggingGame:
    players = make_players(*(names or ("A", "B")))
    return create_pegging_game(game_id=game_id, players=players, dealer_id=dealer_id or players[0].id, now=NOW)


def create_stock(*names: str, dealer_id: str | None = None, game_id: str = "stock-1") -> StockGame:
    players = make_players(*(names or ("A", "B")))
    return create_stock_game(game_id=game_id, players=players, dealer_id=dealer_id or players[0].id, now=NOW)


def create_train(*names: str, dealer_id: str | None = None, game_id: str = "train-1") -> TrainGame:
    players = make_players(*(names or ("A", "B")))
    return create_train_game(game_id=game_id, players=players, dealer_id=dealer_id or players[0].id, now=NOW)


def hand_input(
    winner_id: str,
    cards: Mapping[str, CardCount] | None = None,
    *,
    laid: Iterable[str] = (),
    player_ids: Iterable[str] = ("a", "b", "c"),
    dealer_id: str | None = None,
    notes: str | None = None,
) -> HandInput:
    """Build a hand where players in laid made their phase; missing card counts are empty."""
    cards = cards or {}
    laid = set(laid)
    return HandInput(
        winner_id=winner_id,
        dealer_id=dealer_id,
        notes=notes,
        scores=tuple(
            HandScoreInput(player_id=pid, phase_laid=pid in laid, cards=cards.get(pid, CardCount()))
            for pid in player_ids
        ),
    )


def round_input(winner_id: str, pips: Mapping[str, int], *, dealer_id: str | None = None) -> TrainRoundInput:
    return TrainRoundInput(
        winner_id=winner_id,
        dealer_id=dealer_id,
        scores=tuple(TrainScoreInput(player_id=pid, pips=value) for pid, value in pips.items()),
    )


def sequential_ids(prefix: str = "id"):
    """Return an id factory producing prefix-1, prefix-2, ..."""
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


class FakeClock:
    """Deterministic epoch-millisecond clock that ticks one second per reading."""

    def __init__(self, start: int = NOW) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def directory() -> SessionDirectory:
    return SessionDirectory(clock=FakeClock(), id_factory=sequential_ids())
