"""
Frozen state models for all supported games and the session document.

Each variant is its own model carrying only its own fields; the Game alias is a
discriminated union over game_type so that persisted documents round-trip
without runtime casting.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator

from scoreboard.logic.enums import GameStatus, GameType
from scoreboard.logic.settings import PLAYER_COUNTS, STARTING_ENGINE, TRAIN_ROUND_COUNT, PhaseSettings
from scoreboard.logic.types import (
    AuditEntry,
    CardCount,
    PauseSnapshot,
    Player,
    StakeEntry,
    WinHistoryEntry,
)

SCHEMA_VERSION = 2


# ---------------------------------------------------------------------------
# Phase progression
# ---------------------------------------------------------------------------


class PhasePlayerState(BaseModel):
    """Derived standing of one player. Always recomputable from the hand history."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    current_phase: int = 1
    total_score: int = 0
    hands_won: int = 0
    completed_all_phases: bool = False


class HandScore(BaseModel):
    """One player's recorded result within a hand."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    phase_laid: bool
    phase_number: int  # phase attempted during this hand
    cards_left: NonNegativeInt
    score: NonNegativeInt
    cards: CardCount
    hits: bool = False
    skipped_this_hand: bool = False


class Hand(BaseModel):
    """An immutable record of one completed phase-progression hand."""

    model_config = ConfigDict(frozen=True)

    id: str
    hand_number: int
    dealer_id: str
    winner_id: str
    scores: tuple[HandScore, ...]
    bet: int | None = None
    notes: str | None = None
    timestamp: int

    def score_for(self, player_id: str) -> HandScore | None:
        return next((s for s in self.scores if s.player_id == player_id), None)


# ---------------------------------------------------------------------------
# Pegging
# ---------------------------------------------------------------------------


class PegState(BaseModel):
    """Two-peg leapfrog position of one player on the board."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    front_peg: int = 0
    back_peg: int = 0


class PlayerScore(BaseModel):
    """Cumulative pegging score of one player."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    score: NonNegativeInt = 0


# ---------------------------------------------------------------------------
# Stock elimination
# ---------------------------------------------------------------------------


class PlayerCount(BaseModel):
    """A per-player card count, such as stock left or cards in hand."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    count: NonNegativeInt


class PlayerDiscards(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    piles: tuple[tuple[int, ...], ...]  # 4 discard stacks


# ---------------------------------------------------------------------------
# Domino train
# ---------------------------------------------------------------------------


class TrainPlayerState(BaseModel):
    """Derived standing of one domino-train player (lower total is better)."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    total_score: int = 0
    rounds_won: int = 0


class TrainRoundScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    pips: NonNegativeInt


class TrainRound(BaseModel):
    """An immutable record of one completed domino-train round."""

    model_config = ConfigDict(frozen=True)

    id: str
    round_number: int  # 1-13
    engine: int  # double played as the engine this round, 12 down to 0
    dealer_id: str
    winner_id: str
    scores: tuple[TrainRoundScore, ...]
    timestamp: int


# ---------------------------------------------------------------------------
# Game instances
# ---------------------------------------------------------------------------


class BaseGame(BaseModel):
    """
    Fields shared by every game variant.

    The roster is fixed at creation. winner_id is set iff status is COMPLETED.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    players: tuple[Player, ...]
    current_dealer_id: str
    started_at: int
    ended_at: int | None = None
    winner_id: str | None = None
    status: GameStatus = GameStatus.ACTIVE
    pause_snapshot: PauseSnapshot | None = None

    @model_validator(mode="after")
    def _validate_roster(self) -> BaseGame:
        game_type: GameType = self.game_type  # type: ignore[attr-defined]
        min_players, max_players = PLAYER_COUNTS[game_type]
        if not (min_players <= len(self.players) <= max_players):
            raise ValueError(f"{game_type.value} requires {min_players}-{max_players} players, got {len(self.players)}")
        ids = self.player_ids
        if len(set(ids)) != len(ids):
            raise ValueError("player ids must be unique")
        if self.current_dealer_id not in ids:
            raise ValueError(f"dealer {self.current_dealer_id!r} is not in the roster")
        return self

    @property
    def player_ids(self) -> tuple[str, ...]:
        return tuple(p.id for p in self.players)

    @property
    def is_completed(self) -> bool:
        return self.status == GameStatus.COMPLETED

    def has_player(self, player_id: str) -> bool:
        return player_id in self.player_ids

    def find_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)


class PhaseGame(BaseGame):
    game_type: Literal[GameType.PHASE] = GameType.PHASE
    player_states: tuple[PhasePlayerState, ...]
    hands: tuple[Hand, ...] = ()
    settings: PhaseSettings = Field(default_factory=PhaseSettings)


class PeggingGame(BaseGame):
    game_type: Literal[GameType.PEGGING] = GameType.PEGGING
    scores: tuple[PlayerScore, ...]
    peg_state: tuple[PegState, ...]
    round: int = 1
    who_has_crib: str
    current_player_id: str

    @property
    def scores_by_player(self) -> dict[str, int]:
        return {s.player_id: s.score for s in self.scores}


class StockGame(BaseGame):
    game_type: Literal[GameType.STOCK] = GameType.STOCK
    current_player_id: str
    stock_piles: tuple[PlayerCount, ...]  # cards remaining in each player's stock
    hand_sizes: tuple[PlayerCount, ...]
    discard_piles: tuple[PlayerDiscards, ...]
    build_piles: tuple[tuple[int, ...], ...]  # 4 shared build stacks

    @property
    def stock_by_player(self) -> dict[str, int]:
        return {c.player_id: c.count for c in self.stock_piles}

    @property
    def hand_sizes_by_player(self) -> dict[str, int]:
        return {c.player_id: c.count for c in self.hand_sizes}

    @property
    def discards_by_player(self) -> dict[str, tuple[tuple[int, ...], ...]]:
        return {d.player_id: d.piles for d in self.discard_piles}


class TrainGame(BaseGame):
    game_type: Literal[GameType.TRAIN] = GameType.TRAIN
    player_states: tuple[TrainPlayerState, ...]
    rounds: tuple[TrainRound, ...] = ()
    current_engine: int = STARTING_ENGINE

    @property
    def round_number(self) -> int:
        return TRAIN_ROUND_COUNT - self.current_engine


Game = Annotated[PhaseGame | PeggingGame | StockGame | TrainGame, Field(discriminator="game_type")]


# ---------------------------------------------------------------------------
# Session document
# ---------------------------------------------------------------------------


class SessionState(BaseModel):
    """
    The whole process-wide state tree, persisted as one versioned document.

    Holds every game instance, the displayed and active pointers, and the
    three append-only ledgers (win history, audit snapshots, stakes).
    """

    model_config = ConfigDict(frozen=True)

    schema_version: int = SCHEMA_VERSION
    games: tuple[Game, ...] = ()
    current_game_id: str | None = None
    active_game_id: str | None = None
    game_history: tuple[WinHistoryEntry, ...] = ()
    game_snapshots: tuple[AuditEntry, ...] = ()
    stakes_history: tuple[StakeEntry, ...] = ()
    selected_game_type: GameType = GameType.PHASE
