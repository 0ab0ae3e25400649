"""
Pydantic models for scoreboard data structures.

Contains the roster and card-count value types, the validated input records
that the variant machines consume, and the ledger entries (stakes, audit,
win history) owned by the session directory.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from scoreboard.logic.enums import GameType, SnapshotAction


class Player(BaseModel):
    """A seated player. The id is stable for the lifetime of a game."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    avatar: str | None = None


class CardCount(BaseModel):
    """Cards left in a losing player's hand, grouped by point value."""

    model_config = ConfigDict(frozen=True)

    low: NonNegativeInt = 0  # 1-9, 5 points each
    high: NonNegativeInt = 0  # 10-12, 10 points each
    skip: NonNegativeInt = 0  # 15 points each
    wild: NonNegativeInt = 0  # 25 points each

    @property
    def total_cards(self) -> int:
        return self.low + self.high + self.skip + self.wild


# ---------------------------------------------------------------------------
# Machine inputs
# ---------------------------------------------------------------------------


class HandScoreInput(BaseModel):
    """One player's raw result for a phase-progression hand."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    phase_laid: bool = False
    cards: CardCount = Field(default_factory=CardCount)
    hits: bool = False
    skipped_this_hand: bool = False


class HandInput(BaseModel):
    """A phase-progression hand as submitted by the input layer.

    dealer_id defaults to the game's current dealer when omitted.
    """

    model_config = ConfigDict(frozen=True)

    winner_id: str
    scores: tuple[HandScoreInput, ...]
    dealer_id: str | None = None
    bet: int | None = None
    notes: str | None = None


class HandUpdate(BaseModel):
    """Corrections to an already recorded hand. Omitted fields keep their value."""

    model_config = ConfigDict(frozen=True)

    winner_id: str | None = None
    scores: tuple[HandScoreInput, ...] | None = None
    bet: int | None = None
    notes: str | None = None


class TrainScoreInput(BaseModel):
    """Pips left in one player's hand at the end of a domino-train round."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    pips: NonNegativeInt = 0


class TrainRoundInput(BaseModel):
    """A domino-train round as submitted by the input layer."""

    model_config = ConfigDict(frozen=True)

    winner_id: str
    scores: tuple[TrainScoreInput, ...]
    dealer_id: str | None = None


class StockStateUpdate(BaseModel):
    """Partial stock-elimination table update. Only set fields are applied."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    current_player_id: str | None = None
    current_dealer_id: str | None = None
    stock_piles: dict[str, NonNegativeInt] | None = None
    hand_sizes: dict[str, NonNegativeInt] | None = None
    discard_piles: dict[str, tuple[tuple[int, ...], ...]] | None = None
    build_piles: tuple[tuple[int, ...], ...] | None = None


class StakeInput(BaseModel):
    """Stake offered when a game is created."""

    model_config = ConfigDict(frozen=True)

    amount: str
    currency: str


# ---------------------------------------------------------------------------
# Ledger entries
# ---------------------------------------------------------------------------


class PauseSnapshot(BaseModel):
    """Minimal summary of a paused game, enough to render a resume banner.

    Not authoritative: the paused game instance itself is.
    """

    model_config = ConfigDict(frozen=True)

    dealer_id: str
    current_player_id: str
    round: int | None = None
    scores: dict[str, int] | None = None
    game_specific: dict[str, Any] | None = None


class StakeEntry(BaseModel):
    """Stake ledger entry. Written once and read-only to the engine afterwards."""

    model_config = ConfigDict(frozen=True)

    id: str
    game_id: str | None = None
    game_type: GameType
    amount: str
    currency: str
    players: tuple[str, ...] = ()
    player_id: str | None = None
    winner_id: str | None = None
    created_at: int
    settled_at: int | None = None

    @property
    def label(self) -> str:
        return f"{self.amount} {self.currency}".strip()


class AuditEntry(BaseModel):
    """Append-only lifecycle record for forensic replay."""

    model_config = ConfigDict(frozen=True)

    id: str
    game_id: str
    game_type: GameType
    action: SnapshotAction
    timestamp: int
    snapshot: PauseSnapshot


class WinHistoryEntry(BaseModel):
    """Cross-game record of a finished game and its winner."""

    model_config = ConfigDict(frozen=True)

    id: str
    game_id: str
    game_type: GameType
    winner_id: str
    winner_name: str
    winner_avatar: str | None = None
    stake: str | None = None
    date: int
