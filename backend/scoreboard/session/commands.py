"""
Command models accepted by the session directory.

Every mutation of the session document is one of these frozen models,
discriminated by kind. Payload validation (non-negative counts, required
fields) happens when a command is constructed, before it reaches dispatch.
"""

from collections.abc import Callable
from enum import StrEnum
from typing import Annotated, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from scoreboard.logic.enums import GameType
from scoreboard.logic.settings import PhaseSettings
from scoreboard.logic.state import SessionState
from scoreboard.logic.types import (
    HandInput,
    HandUpdate,
    PauseSnapshot,
    Player,
    StakeInput,
    StockStateUpdate,
    TrainRoundInput,
)


class CommandKind(StrEnum):
    """Commands dispatched to the session directory."""

    CREATE_GAME = "create_game"
    RECORD_HAND = "record_hand"
    UPDATE_HAND = "update_hand"
    DELETE_HAND = "delete_hand"
    UNDO_LAST_HAND = "undo_last_hand"
    RECORD_ROUND = "record_round"
    DELETE_ROUND = "delete_round"
    UNDO_LAST_ROUND = "undo_last_round"
    UPDATE_SCORE = "update_score"
    ADVANCE_DEAL = "advance_deal"
    MERGE_STATE = "merge_state"
    END_GAME = "end_game"
    PAUSE_GAME = "pause_game"
    RESUME_GAME = "resume_game"
    SWITCH_GAME = "switch_game"
    SET_CURRENT_GAME = "set_current_game"
    DELETE_GAME = "delete_game"
    ADD_STAKE = "add_stake"
    SET_GAME_TYPE = "set_game_type"


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True)


class CreateGame(_Command):
    """Create a game of any variant. settings applies to the phase game only."""

    kind: Literal[CommandKind.CREATE_GAME] = CommandKind.CREATE_GAME
    game_type: GameType = GameType.PHASE
    players: tuple[Player, ...]
    dealer_id: str
    settings: PhaseSettings | None = None
    stake: StakeInput | None = None


class RecordHand(_Command):
    kind: Literal[CommandKind.RECORD_HAND] = CommandKind.RECORD_HAND
    hand: HandInput


class UpdateHand(_Command):
    kind: Literal[CommandKind.UPDATE_HAND] = CommandKind.UPDATE_HAND
    hand_id: str
    update: HandUpdate


class DeleteHand(_Command):
    kind: Literal[CommandKind.DELETE_HAND] = CommandKind.DELETE_HAND
    hand_id: str


class UndoLastHand(_Command):
    kind: Literal[CommandKind.UNDO_LAST_HAND] = CommandKind.UNDO_LAST_HAND


class RecordRound(_Command):
    kind: Literal[CommandKind.RECORD_ROUND] = CommandKind.RECORD_ROUND
    train_round: TrainRoundInput


class DeleteRound(_Command):
    kind: Literal[CommandKind.DELETE_ROUND] = CommandKind.DELETE_ROUND
    round_id: str


class UndoLastRound(_Command):
    kind: Literal[CommandKind.UNDO_LAST_ROUND] = CommandKind.UNDO_LAST_ROUND


class UpdateScore(_Command):
    kind: Literal[CommandKind.UPDATE_SCORE] = CommandKind.UPDATE_SCORE
    player_id: str
    delta: int


class AdvanceDeal(_Command):
    kind: Literal[CommandKind.ADVANCE_DEAL] = CommandKind.ADVANCE_DEAL


class MergeState(_Command):
    kind: Literal[CommandKind.MERGE_STATE] = CommandKind.MERGE_STATE
    update: StockStateUpdate


class EndGame(_Command):
    kind: Literal[CommandKind.END_GAME] = CommandKind.END_GAME
    winner_id: str


class PauseGame(_Command):
    kind: Literal[CommandKind.PAUSE_GAME] = CommandKind.PAUSE_GAME
    snapshot: PauseSnapshot | None = None


class ResumeGame(_Command):
    kind: Literal[CommandKind.RESUME_GAME] = CommandKind.RESUME_GAME
    game_id: str | None = None


class SwitchGame(_Command):
    kind: Literal[CommandKind.SWITCH_GAME] = CommandKind.SWITCH_GAME
    game_id: str


class SetCurrentGame(_Command):
    kind: Literal[CommandKind.SET_CURRENT_GAME] = CommandKind.SET_CURRENT_GAME
    game_id: str | None = None


class DeleteGame(_Command):
    kind: Literal[CommandKind.DELETE_GAME] = CommandKind.DELETE_GAME
    game_id: str


class AddStake(_Command):
    kind: Literal[CommandKind.ADD_STAKE] = CommandKind.ADD_STAKE
    game_id: str | None = None
    game_type: GameType
    amount: str
    currency: str
    players: tuple[str, ...] = ()
    player_id: str | None = None
    winner_id: str | None = None
    settled_at: int | None = None


class SetGameType(_Command):
    kind: Literal[CommandKind.SET_GAME_TYPE] = CommandKind.SET_GAME_TYPE
    game_type: GameType


Command = Annotated[
    CreateGame
    | RecordHand
    | UpdateHand
    | DeleteHand
    | UndoLastHand
    | RecordRound
    | DeleteRound
    | UndoLastRound
    | UpdateScore
    | AdvanceDeal
    | MergeState
    | EndGame
    | PauseGame
    | ResumeGame
    | SwitchGame
    | SetCurrentGame
    | DeleteGame
    | AddStake
    | SetGameType,
    Field(discriminator="kind"),
]


class CommandContext(NamedTuple):
    """Clock reading and id source for one command. Handlers stay pure given a context."""

    now: int
    new_id: Callable[[], str]


class CommandResult(NamedTuple):
    """
    Outcome of one dispatched command.

    When applied is False, state is the unchanged prior state and reason says
    why nothing happened. created_id carries the id of a created game or stake.
    """

    state: SessionState
    applied: bool = True
    reason: str | None = None
    created_id: str | None = None
