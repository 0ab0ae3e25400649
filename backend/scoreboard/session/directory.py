"""Session directory: the single mutation entry point for the scoreboard state tree.

The directory owns one SessionState document and applies commands to it one
at a time under a lock, so every command observes the fully up-to-date prior
state. It is constructed explicitly by whatever composes the engine (tests,
scripts, create_directory) rather than living as a process-wide singleton.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from scoreboard.logic.enums import GameType
from scoreboard.logic.state import PhaseGame, SessionState, TrainGame
from scoreboard.logic.state_utils import find_game
from scoreboard.session.audit import entries_for_game
from scoreboard.session.commands import (
    AddStake,
    AdvanceDeal,
    CommandContext,
    CreateGame,
    DeleteGame,
    DeleteHand,
    DeleteRound,
    EndGame,
    MergeState,
    PauseGame,
    RecordHand,
    RecordRound,
    ResumeGame,
    SetCurrentGame,
    SetGameType,
    SwitchGame,
    UndoLastHand,
    UndoLastRound,
    UpdateHand,
    UpdateScore,
)
from scoreboard.session.handlers import handle_command

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scoreboard.logic.settings import PhaseSettings
    from scoreboard.logic.state import Game, Hand, TrainRound
    from scoreboard.logic.types import (
        AuditEntry,
        HandInput,
        HandUpdate,
        PauseSnapshot,
        Player,
        StakeEntry,
        StakeInput,
        StockStateUpdate,
        TrainRoundInput,
        WinHistoryEntry,
    )
    from scoreboard.session.commands import Command, CommandResult

logger = structlog.get_logger()

StateListener = Callable[[SessionState], None]


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid4())


class SessionDirectory:
    """
    Hold the session document and dispatch commands against it.

    Args:
        state: Initial document, for example one loaded from storage.
        clock: Returns the current time in epoch milliseconds.
        id_factory: Returns a fresh unique id for games, records and ledger entries.
        listener: Called with the new document after every applied command,
            still under the dispatch lock so calls arrive in command order.

    """

    def __init__(
        self,
        state: SessionState | None = None,
        *,
        clock: Callable[[], int] | None = None,
        id_factory: Callable[[], str] | None = None,
        listener: StateListener | None = None,
    ) -> None:
        self._state = state or SessionState()
        self._clock = clock or _epoch_ms
        self._id_factory = id_factory or _new_id
        self._listener = listener
        self._lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    def dispatch(self, command: Command) -> CommandResult:
        """Apply one command atomically and return its result."""
        with self._lock:
            ctx = CommandContext(now=self._clock(), new_id=self._id_factory)
            with structlog.contextvars.bound_contextvars(
                command=command.kind.value,
                game_id=self._state.current_game_id,
            ):
                result = handle_command(self._state, command, ctx)
                if result.applied:
                    logger.debug("command applied", created_id=result.created_id)
            if result.applied:
                self._state = result.state
                if self._listener is not None:
                    self._listener(result.state)
        return result

    # --- game creation -----------------------------------------------------

    def _create(
        self,
        game_type: GameType,
        players: Sequence[Player],
        dealer_id: str,
        *,
        settings: PhaseSettings | None = None,
        stake: StakeInput | None = None,
    ) -> str:
        command = CreateGame(
            game_type=game_type,
            players=tuple(players),
            dealer_id=dealer_id,
            settings=settings,
            stake=stake,
        )
        result = self.dispatch(command)
        return result.created_id or ""

    def create_game(
        self,
        players: Sequence[Player],
        dealer_id: str,
        settings: PhaseSettings | None = None,
        stake: StakeInput | None = None,
    ) -> str:
        """Create a phase-progression game and return its id."""
        return self._create(GameType.PHASE, players, dealer_id, settings=settings, stake=stake)

    def create_pegging_game(self, players: Sequence[Player], dealer_id: str, stake: StakeInput | None = None) -> str:
        return self._create(GameType.PEGGING, players, dealer_id, stake=stake)

    def create_stock_game(self, players: Sequence[Player], dealer_id: str, stake: StakeInput | None = None) -> str:
        return self._create(GameType.STOCK, players, dealer_id, stake=stake)

    def create_train_game(self, players: Sequence[Player], dealer_id: str, stake: StakeInput | None = None) -> str:
        return self._create(GameType.TRAIN, players, dealer_id, stake=stake)

    # --- variant commands ----------------------------------------------------

    def record_hand(self, hand: HandInput) -> CommandResult:
        return self.dispatch(RecordHand(hand=hand))

    def update_hand(self, hand_id: str, update: HandUpdate) -> CommandResult:
        return self.dispatch(UpdateHand(hand_id=hand_id, update=update))

    def delete_hand(self, hand_id: str) -> CommandResult:
        return self.dispatch(DeleteHand(hand_id=hand_id))

    def undo_last_hand(self) -> CommandResult:
        return self.dispatch(UndoLastHand())

    def record_round(self, train_round: TrainRoundInput) -> CommandResult:
        return self.dispatch(RecordRound(train_round=train_round))

    def delete_round(self, round_id: str) -> CommandResult:
        return self.dispatch(DeleteRound(round_id=round_id))

    def undo_last_round(self) -> CommandResult:
        return self.dispatch(UndoLastRound())

    def update_score(self, player_id: str, delta: int) -> CommandResult:
        return self.dispatch(UpdateScore(player_id=player_id, delta=delta))

    def advance_deal(self) -> CommandResult:
        return self.dispatch(AdvanceDeal())

    def merge_state(self, update: StockStateUpdate) -> CommandResult:
        return self.dispatch(MergeState(update=update))

    # --- lifecycle commands --------------------------------------------------

    def end_game(self, winner_id: str) -> CommandResult:
        return self.dispatch(EndGame(winner_id=winner_id))

    def pause_game(self, snapshot: PauseSnapshot | None = None) -> CommandResult:
        return self.dispatch(PauseGame(snapshot=snapshot))

    def resume_game(self, game_id: str | None = None) -> CommandResult:
        return self.dispatch(ResumeGame(game_id=game_id))

    def switch_game(self, game_id: str) -> CommandResult:
        return self.dispatch(SwitchGame(game_id=game_id))

    def set_current_game(self, game_id: str | None) -> CommandResult:
        return self.dispatch(SetCurrentGame(game_id=game_id))

    def delete_game(self, game_id: str) -> CommandResult:
        return self.dispatch(DeleteGame(game_id=game_id))

    def add_stake(
        self,
        game_type: GameType,
        amount: str,
        currency: str,
        *,
        game_id: str | None = None,
        players: Sequence[str] = (),
        player_id: str | None = None,
        winner_id: str | None = None,
    ) -> str:
        """Append a stake ledger entry and return its id."""
        result = self.dispatch(
            AddStake(
                game_id=game_id,
                game_type=game_type,
                amount=amount,
                currency=currency,
                players=tuple(players),
                player_id=player_id,
                winner_id=winner_id,
            ),
        )
        return result.created_id or ""

    def set_game_type(self, game_type: GameType) -> CommandResult:
        return self.dispatch(SetGameType(game_type=game_type))

    # --- queries ---------------------------------------------------------------

    @property
    def current_game(self) -> Game | None:
        return find_game(self._state, self._state.current_game_id)

    @property
    def active_game(self) -> Game | None:
        return find_game(self._state, self._state.active_game_id)

    def get_game(self, game_id: str) -> Game | None:
        return find_game(self._state, game_id)

    def hand_history(self, game_id: str | None = None) -> tuple[Hand, ...]:
        """Return the recorded hands of a phase game (the current one by default)."""
        game = find_game(self._state, game_id or self._state.current_game_id)
        if not isinstance(game, PhaseGame):
            return ()
        return game.hands

    def round_history(self, game_id: str | None = None) -> tuple[TrainRound, ...]:
        """Return the recorded rounds of a train game (the current one by default)."""
        game = find_game(self._state, game_id or self._state.current_game_id)
        if not isinstance(game, TrainGame):
            return ()
        return game.rounds

    def audit_log(self, game_id: str | None = None) -> tuple[AuditEntry, ...]:
        return entries_for_game(self._state, game_id)

    @property
    def stakes(self) -> tuple[StakeEntry, ...]:
        return self._state.stakes_history

    @property
    def win_history(self) -> tuple[WinHistoryEntry, ...]:
        return self._state.game_history
