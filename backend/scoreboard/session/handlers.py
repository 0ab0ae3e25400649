"""
Pure command handlers for the session directory.

Each handler maps (state, command, context) to a CommandResult. Handlers
locate the target game, delegate to that variant's machine, and store the
returned snapshot; they never know variant scoring rules. Rule violations
raised by the machines are caught here and turned into an unapplied result,
so expected conditions never escape a command. The one exception is
InvalidRosterError on create, which is a validation failure raised before
any game exists.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from scoreboard.logic import pegging, phase, stock, train
from scoreboard.logic.enums import GameStatus, GameType, SnapshotAction
from scoreboard.logic.exceptions import ScoreboardRuleError
from scoreboard.logic.state_utils import (
    add_game,
    append_audit_entry,
    append_stake,
    append_win,
    complete_game,
    find_game,
    remove_game,
    replace_game,
    stake_for_game,
)
from scoreboard.logic.transition import Transition
from scoreboard.logic.types import StakeEntry, WinHistoryEntry
from scoreboard.session.audit import build_pause_snapshot, make_audit_entry
from scoreboard.session.commands import CommandKind, CommandResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from scoreboard.logic.state import Game, SessionState
    from scoreboard.session.commands import (
        AddStake,
        Command,
        CommandContext,
        CreateGame,
        DeleteGame,
        EndGame,
        PauseGame,
        ResumeGame,
        SetCurrentGame,
        SetGameType,
        SwitchGame,
    )

logger = structlog.get_logger()


def _rejected(state: SessionState, reason: str) -> CommandResult:
    logger.warning("command not applied", reason=reason)
    return CommandResult(state=state, applied=False, reason=reason)


def _audit(state: SessionState, game: Game, action: SnapshotAction, ctx: CommandContext) -> SessionState:
    return append_audit_entry(state, make_audit_entry(game, action, entry_id=ctx.new_id(), now=ctx.now))


def _stake_label(state: SessionState, game: Game) -> str | None:
    """Return the stake to show in win history: the phase game's bet, else the ledger entry."""
    if game.game_type == GameType.PHASE and game.settings.global_bet:
        return game.settings.global_bet
    stake = stake_for_game(state, game.id)
    return stake.label if stake is not None else None


def _record_completion(state: SessionState, game: Game, ctx: CommandContext) -> SessionState:
    """Append the win-history and audit entries for a game that just completed."""
    winner = game.find_player(game.winner_id) if game.winner_id else None
    if winner is not None:
        entry = WinHistoryEntry(
            id=ctx.new_id(),
            game_id=game.id,
            game_type=game.game_type,
            winner_id=winner.id,
            winner_name=winner.name,
            winner_avatar=winner.avatar,
            stake=_stake_label(state, game),
            date=ctx.now,
        )
        state = append_win(state, entry)
    logger.info("game completed", game_type=game.game_type, winner_id=game.winner_id)
    return _audit(state, game, SnapshotAction.COMPLETED, ctx)


def _apply_to_current(
    state: SessionState,
    game_type: GameType,
    ctx: CommandContext,
    transform: Callable[[Game], Game | Transition],
    *,
    audit_action: SnapshotAction | None = None,
) -> CommandResult:
    """
    Run a variant transition against the current game and store the result.

    A missing current game, a game of another variant, or a rule violation
    leaves the state untouched.
    """
    game = find_game(state, state.current_game_id)
    if game is None:
        return _rejected(state, "no current game")
    if game.game_type != game_type:
        return _rejected(state, f"current game is {game.game_type.value}, not {game_type.value}")

    try:
        outcome = transform(game)
    except ScoreboardRuleError as e:
        return _rejected(state, str(e))

    transition = outcome if isinstance(outcome, Transition) else Transition(game=outcome)
    new_state = replace_game(state, transition.game)
    if audit_action is not None:
        new_state = _audit(new_state, transition.game, audit_action, ctx)
    if transition.completed:
        new_state = _record_completion(new_state, transition.game, ctx)
    return CommandResult(state=new_state)


# ---------------------------------------------------------------------------
# Game lifecycle
# ---------------------------------------------------------------------------


def handle_create_game(state: SessionState, command: CreateGame, ctx: CommandContext) -> CommandResult:
    """
    Create a game, make it current and active, and write its stake if given.

    Raises:
        InvalidRosterError: The roster cannot form a game of this type.

    """
    game_id = ctx.new_id()
    common = {"game_id": game_id, "players": command.players, "dealer_id": command.dealer_id, "now": ctx.now}
    match command.game_type:
        case GameType.PHASE:
            game: Game = phase.create_phase_game(**common, settings=command.settings)
        case GameType.PEGGING:
            game = pegging.create_pegging_game(**common)
        case GameType.STOCK:
            game = stock.create_stock_game(**common)
        case GameType.TRAIN:
            game = train.create_train_game(**common)

    new_state = add_game(state, game).model_copy(update={"current_game_id": game_id, "active_game_id": game_id})
    new_state = _audit(new_state, game, SnapshotAction.CREATED, ctx)
    if command.stake is not None:
        new_state = append_stake(
            new_state,
            StakeEntry(
                id=ctx.new_id(),
                game_id=game_id,
                game_type=command.game_type,
                amount=command.stake.amount,
                currency=command.stake.currency,
                players=tuple(p.name for p in command.players),
                created_at=ctx.now,
            ),
        )
    logger.info("game created", game_id=game_id, game_type=command.game_type, players=len(command.players))
    return CommandResult(state=new_state, created_id=game_id)


def handle_end_game(state: SessionState, command: EndGame, ctx: CommandContext) -> CommandResult:
    game = find_game(state, state.current_game_id)
    if game is None:
        return _rejected(state, "no current game")
    if game.is_completed:
        return _rejected(state, f"game {game.id} is already completed")
    if not game.has_player(command.winner_id):
        return _rejected(state, f"winner {command.winner_id!r} is not in game {game.id}")

    ended = complete_game(game, command.winner_id, ctx.now)
    return CommandResult(state=_record_completion(replace_game(state, ended), ended, ctx))


def handle_pause_game(state: SessionState, command: PauseGame, ctx: CommandContext) -> CommandResult:
    game = find_game(state, state.current_game_id)
    if game is None:
        return _rejected(state, "no current game")
    if game.is_completed:
        return _rejected(state, f"game {game.id} is completed")

    snapshot = command.snapshot or build_pause_snapshot(game)
    paused = game.model_copy(update={"status": GameStatus.PAUSED, "pause_snapshot": snapshot})
    logger.info("game paused", game_id=game.id)
    return CommandResult(state=_audit(replace_game(state, paused), paused, SnapshotAction.PAUSED, ctx))


def handle_resume_game(state: SessionState, command: ResumeGame, ctx: CommandContext) -> CommandResult:
    target_id = command.game_id or state.current_game_id
    game = find_game(state, target_id)
    if game is None:
        return _rejected(state, f"game {target_id!r} not found")
    if game.is_completed:
        return _rejected(state, f"game {game.id} is completed")

    resumed = game.model_copy(update={"status": GameStatus.ACTIVE, "pause_snapshot": None})
    new_state = replace_game(state, resumed).model_copy(
        update={"current_game_id": game.id, "active_game_id": game.id},
    )
    logger.info("game resumed", game_id=game.id)
    return CommandResult(state=_audit(new_state, resumed, SnapshotAction.RESUMED, ctx))


def handle_switch_game(state: SessionState, command: SwitchGame, ctx: CommandContext) -> CommandResult:
    game = find_game(state, command.game_id)
    if game is None:
        return _rejected(state, f"game {command.game_id!r} not found")
    new_state = _audit(state, game, SnapshotAction.SWITCHED, ctx)
    return CommandResult(
        state=new_state.model_copy(update={"current_game_id": game.id, "active_game_id": game.id}),
    )


def handle_set_current_game(state: SessionState, command: SetCurrentGame, ctx: CommandContext) -> CommandResult:  # noqa: ARG001
    if command.game_id is not None and find_game(state, command.game_id) is None:
        return _rejected(state, f"game {command.game_id!r} not found")
    return CommandResult(state=state.model_copy(update={"current_game_id": command.game_id}))


def handle_delete_game(state: SessionState, command: DeleteGame, ctx: CommandContext) -> CommandResult:  # noqa: ARG001
    if find_game(state, command.game_id) is None:
        return _rejected(state, f"game {command.game_id!r} not found")
    logger.info("game deleted", game_id=command.game_id)
    return CommandResult(state=remove_game(state, command.game_id))


def handle_add_stake(state: SessionState, command: AddStake, ctx: CommandContext) -> CommandResult:
    stake = StakeEntry(
        id=ctx.new_id(),
        game_id=command.game_id,
        game_type=command.game_type,
        amount=command.amount,
        currency=command.currency,
        players=command.players,
        player_id=command.player_id,
        winner_id=command.winner_id,
        created_at=ctx.now,
        settled_at=command.settled_at,
    )
    return CommandResult(state=append_stake(state, stake), created_id=stake.id)


def handle_set_game_type(state: SessionState, command: SetGameType, ctx: CommandContext) -> CommandResult:  # noqa: ARG001
    return CommandResult(state=state.model_copy(update={"selected_game_type": command.game_type}))


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def handle_command(state: SessionState, command: Command, ctx: CommandContext) -> CommandResult:
    """Route a command to its handler by kind."""
    variant_handlers: dict[CommandKind, Callable[[], CommandResult]] = {
        CommandKind.RECORD_HAND: lambda: _apply_to_current(
            state,
            GameType.PHASE,
            ctx,
            lambda g: phase.record_hand(g, command.hand, hand_id=ctx.new_id(), now=ctx.now),
        ),
        CommandKind.UPDATE_HAND: lambda: _apply_to_current(
            state,
            GameType.PHASE,
            ctx,
            lambda g: phase.update_hand(g, command.hand_id, command.update),
            audit_action=SnapshotAction.UPDATED,
        ),
        CommandKind.DELETE_HAND: lambda: _apply_to_current(
            state,
            GameType.PHASE,
            ctx,
            lambda g: phase.delete_hand(g, command.hand_id),
            audit_action=SnapshotAction.UPDATED,
        ),
        CommandKind.UNDO_LAST_HAND: lambda: _apply_to_current(
            state,
            GameType.PHASE,
            ctx,
            phase.undo_last_hand,
            audit_action=SnapshotAction.UPDATED,
        ),
        CommandKind.RECORD_ROUND: lambda: _apply_to_current(
            state,
            GameType.TRAIN,
            ctx,
            lambda g: train.record_round(g, command.train_round, round_id=ctx.new_id(), now=ctx.now),
        ),
        CommandKind.DELETE_ROUND: lambda: _apply_to_current(
            state,
            GameType.TRAIN,
            ctx,
            lambda g: train.delete_round(g, command.round_id),
            audit_action=SnapshotAction.UPDATED,
        ),
        CommandKind.UNDO_LAST_ROUND: lambda: _apply_to_current(
            state,
            GameType.TRAIN,
            ctx,
            train.undo_last_round,
            audit_action=SnapshotAction.UPDATED,
        ),
        CommandKind.UPDATE_SCORE: lambda: _apply_to_current(
            state,
            GameType.PEGGING,
            ctx,
            lambda g: pegging.update_score(g, command.player_id, command.delta, now=ctx.now),
        ),
        CommandKind.ADVANCE_DEAL: lambda: _apply_to_current(state, GameType.PEGGING, ctx, pegging.advance_deal),
        CommandKind.MERGE_STATE: lambda: _apply_to_current(
            state,
            GameType.STOCK,
            ctx,
            lambda g: stock.merge_state(g, command.update),
        ),
    }
    handler = variant_handlers.get(command.kind)
    if handler is not None:
        return handler()

    lifecycle_handlers: dict[CommandKind, Callable[..., CommandResult]] = {
        CommandKind.CREATE_GAME: handle_create_game,
        CommandKind.END_GAME: handle_end_game,
        CommandKind.PAUSE_GAME: handle_pause_game,
        CommandKind.RESUME_GAME: handle_resume_game,
        CommandKind.SWITCH_GAME: handle_switch_game,
        CommandKind.SET_CURRENT_GAME: handle_set_current_game,
        CommandKind.DELETE_GAME: handle_delete_game,
        CommandKind.ADD_STAKE: handle_add_stake,
        CommandKind.SET_GAME_TYPE: handle_set_game_type,
    }
    return lifecycle_handlers[command.kind](state, command, ctx)
