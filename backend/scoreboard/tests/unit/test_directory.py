"""
Session directory command dispatch: creation, variant routing, automatic
completion bookkeeping and the no-op contract for invalid references.
"""

import threading

import pytest
from pydantic import ValidationError

from scoreboard.logic.enums import GameStatus, GameType, PhaseVariant, SnapshotAction
from scoreboard.logic.exceptions import InvalidRosterError, PlayerNotFoundError
from scoreboard.logic.settings import PhaseSettings
from scoreboard.logic.types import CardCount, HandUpdate, Player, StakeInput, StockStateUpdate
from scoreboard.session.commands import RecordHand
from scoreboard.session.directory import SessionDirectory
from scoreboard.tests.conftest import FakeClock, hand_input, make_players, round_input, sequential_ids


class TestCreateGame:
    def test_returns_id_and_sets_pointers(self, directory):
        game_id = directory.create_game(make_players("A", "B", "C"), "a")

        assert game_id
        assert directory.state.current_game_id == game_id
        assert directory.state.active_game_id == game_id
        assert directory.current_game.game_type == GameType.PHASE
        assert directory.current_game.status == GameStatus.ACTIVE

    def test_appends_created_audit_entry(self, directory):
        game_id = directory.create_game(make_players("A", "B"), "a")

        log = directory.audit_log(game_id)
        assert [e.action for e in log] == [SnapshotAction.CREATED]
        assert log[0].snapshot.dealer_id == "a"

    def test_stake_written_to_ledger(self, directory):
        stake = StakeInput(amount="5", currency="EUR")
        game_id = directory.create_pegging_game(make_players("A", "B"), "a", stake=stake)

        (stake,) = directory.stakes
        assert stake.game_id == game_id
        assert stake.game_type == GameType.PEGGING
        assert stake.players == ("A", "B")
        assert stake.label == "5 EUR"

    def test_each_variant(self, directory):
        players = make_players("A", "B")
        ids = [
            directory.create_game(players, "a"),
            directory.create_pegging_game(players, "a"),
            directory.create_stock_game(players, "a"),
            directory.create_train_game(players, "a"),
        ]
        assert [directory.get_game(i).game_type for i in ids] == list(GameType)
        assert directory.state.current_game_id == ids[-1]

    @pytest.mark.parametrize(
        ("players", "dealer_id"),
        [
            (make_players("A"), "a"),
            (make_players("A", "B", "C", "D", "E", "F", "G"), "a"),
            ((Player(id="a", name="A"), Player(id="a", name="A2")), "a"),
            (make_players("A", "B"), "zed"),
        ],
    )
    def test_invalid_roster_raises_before_any_state(self, directory, players, dealer_id):
        with pytest.raises(InvalidRosterError):
            directory.create_game(players, dealer_id)
        assert directory.state.games == ()
        assert directory.state.game_snapshots == ()

    def test_pegging_rejects_four_players(self, directory):
        with pytest.raises(InvalidRosterError, match="2-3"):
            directory.create_pegging_game(make_players("A", "B", "C", "D"), "a")

    def test_train_allows_eight_players(self, directory):
        players = make_players(*(f"P{i}" for i in range(8)))
        assert directory.create_train_game(players, "p0")


class TestPhaseCommands:
    def test_record_hand_updates_current_game(self, directory):
        directory.create_game(make_players("A", "B", "C"), "a")

        result = directory.record_hand(hand_input("a", {"b": CardCount(low=2)}, laid=["a"]))

        assert result.applied is True
        assert directory.hand_history()[0].winner_id == "a"
        assert directory.current_game.player_states[1].total_score == 10

    def test_hand_corrections_write_updated_audit(self, directory):
        game_id = directory.create_game(make_players("A", "B", "C"), "a")
        directory.record_hand(hand_input("a", {"b": CardCount(low=2)}))
        directory.record_hand(hand_input("b", {"a": CardCount(low=1)}))
        first_id = directory.hand_history()[0].id

        assert directory.update_hand(first_id, HandUpdate(notes="fixed")).applied
        assert directory.delete_hand(first_id).applied
        assert directory.undo_last_hand().applied

        actions = [e.action for e in directory.audit_log(game_id)]
        assert actions == [SnapshotAction.CREATED, *[SnapshotAction.UPDATED] * 3]
        assert directory.hand_history() == ()

    def test_completion_writes_win_history_and_audit(self, directory):
        settings = PhaseSettings(variant=PhaseVariant.FIXED, fixed_hand_count=1, global_bet="10 USD")
        game_id = directory.create_game(make_players("A", "B", "C"), "a", settings=settings)

        result = directory.record_hand(hand_input("b", {"a": CardCount(low=1), "c": CardCount(high=1)}))

        assert result.applied is True
        assert directory.current_game.status == GameStatus.COMPLETED
        (win,) = directory.win_history
        assert (win.game_id, win.winner_id, win.winner_name, win.stake) == (game_id, "b", "B", "10 USD")
        assert directory.audit_log(game_id)[-1].action == SnapshotAction.COMPLETED

    def test_record_on_completed_game_is_noop(self, directory):
        settings = PhaseSettings(variant=PhaseVariant.FIXED, fixed_hand_count=1)
        directory.create_game(make_players("A", "B"), "a", settings=settings)
        directory.record_hand(hand_input("a", player_ids=("a", "b")))
        before = directory.state

        result = directory.record_hand(hand_input("b", player_ids=("a", "b")))

        assert result.applied is False
        assert "completed" in result.reason
        assert directory.state is before

    def test_unknown_hand_is_noop(self, directory):
        directory.create_game(make_players("A", "B"), "a")
        before = directory.state

        result = directory.delete_hand("missing")

        assert result.applied is False
        assert directory.state is before

    def test_undo_without_history_is_noop(self, directory):
        directory.create_game(make_players("A", "B"), "a")
        assert directory.undo_last_hand().applied is False

    def test_unknown_winner_is_noop(self, directory):
        directory.create_game(make_players("A", "B"), "a")
        result = directory.record_hand(hand_input("zed", player_ids=("a", "b")))
        assert result.applied is False
        assert directory.hand_history() == ()


class TestVariantRouting:
    def test_no_current_game_is_noop(self, directory):
        result = directory.update_score("a", 3)
        assert result.applied is False
        assert result.reason == "no current game"

    def test_wrong_variant_is_noop(self, directory):
        directory.create_pegging_game(make_players("A", "B"), "a")
        before = directory.state

        result = directory.record_hand(hand_input("a", player_ids=("a", "b")))

        assert result.applied is False
        assert "pegging" in result.reason
        assert directory.state is before

    def test_pegging_to_target_records_win(self, directory):
        stake = StakeInput(amount="2", currency="GBP")
        game_id = directory.create_pegging_game(make_players("A", "B"), "a", stake=stake)
        directory.update_score("a", 10)
        directory.update_score("a", 115)

        game = directory.get_game(game_id)
        assert game.status == GameStatus.COMPLETED
        assert game.scores_by_player["a"] == 125
        (win,) = directory.win_history
        assert win.stake == "2 GBP"

    def test_advance_deal(self, directory):
        directory.create_pegging_game(make_players("A", "B"), "a")
        assert directory.advance_deal().applied
        assert directory.current_game.who_has_crib == "b"

    def test_merge_stock_state(self, directory):
        directory.create_stock_game(make_players("A", "B"), "a")
        assert directory.merge_state(StockStateUpdate(stock_piles={"a": 0})).applied
        assert directory.current_game.stock_by_player["a"] == 0
        assert directory.current_game.status == GameStatus.ACTIVE

    def test_merge_unknown_player_is_noop(self, directory):
        directory.create_stock_game(make_players("A", "B"), "a")
        assert directory.merge_state(StockStateUpdate(hand_sizes={"zed": 1})).applied is False

    def test_train_rounds(self, directory):
        game_id = directory.create_train_game(make_players("A", "B"), "a")
        directory.record_round(round_input("a", {"a": 0, "b": 9}))
        directory.record_round(round_input("b", {"a": 4, "b": 0}))

        assert len(directory.round_history(game_id)) == 2
        assert directory.undo_last_round().applied
        first_id = directory.round_history()[0].id
        assert directory.delete_round(first_id).applied
        assert directory.current_game.current_engine == 12
        assert directory.delete_round("missing").applied is False

    def test_train_completion_records_win(self, directory):
        directory.create_train_game(make_players("A", "B"), "a")
        for _ in range(13):
            directory.record_round(round_input("b", {"a": 3, "b": 0}))
        assert directory.current_game.status == GameStatus.COMPLETED
        assert directory.win_history[0].winner_id == "b"

    def test_history_queries_for_other_variants_are_empty(self, directory):
        directory.create_pegging_game(make_players("A", "B"), "a")
        assert directory.hand_history() == ()
        assert directory.round_history() == ()


class TestDispatch:
    def test_listener_called_only_for_applied_commands(self):
        seen = []
        directory = SessionDirectory(clock=FakeClock(), id_factory=sequential_ids(), listener=seen.append)

        directory.create_game(make_players("A", "B"), "a")
        directory.delete_hand("missing")

        assert len(seen) == 1
        assert seen[0] is directory.state

    def test_ids_and_clock_come_from_injected_sources(self):
        clock = FakeClock(start=0)
        directory = SessionDirectory(clock=clock, id_factory=sequential_ids("g"))

        game_id = directory.create_game(make_players("A", "B"), "a")

        assert game_id == "g-1"
        assert directory.current_game.started_at == 1000
        assert directory.audit_log()[0].id == "g-2"

    def test_dispatch_accepts_command_models(self, directory):
        directory.create_game(make_players("A", "B"), "a")
        result = directory.dispatch(RecordHand(hand=hand_input("a", player_ids=("a", "b"))))
        assert result.applied is True
        assert result.state is directory.state

    def test_corrupted_roster_propagates(self, directory):
        game_id = directory.create_game(make_players("A", "B"), "a")
        broken = directory.get_game(game_id).model_copy(update={"current_dealer_id": "ghost"})
        corrupted = SessionDirectory(directory.state.model_copy(update={"games": (broken,)}))

        with pytest.raises(PlayerNotFoundError, match="ghost"):
            corrupted.record_hand(hand_input("a", player_ids=("a", "b"), dealer_id="a"))

    def test_concurrent_commands_are_serialized(self):
        directory = SessionDirectory(id_factory=sequential_ids())
        directory.create_pegging_game(make_players("A", "B", "C"), "a")

        threads = [threading.Thread(target=directory.update_score, args=("b", 1)) for _ in range(60)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert directory.current_game.scores_by_player["b"] == 60


class TestQueryResultsAreReadOnly:
    def test_pegging_scores_cannot_be_changed_outside_dispatch(self, directory):
        directory.create_pegging_game(make_players("A", "B"), "a")
        game = directory.current_game

        game.scores_by_player["a"] = 500
        with pytest.raises(TypeError):
            game.scores[0] = game.scores[1]
        with pytest.raises(ValidationError):
            game.scores[0].score = 500

        assert directory.current_game.scores_by_player == {"a": 0, "b": 0}

    def test_stock_counts_cannot_be_changed_outside_dispatch(self, directory):
        directory.create_stock_game(make_players("A", "B"), "a")
        game = directory.current_game

        game.stock_by_player["a"] = 0
        game.hand_sizes_by_player["b"] = 0
        game.discards_by_player["a"] = ((1,), (), (), ())
        with pytest.raises(ValidationError):
            game.stock_piles[0].count = 0

        current = directory.current_game
        assert current.stock_by_player == {"a": 30, "b": 30}
        assert current.hand_sizes_by_player == {"a": 5, "b": 5}
        assert current.discards_by_player["a"] == ((), (), (), ())
