import json

from scoreboard.logic.state import SCHEMA_VERSION, SessionState
from scoreboard.logic.types import CardCount
from scoreboard.session.persistence import load_session_state, parse_session_state, save_session_state
from scoreboard.tests.conftest import hand_input, make_players
from shared.storage import LocalStateStorage


class TestParseSessionState:
    def test_empty_content_is_empty_session(self):
        assert parse_session_state(None) == SessionState()
        assert parse_session_state("") == SessionState()

    def test_invalid_json_resets(self):
        assert parse_session_state("{not json") == SessionState()

    def test_version_mismatch_resets(self):
        content = json.dumps({"schema_version": SCHEMA_VERSION - 1, "current_game_id": "x"})
        assert parse_session_state(content) == SessionState()

    def test_missing_version_resets(self):
        assert parse_session_state(json.dumps({"games": []})) == SessionState()

    def test_non_object_resets(self):
        assert parse_session_state("[1, 2]") == SessionState()

    def test_invalid_document_resets(self):
        content = json.dumps({"schema_version": SCHEMA_VERSION, "games": [{"game_type": "phase", "id": 1}]})
        assert parse_session_state(content) == SessionState()


class TestRoundTrip:
    def test_every_variant_survives_save_and_load(self, tmp_path, directory):
        players = make_players("A", "B", "C")
        directory.create_game(players, "a")
        directory.record_hand(hand_input("a", {"b": CardCount(low=2)}, laid=["a"]))
        directory.pause_game()
        directory.create_pegging_game(players, "b")
        directory.update_score("a", 9)
        directory.create_stock_game(players, "c")
        directory.create_train_game(players, "a")
        directory.end_game("c")

        storage = LocalStateStorage(tmp_path / "state.json")
        save_session_state(storage, directory.state)
        loaded = load_session_state(storage)

        assert loaded == directory.state
        assert [g.game_type for g in loaded.games] == [g.game_type for g in directory.state.games]

    def test_load_without_file_is_empty(self, tmp_path):
        assert load_session_state(LocalStateStorage(tmp_path / "missing.json")) == SessionState()
