"""Export the hand history of a stored phase game to CSV.

Usage: uv run python bin/export-history.py [game_id] [output_path]

Without a game id the current game is exported. Without an output path the
file is written to the working directory under a dated name.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from scoreboard.export import default_export_filename, hand_history_csv
from scoreboard.logic.state import PhaseGame
from scoreboard.session.persistence import load_session_state
from scoreboard.settings import ScoreboardSettings
from shared.logging import setup_logging
from shared.storage import LocalStateStorage


def main() -> None:
    if len(sys.argv) > 3:
        print(f"Usage: {sys.argv[0]} [game_id] [output_path]")
        sys.exit(1)

    setup_logging()
    settings = ScoreboardSettings()
    state = load_session_state(LocalStateStorage(settings.state_path))

    game_id = sys.argv[1] if len(sys.argv) > 1 else state.current_game_id
    game = next((g for g in state.games if g.id == game_id), None)
    if not isinstance(game, PhaseGame):
        print(f"Error: no phase game with id {game_id!r}")
        sys.exit(1)

    output = Path(sys.argv[2]) if len(sys.argv) > 2 else Path(default_export_filename())
    output.write_text(hand_history_csv(game), encoding="utf-8")
    print(f"Exported {len(game.hands)} hands to {output}")


if __name__ == "__main__":
    main()
