"""CSV export of a phase game's hand history."""

from __future__ import annotations

import csv
import io
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scoreboard.logic.state import PhaseGame


def hand_history_columns(game: PhaseGame) -> list[str]:
    return [
        "Hand",
        "Dealer",
        "Winner",
        *(f"{p.name} Score" for p in game.players),
        *(f"{p.name} Phase" for p in game.players),
    ]


def hand_history_rows(game: PhaseGame) -> list[list[str | int]]:
    """
    One row per recorded hand. Players missing from a hand score 0 with a blank phase.

    The phase columns show the phase each player attempted as recorded with the
    hand. Deleting or correcting an earlier hand replays the standings but never
    rewrites later records, so these can differ from the replayed phases.
    """
    names = {p.id: p.name for p in game.players}
    rows: list[list[str | int]] = []
    for hand in game.hands:
        scores = [hand.score_for(p.id) for p in game.players]
        rows.append(
            [
                hand.hand_number,
                names.get(hand.dealer_id, ""),
                names.get(hand.winner_id, ""),
                *(s.score if s is not None else 0 for s in scores),
                *(s.phase_number if s is not None else "" for s in scores),
            ],
        )
    return rows


def hand_history_csv(game: PhaseGame) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(hand_history_columns(game))
    writer.writerows(hand_history_rows(game))
    return buffer.getvalue()


def default_export_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(tz=UTC)
    return f"phase-game-{now.date().isoformat()}.csv"
