"""Shared result type for variant machine transitions.

Lives in a neutral module so the variant machines and the session handlers
can both import it without cycles.
"""

from typing import NamedTuple

from scoreboard.logic.state import PeggingGame, PhaseGame, TrainGame


class Transition(NamedTuple):
    """
    Result of a transition that can finish a game.

    completed is True only when this transition moved the game into COMPLETED;
    the caller uses it to write the win-history and audit entries exactly once.
    """

    game: PhaseGame | PeggingGame | TrainGame
    completed: bool = False
    winner_id: str | None = None
