"""Typed domain exceptions for scoreboard rule violations.

All expected rule violations use subclasses of ScoreboardRuleError rather
than raw ValueError. The session handlers catch them at the command boundary
and turn them into an unapplied CommandResult, so no expected condition ever
escapes a command. PlayerNotFoundError is deliberately outside that hierarchy:
it signals a corrupted roster and must propagate.
"""


class ScoreboardRuleError(Exception):
    """Base exception for rule violations raised by the variant machines."""


class UnknownPlayerError(ScoreboardRuleError):
    """A command referenced a player id that is not in the game's roster."""


class UnknownHandError(ScoreboardRuleError):
    """A command referenced a hand or round id that is not in the history."""


class NoHistoryError(ScoreboardRuleError):
    """Undo was requested on a game with no recorded hands or rounds."""


class GameCompletedError(ScoreboardRuleError):
    """The game is completed and accepts no further play."""


class InvalidHandError(ScoreboardRuleError):
    """A submitted hand or round record is internally inconsistent."""


class InvalidScoreError(ScoreboardRuleError):
    """A score delta is outside the allowed range."""


class InvalidStateUpdateError(ScoreboardRuleError):
    """A partial state update has the wrong shape."""


class InvalidRosterError(ScoreboardRuleError):
    """The roster cannot form a game (size out of range, duplicate ids, unknown dealer)."""


class PlayerNotFoundError(Exception):
    """Raised when a player id expected to be in the roster is missing.

    Attributes:
        player_id: The id that could not be found.

    """

    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"player {player_id!r} not found in roster")
