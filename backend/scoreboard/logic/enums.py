"""
String enum definitions for scoreboard concepts.
"""

from enum import StrEnum


class GameType(StrEnum):
    """Supported game variants."""

    PHASE = "phase"  # phase-progression card game
    PEGGING = "pegging"  # pegging board game
    STOCK = "stock"  # stock-elimination card game
    TRAIN = "train"  # domino train game


class GameStatus(StrEnum):
    """Lifecycle status of a game instance."""

    SETUP = "setup"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class PhaseVariant(StrEnum):
    """Rule variant for the phase-progression game."""

    STANDARD = "standard"
    EVENS = "evens"  # even phases only: 2, 4, 6, 8, 10
    FIXED = "fixed"  # game ends after a fixed number of hands


class BetType(StrEnum):
    """How a phase game's stake is applied."""

    PER_HAND = "per_hand"
    PER_GAME = "per_game"


class SnapshotAction(StrEnum):
    """Lifecycle action recorded in the audit log."""

    CREATED = "created"
    UPDATED = "updated"
    PAUSED = "paused"
    RESUMED = "resumed"
    SWITCHED = "switched"
    COMPLETED = "completed"
