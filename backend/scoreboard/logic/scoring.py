"""
Scoring rules for the phase-progression game.

Pure functions only: card-count scoring, the phase table and the phase
sequence each variant plays through.
"""

from scoreboard.logic.enums import PhaseVariant
from scoreboard.logic.types import CardCount

LOW_CARD_POINTS = 5
HIGH_CARD_POINTS = 10
SKIP_CARD_POINTS = 15
WILD_CARD_POINTS = 25

PHASES: dict[int, str] = {
    1: "2 sets of 3",
    2: "1 set of 3 + 1 run of 4",
    3: "1 set of 4 + 1 run of 4",
    4: "1 run of 7",
    5: "1 run of 8",
    6: "1 run of 9",
    7: "2 sets of 4",
    8: "7 cards of one color",
    9: "1 set of 5 + 1 set of 2",
    10: "1 set of 5 + 1 set of 3",
}

_STANDARD_SEQUENCE = tuple(sorted(PHASES))
_EVENS_SEQUENCE = tuple(phase for phase in _STANDARD_SEQUENCE if phase % 2 == 0)


def score_from_card_counts(cards: CardCount) -> int:
    """
    Return the penalty points for the cards left in a hand.

    Weights are strictly ordered low < high < skip < wild, and the result is never
    negative because every count is validated as non-negative.
    """
    return (
        cards.low * LOW_CARD_POINTS
        + cards.high * HIGH_CARD_POINTS
        + cards.skip * SKIP_CARD_POINTS
        + cards.wild * WILD_CARD_POINTS
    )


def phase_sequence(variant: PhaseVariant) -> tuple[int, ...]:
    """Return the ordered phases a player must complete under the variant."""
    if variant == PhaseVariant.EVENS:
        return _EVENS_SEQUENCE
    return _STANDARD_SEQUENCE


def first_phase(variant: PhaseVariant) -> int:
    return phase_sequence(variant)[0]


def next_phase(variant: PhaseVariant, current_phase: int) -> int | None:
    """Return the phase after current_phase, or None when current_phase is the last one."""
    sequence = phase_sequence(variant)
    index = sequence.index(current_phase)
    if index + 1 >= len(sequence):
        return None
    return sequence[index + 1]


def describe_phase(phase: int) -> str:
    return PHASES.get(phase, "")
