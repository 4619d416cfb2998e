"""
Camelot Compatibility Rules: pure predicates over two Camelot codes.

Codes look like "8A": a number 1-12 and a letter (A = minor, B = major).

The predicates overlap and are evaluated independently when scoring.
Labeling a realized transition uses the fixed priority order in
CATEGORY_PRIORITY and returns exactly one category.
"""

import logging
from enum import Enum

from ..analyze.key import parse_camelot

logger = logging.getLogger(__name__)


class TransitionCategory(Enum):
    """Display label for the move from one track to the next."""
    PERFECT_MATCH = "Perfect Match"
    ENERGY_BOOST = "Energy Boost"
    ENERGY_DROP = "Energy Drop"
    MOOD_CHANGE = "Mood Change"
    CHALLENGING = "Challenging Transition"


OPENING_TRACK = "Opening Track"


def is_perfect_match(from_key: str, to_key: str) -> bool:
    """
    Same key, relative major/minor, or neighbouring number in the same mode.

    The neighbour check does not wrap: 12A -> 1A is not a perfect match
    (it is an energy boost).
    """
    from_num, from_letter = parse_camelot(from_key)
    to_num, to_letter = parse_camelot(to_key)

    if from_key == to_key:
        return True

    if from_num == to_num and from_letter != to_letter:
        return True

    return abs(from_num - to_num) == 1 and from_letter == to_letter


def is_energy_boost(from_key: str, to_key: str) -> bool:
    """One step clockwise in the same mode, wrapping 12 -> 1."""
    from_num, from_letter = parse_camelot(from_key)
    to_num, to_letter = parse_camelot(to_key)
    return to_num == (from_num % 12) + 1 and from_letter == to_letter


def is_energy_drop(from_key: str, to_key: str) -> bool:
    """One step counter-clockwise in the same mode, wrapping 1 -> 12."""
    from_num, from_letter = parse_camelot(from_key)
    to_num, to_letter = parse_camelot(to_key)
    return to_num == (12 if from_num == 1 else from_num - 1) and from_letter == to_letter


def is_mood_change(from_key: str, to_key: str) -> bool:
    """Same number, switch between minor and major."""
    from_num, from_letter = parse_camelot(from_key)
    to_num, to_letter = parse_camelot(to_key)
    return from_num == to_num and from_letter != to_letter


CATEGORY_PRIORITY = (
    (TransitionCategory.PERFECT_MATCH, is_perfect_match),
    (TransitionCategory.ENERGY_BOOST, is_energy_boost),
    (TransitionCategory.ENERGY_DROP, is_energy_drop),
    (TransitionCategory.MOOD_CHANGE, is_mood_change),
)


def categorize_transition(from_key: str, to_key: str) -> TransitionCategory:
    """
    Label a transition with the first matching predicate in priority order.

    Returns:
        TransitionCategory, CHALLENGING when no predicate holds
    """
    for category, predicate in CATEGORY_PRIORITY:
        if predicate(from_key, to_key):
            return category
    return TransitionCategory.CHALLENGING
