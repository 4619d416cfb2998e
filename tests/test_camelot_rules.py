"""
Unit tests for Camelot compatibility rules.

Tests the four predicates, their wraparound behavior, and the
priority order used to label a transition.
"""

import pytest

from camelotmix.analyze.key import CAMELOT_WHEEL, MissingCamelotKeyError
from camelotmix.generate.rules import (
    TransitionCategory,
    categorize_transition,
    is_energy_boost,
    is_energy_drop,
    is_mood_change,
    is_perfect_match,
)

ALL_CODES = list(CAMELOT_WHEEL.keys())


class TestPerfectMatch:
    """Test the perfect-match predicate."""

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_reflexive(self, code):
        """Every code is a perfect match with itself."""
        assert is_perfect_match(code, code) is True

    def test_relative_major_minor(self):
        """Same number, other letter."""
        assert is_perfect_match("8A", "8B") is True
        assert is_perfect_match("8B", "8A") is True

    def test_adjacent_same_letter(self):
        """Neighbouring numbers in the same mode."""
        assert is_perfect_match("8A", "9A") is True
        assert is_perfect_match("9B", "8B") is True

    def test_adjacent_no_wraparound(self):
        """12 and 1 are not neighbours for a perfect match."""
        assert is_perfect_match("12A", "1A") is False
        assert is_perfect_match("1B", "12B") is False

    def test_adjacent_other_letter(self):
        """Neighbouring number with a mode switch is not perfect."""
        assert is_perfect_match("8B", "9A") is False

    def test_two_steps_apart(self):
        """Two steps away is not perfect."""
        assert is_perfect_match("8A", "10A") is False


class TestEnergyBoostAndDrop:
    """Test clockwise/counter-clockwise steps."""

    def test_boost_one_step_clockwise(self):
        assert is_energy_boost("8A", "9A") is True
        assert is_energy_boost("9A", "8A") is False

    def test_boost_wraps_twelve_to_one(self):
        assert is_energy_boost("12B", "1B") is True

    def test_boost_requires_same_letter(self):
        assert is_energy_boost("8A", "9B") is False

    def test_drop_one_step_counter_clockwise(self):
        assert is_energy_drop("9A", "8A") is True
        assert is_energy_drop("8A", "9A") is False

    def test_drop_wraps_one_to_twelve(self):
        assert is_energy_drop("1A", "12A") is True

    def test_drop_requires_same_letter(self):
        assert is_energy_drop("1A", "12B") is False

    @pytest.mark.parametrize("from_code", ALL_CODES)
    def test_boost_and_drop_are_inverse(self, from_code):
        """Boosting from X to Y means dropping from Y lands on X."""
        for to_code in ALL_CODES:
            assert is_energy_boost(from_code, to_code) == is_energy_drop(to_code, from_code)

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_each_code_has_one_boost_target(self, code):
        targets = [c for c in ALL_CODES if is_energy_boost(code, c)]
        assert len(targets) == 1


class TestMoodChange:
    """Test the mode-switch predicate."""

    def test_same_number_other_letter(self):
        assert is_mood_change("5A", "5B") is True
        assert is_mood_change("5B", "5A") is True

    def test_same_code(self):
        assert is_mood_change("5A", "5A") is False

    def test_different_number(self):
        assert is_mood_change("5A", "6B") is False


class TestCategorizeTransition:
    """Test the priority order for display labels."""

    def test_identical_is_perfect(self):
        assert categorize_transition("8A", "8A") is TransitionCategory.PERFECT_MATCH

    def test_relative_is_perfect_not_mood(self):
        """Perfect match is checked before mood change."""
        assert categorize_transition("8A", "8B") is TransitionCategory.PERFECT_MATCH

    def test_adjacent_is_perfect_not_boost(self):
        """Perfect match is checked before energy boost."""
        assert categorize_transition("8A", "9A") is TransitionCategory.PERFECT_MATCH

    def test_wraparound_boost(self):
        assert categorize_transition("12A", "1A") is TransitionCategory.ENERGY_BOOST

    def test_wraparound_drop(self):
        assert categorize_transition("1B", "12B") is TransitionCategory.ENERGY_DROP

    def test_challenging(self):
        assert categorize_transition("8B", "9A") is TransitionCategory.CHALLENGING
        assert categorize_transition("3A", "9B") is TransitionCategory.CHALLENGING

    def test_every_pair_gets_exactly_one_category(self):
        for from_code in ALL_CODES:
            for to_code in ALL_CODES:
                category = categorize_transition(from_code, to_code)
                assert isinstance(category, TransitionCategory)

    def test_mood_change_label_is_shadowed(self):
        """Every mood change is also a perfect match, so the label never appears."""
        labels = {
            categorize_transition(from_code, to_code)
            for from_code in ALL_CODES
            for to_code in ALL_CODES
        }
        assert TransitionCategory.MOOD_CHANGE not in labels

    def test_labels(self):
        assert TransitionCategory.PERFECT_MATCH.value == "Perfect Match"
        assert TransitionCategory.CHALLENGING.value == "Challenging Transition"


class TestInvalidCodes:
    """Predicates assume valid codes and reject anything else."""

    @pytest.mark.parametrize("bad", ["13A", "0B", "8C", "A8", "", "unknown"])
    def test_invalid_code_rejected(self, bad):
        with pytest.raises(MissingCamelotKeyError):
            is_perfect_match(bad, "8A")
