"""
Mix Planner: Greedy nearest-successor ordering over the Camelot wheel.

- Opening track: lowest energy (stable sort, first of equals wins)
- Each step scores every remaining track against the current one:
  +10 perfect match, +8 energy boost, +6 mood change, plus a BPM bonus
  (+5 within 5 BPM, +3 within 10, +1 within 20)
- Highest score wins; ties go to the earliest remaining track
- No backtracking; the result is deterministic, not globally optimal

Energy drops never add to the score. They only label transitions, so the
planner leans toward rising energy.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Iterator, Sequence

from ..analyze.key import MissingCamelotKeyError, is_valid_camelot
from ..track import Track
from .rules import (
    OPENING_TRACK,
    TransitionCategory,
    categorize_transition,
    is_energy_boost,
    is_mood_change,
    is_perfect_match,
)

logger = logging.getLogger(__name__)

MIN_TRACKS = 2

PERFECT_MATCH_SCORE = 10
ENERGY_BOOST_SCORE = 8
MOOD_CHANGE_SCORE = 6

# (max |BPM difference|, bonus), checked in order
BPM_BONUS_STEPS = ((5, 5), (10, 3), (20, 1))


class InsufficientTracksError(ValueError):
    """Raised when a mix is requested with fewer than two valid tracks."""
    pass


def bpm_bonus(bpm1: float, bpm2: float) -> int:
    """Score tempo closeness between two tracks."""
    bpm_diff = abs(bpm1 - bpm2)
    for max_diff, bonus in BPM_BONUS_STEPS:
        if bpm_diff <= max_diff:
            return bonus
    return 0


def score_transition(current: Track, candidate: Track) -> int:
    """
    Score moving from current to candidate (higher is better).

    Predicates are summed independently, so a relative major/minor move
    collects both the perfect-match and the mood-change points.
    """
    score = 0

    if is_perfect_match(current.camelot_key, candidate.camelot_key):
        score += PERFECT_MATCH_SCORE

    if is_energy_boost(current.camelot_key, candidate.camelot_key):
        score += ENERGY_BOOST_SCORE

    if is_mood_change(current.camelot_key, candidate.camelot_key):
        score += MOOD_CHANGE_SCORE

    score += bpm_bonus(current.bpm, candidate.bpm)
    return score


@dataclass(frozen=True)
class MixEntry:
    """One position in a mix: the track and how it was reached."""

    track: Track
    category: Optional[TransitionCategory] = None  # None for the opening track
    score: Optional[int] = None

    @property
    def transition(self) -> str:
        """Display label, "Opening Track" for the first entry."""
        return self.category.value if self.category else OPENING_TRACK

    def to_record(self) -> Dict[str, Any]:
        """Convert to the export record."""
        return {
            "trackName": self.track.display_name,
            "bpm": self.track.bpm,
            "camelotKey": self.track.camelot_key,
            "keyLabel": self.track.key_label,
            "transitionCategory": self.transition,
        }


class MixSequence:
    """Ordered mix derived from a track set. Recomputed on demand, never stored."""

    def __init__(self, entries: List[MixEntry]):
        self.entries = entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[MixEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> MixEntry:
        return self.entries[index]

    @property
    def tracks(self) -> List[Track]:
        return [entry.track for entry in self.entries]

    @property
    def total_duration(self) -> float:
        return sum(entry.track.duration_seconds for entry in self.entries)

    def to_records(self) -> List[Dict[str, Any]]:
        return [entry.to_record() for entry in self.entries]

    def __repr__(self) -> str:
        return f"MixSequence(tracks={len(self.entries)})"


class MixPlanner:
    """
    Greedy mix planner.

    Picks the lowest-energy track to open, then repeatedly appends the
    best-scoring remaining track.
    """

    def __init__(self, min_tracks: int = MIN_TRACKS):
        self.min_tracks = min_tracks

    def _validate(self, tracks: Sequence[Track]) -> None:
        if len(tracks) < self.min_tracks:
            raise InsufficientTracksError(
                f"At least {self.min_tracks} tracks are needed to build a mix (got {len(tracks)})"
            )

        for track in tracks:
            if not is_valid_camelot(track.camelot_key):
                raise MissingCamelotKeyError(
                    f"Track {track.display_name!r} has no valid Camelot key: {track.camelot_key!r}"
                )

    def choose_next(self, current: Track, remaining: List[Track]) -> tuple:
        """
        Choose the best successor for the current track.

        Args:
            current: Track currently playing
            remaining: Unplayed tracks, in iteration order

        Returns:
            Tuple (index_in_remaining, score); ties resolve to the lower index
        """
        if not remaining:
            raise ValueError("No remaining tracks to choose from")

        best_index = 0
        best_score = None

        for index, candidate in enumerate(remaining):
            score = score_transition(current, candidate)
            logger.debug(
                f"Candidate {candidate.display_name} "
                f"({candidate.camelot_key}, {candidate.bpm} BPM): score={score}"
            )
            if best_score is None or score > best_score:
                best_index = index
                best_score = score

        return best_index, best_score

    def build_sequence(self, tracks: Sequence[Track]) -> MixSequence:
        """
        Order tracks into a mix.

        Args:
            tracks: At least two tracks with valid Camelot keys

        Returns:
            MixSequence visiting every track exactly once

        Raises:
            InsufficientTracksError: Fewer than min_tracks tracks
            MissingCamelotKeyError: A track has an invalid Camelot key
        """
        self._validate(tracks)

        ordered = sorted(tracks, key=lambda t: t.energy)
        current = ordered[0]
        remaining = ordered[1:]

        entries = [MixEntry(track=current)]
        logger.info(
            f"Building mix of {len(ordered)} tracks, opening with "
            f"{current.display_name} ({current.camelot_key}, energy {current.energy:.2f})"
        )

        while remaining:
            index, score = self.choose_next(current, remaining)
            chosen = remaining.pop(index)
            category = categorize_transition(current.camelot_key, chosen.camelot_key)

            entries.append(MixEntry(track=chosen, category=category, score=score))
            logger.debug(
                f"  Next: {chosen.display_name} ({chosen.camelot_key}) - "
                f"{category.value} (score {score})"
            )

            current = chosen

        logger.info(f"✅ Mix built: {len(entries)} tracks")
        return MixSequence(entries)


def generate_mix_sequence(tracks: Sequence[Track]) -> MixSequence:
    """Build a mix with the default planner."""
    return MixPlanner().build_sequence(tracks)
