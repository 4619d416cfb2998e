"""Shared fixtures."""

import pytest

from camelotmix.track import Track, TrackOrigin


@pytest.fixture
def make_track():
    """Factory for tracks with sensible defaults."""

    def _make(name="Track", bpm=126, camelot_key="8A", energy=0.5, **kwargs):
        from camelotmix.analyze.key import CAMELOT_WHEEL

        return Track(
            display_name=name,
            bpm=bpm,
            key_label=kwargs.pop("key_label", CAMELOT_WHEEL.get(camelot_key, "Unknown")),
            camelot_key=camelot_key,
            energy=energy,
            duration_seconds=kwargs.pop("duration_seconds", 240.0),
            origin=kwargs.pop("origin", TrackOrigin.ANALYZED),
            **kwargs,
        )

    return _make
