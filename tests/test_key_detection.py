"""
Unit tests for key translation and essentia key detection.

Tests the wheel tables, enharmonic normalization and detect_key with a
stubbed essentia module.
"""

import sys
from unittest.mock import MagicMock, Mock, patch

import numpy as np
import pytest

from camelotmix.analyze.key import (
    CAMELOT_WHEEL,
    ENHARMONIC_MAP,
    KEY_TO_CAMELOT,
    MissingCamelotKeyError,
    detect_key,
    is_valid_camelot,
    key_label_for,
    normalize_key_name,
    parse_camelot,
    to_camelot,
)
from camelotmix.config import Config


@pytest.fixture
def fake_essentia():
    """Install a stand-in essentia.standard for the duration of a test."""
    standard = MagicMock()
    package = MagicMock()
    package.standard = standard
    with patch.dict(sys.modules, {"essentia": package, "essentia.standard": standard}):
        yield standard


class TestCamelotWheel:
    """Test the static lookup tables."""

    def test_wheel_has_24_positions(self):
        assert len(CAMELOT_WHEEL) == 24
        assert len(set(CAMELOT_WHEEL.values())) == 24

    def test_inverse_table(self):
        for code, name in CAMELOT_WHEEL.items():
            assert KEY_TO_CAMELOT[name] == code

    def test_modes(self):
        """A codes are minor keys, B codes are major keys."""
        for code, name in CAMELOT_WHEEL.items():
            expected = "minor" if code.endswith("A") else "major"
            assert name.endswith(expected)

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            CAMELOT_WHEEL["1A"] = "C major"

    def test_known_positions(self):
        assert CAMELOT_WHEEL["8A"] == "A minor"
        assert CAMELOT_WHEEL["8B"] == "C major"
        assert CAMELOT_WHEEL["11A"] == "Gb minor"


class TestCamelotCodes:
    """Test code validation and parsing."""

    @pytest.mark.parametrize("code", ["1A", "9B", "10A", "12B"])
    def test_valid(self, code):
        assert is_valid_camelot(code) is True

    @pytest.mark.parametrize("code", ["0A", "13B", "1C", "01A", "8", "B8", "", None, 8])
    def test_invalid(self, code):
        assert is_valid_camelot(code) is False

    def test_parse(self):
        assert parse_camelot("10B") == (10, "B")

    def test_parse_invalid(self):
        with pytest.raises(MissingCamelotKeyError):
            parse_camelot("13A")


class TestKeyTranslation:
    """Test key-name to Camelot translation."""

    def test_enharmonic_map_has_five_entries(self):
        assert len(ENHARMONIC_MAP) == 5

    @pytest.mark.parametrize(
        "key,scale,expected",
        [
            ("F#", "minor", "Gb minor"),
            ("C#", "major", "Db major"),
            ("D#", "minor", "Eb minor"),
            ("G#", "minor", "Ab minor"),
            ("A#", "major", "Bb major"),
            ("A", "minor", "A minor"),
        ],
    )
    def test_normalize(self, key, scale, expected):
        assert normalize_key_name(key, scale) == expected

    def test_to_camelot(self):
        assert to_camelot("A minor") == "8A"
        assert to_camelot("F# minor") == "11A"
        assert to_camelot("C# major") == "3B"

    @pytest.mark.parametrize("name", ["A# minor", "D# major", "H minor", ""])
    def test_unmapped_spelling_fails(self, name):
        """Unmapped spellings raise instead of defaulting."""
        with pytest.raises(MissingCamelotKeyError):
            to_camelot(name)

    def test_key_label_for(self):
        assert key_label_for("5A") == "C minor"

    def test_key_label_for_invalid(self):
        with pytest.raises(MissingCamelotKeyError):
            key_label_for("5C")


class TestDetectKey:
    """Test essentia-backed detection."""

    def test_detect_key_normalizes_and_maps(self, fake_essentia):
        fake_essentia.KeyExtractor.return_value = Mock(return_value=("F#", "minor", 0.81))

        key_label, camelot_key = detect_key(np.zeros(16000, dtype=np.float32), Config.defaults().data)

        assert key_label == "Gb minor"
        assert camelot_key == "11A"

    def test_detect_key_uses_configured_parameters(self, fake_essentia):
        fake_essentia.KeyExtractor.return_value = Mock(return_value=("C", "major", 0.9))

        detect_key(np.zeros(100, dtype=np.float32), Config.defaults().data)

        kwargs = fake_essentia.KeyExtractor.call_args.kwargs
        assert kwargs["sampleRate"] == 16000
        assert kwargs["profileType"] == "bgate"
        assert kwargs["frameSize"] == 4096
        assert kwargs["minFrequency"] == 25
        assert kwargs["maxFrequency"] == 3500

    def test_detect_key_unmapped_result(self, fake_essentia):
        fake_essentia.KeyExtractor.return_value = Mock(return_value=("A#", "minor", 0.5))

        with pytest.raises(MissingCamelotKeyError):
            detect_key(np.zeros(100, dtype=np.float32), {})
