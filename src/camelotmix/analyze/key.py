"""
Key Detection and Camelot translation.

- Uses essentia KeyExtractor on the prepared 16 kHz mono signal
- Five enharmonic spellings are normalized before lookup
- Output: key label ("A minor") and Camelot notation (1A, 1B, ..., 12B)
- Unmapped spellings fail visibly with MissingCamelotKeyError
"""

import logging
import re
from types import MappingProxyType
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

CAMELOT_PATTERN = re.compile(r"^(1[0-2]|[1-9])[AB]$")

# "A" = minor, "B" = major
CAMELOT_WHEEL = MappingProxyType({
    "1A": "Ab minor",
    "1B": "B major",
    "2A": "Eb minor",
    "2B": "Gb major",
    "3A": "Bb minor",
    "3B": "Db major",
    "4A": "F minor",
    "4B": "Ab major",
    "5A": "C minor",
    "5B": "Eb major",
    "6A": "G minor",
    "6B": "Bb major",
    "7A": "D minor",
    "7B": "F major",
    "8A": "A minor",
    "8B": "C major",
    "9A": "E minor",
    "9B": "G major",
    "10A": "B minor",
    "10B": "D major",
    "11A": "Gb minor",
    "11B": "A major",
    "12A": "Db minor",
    "12B": "E major",
})

KEY_TO_CAMELOT = MappingProxyType({name: code for code, name in CAMELOT_WHEEL.items()})

# Spellings the estimator may return that the wheel table writes differently
ENHARMONIC_MAP = MappingProxyType({
    "F# minor": "Gb minor",
    "C# major": "Db major",
    "D# minor": "Eb minor",
    "G# minor": "Ab minor",
    "A# major": "Bb major",
})


class MissingCamelotKeyError(ValueError):
    """Raised when a key cannot be mapped to a Camelot code."""
    pass


def is_valid_camelot(code: Optional[str]) -> bool:
    """Check that a code is one of the 24 wheel positions."""
    return isinstance(code, str) and CAMELOT_PATTERN.fullmatch(code) is not None


def parse_camelot(code: str) -> Tuple[int, str]:
    """
    Split a Camelot code into (number, letter).

    Raises:
        MissingCamelotKeyError: If the code is not a wheel position.
    """
    if not is_valid_camelot(code):
        raise MissingCamelotKeyError(f"Invalid Camelot key: {code!r}")
    return int(code[:-1]), code[-1]


def normalize_key_name(key: str, scale: str) -> str:
    """Join an estimator key/scale pair and apply the enharmonic map."""
    name = f"{key} {scale}"
    return ENHARMONIC_MAP.get(name, name)


def to_camelot(key_name: str) -> str:
    """
    Translate a key name ("A minor") to its Camelot code ("8A").

    Raises:
        MissingCamelotKeyError: If the spelling is not in the wheel table.
    """
    key_name = ENHARMONIC_MAP.get(key_name, key_name)
    camelot_key = KEY_TO_CAMELOT.get(key_name)
    if camelot_key is None:
        raise MissingCamelotKeyError(f"No Camelot position for key {key_name!r}")
    return camelot_key


def key_label_for(camelot_key: str) -> str:
    """
    Translate a Camelot code back to its key name.

    Raises:
        MissingCamelotKeyError: If the code is not a wheel position.
    """
    parse_camelot(camelot_key)
    return CAMELOT_WHEEL[camelot_key]


def detect_key(signal: np.ndarray, config: dict) -> Tuple[str, str]:
    """
    Detect musical key from a prepared mono signal.

    Args:
        signal: Mono signal at the estimator sample rate
        config: Full config dict; reads the "key_detection" section and
            analysis.target_sample_rate

    Returns:
        Tuple (key_label, camelot_key), e.g. ("A minor", "8A")

    Raises:
        MissingCamelotKeyError: If the detected key has no Camelot position
        ImportError: If essentia is not installed
    """
    import essentia.standard as es

    params = config.get("key_detection", {})
    sample_rate = config.get("analysis", {}).get("target_sample_rate", 16000)

    key_extractor = es.KeyExtractor(
        averageDetuningCorrection=True,
        frameSize=params.get("frame_size", 4096),
        hopSize=params.get("hop_size", 4096),
        hpcpSize=params.get("hpcp_size", 12),
        maxFrequency=params.get("max_frequency", 3500),
        maximumSpectralPeaks=params.get("maximum_spectral_peaks", 60),
        minFrequency=params.get("min_frequency", 25),
        pcpThreshold=params.get("pcp_threshold", 0.2),
        profileType=params.get("profile_type", "bgate"),
        sampleRate=sample_rate,
        spectralPeaksThreshold=params.get("spectral_peaks_threshold", 0.0001),
        tuningFrequency=params.get("tuning_frequency", 440),
        weightType=params.get("weight_type", "cosine"),
        windowType=params.get("window_type", "hann"),
    )
    key, scale, strength = key_extractor(np.asarray(signal, dtype=np.float32))

    logger.debug(f"Essentia result: key={key}, scale={scale}, strength={strength:.2f}")

    key_label = normalize_key_name(key, scale)
    camelot_key = to_camelot(key_label)

    logger.info(f"✅ Key detected: {key_label} → {camelot_key} (strength: {strength:.2f})")
    return key_label, camelot_key
