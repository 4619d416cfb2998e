"""
Track analysis: decode → preprocess → estimate → Track.

- One file at a time, in input order
- A failing file is recorded in its AnalysisResult and never aborts the batch
- Energy is the RMS of channel 0 of the original (not resampled) buffer
"""

import gc
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..track import Track, TrackOrigin
from .bpm import detect_bpm
from .decode import DecodeError, load_audio, read_display_name
from .key import MissingCamelotKeyError, detect_key
from .preprocess import AudioBuffer, InvalidAudioError, energy, preprocess

logger = logging.getLogger(__name__)


class EstimatorError(Exception):
    """Raised when the tempo or key estimator produces no usable value."""
    pass


@dataclass
class AnalysisResult:
    """Outcome of analyzing one file."""

    path: str
    track: Optional[Track] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.track is not None


def _config_data(config) -> dict:
    # Accept a Config instance or a plain dict
    return getattr(config, "data", config) or {}


def analyze_buffer(
    buffer: AudioBuffer,
    config,
    name: str,
    source_path: Optional[str] = None,
) -> Track:
    """
    Analyze an already-decoded buffer.

    Args:
        buffer: Decoded multi-channel audio
        config: Config instance or dict
        name: Display name for the track
        source_path: File the buffer came from, if any

    Returns:
        Track with origin ANALYZED

    Raises:
        InvalidAudioError: Buffer is not usable audio
        EstimatorError: Tempo estimation failed
        MissingCamelotKeyError: Detected key has no Camelot position
    """
    data = _config_data(config)
    target_rate = data.get("analysis", {}).get("target_sample_rate", 16000)

    signal = preprocess(buffer, target_rate)

    logger.debug("  → Detecting BPM...")
    bpm = detect_bpm(signal, data)
    if bpm is None:
        raise EstimatorError(f"BPM detection failed for {name}")

    logger.debug("  → Detecting key...")
    key_label, camelot_key = detect_key(signal, data)

    track_energy = energy(buffer.get_channel_data(0))

    return Track(
        display_name=name,
        bpm=bpm,
        key_label=key_label,
        camelot_key=camelot_key,
        energy=max(0.0, min(1.0, track_energy)),
        duration_seconds=buffer.duration,
        origin=TrackOrigin.ANALYZED,
        source_path=source_path,
    )


def analyze_file(file_path: str, config) -> Track:
    """
    Decode and analyze a single audio file.

    Raises:
        DecodeError, InvalidAudioError, EstimatorError, MissingCamelotKeyError
    """
    data = _config_data(config)
    hop_size = data.get("analysis", {}).get("decode_hop_size", 512)

    logger.info(f"Analyzing: {Path(file_path).name}")

    buffer = load_audio(str(file_path), hop_size=hop_size)
    name = read_display_name(str(file_path))
    track = analyze_buffer(buffer, config, name, source_path=str(file_path))

    logger.info(f"  ✅ {track.bpm} BPM, Key: {track.key_label} ({track.camelot_key}), energy {track.energy:.3f}")
    return track


def analyze_batch(
    file_paths: Iterable[str],
    config,
    on_progress: Optional[Callable[[int, int, AnalysisResult], None]] = None,
) -> List[AnalysisResult]:
    """
    Analyze files sequentially, isolating per-file failures.

    Args:
        file_paths: Audio files, analyzed in this order
        config: Config instance or dict
        on_progress: Called as on_progress(current, total, result) after each file

    Returns:
        One AnalysisResult per input file, in input order
    """
    paths = [str(p) for p in file_paths]
    total = len(paths)
    results = []

    for current, file_path in enumerate(paths, start=1):
        try:
            track = analyze_file(file_path, config)
            result = AnalysisResult(path=file_path, track=track)
        except (DecodeError, InvalidAudioError, EstimatorError, MissingCamelotKeyError, ImportError) as e:
            logger.warning(f"  ✗ Skipping {Path(file_path).name}: {e}")
            result = AnalysisResult(path=file_path, error=str(e))
        except Exception as e:
            logger.error(f"Analysis failed for {file_path}: {e}", exc_info=True)
            result = AnalysisResult(path=file_path, error=str(e))

        results.append(result)

        if on_progress is not None:
            on_progress(current, total, result)

        # Release decoded audio before the next file
        gc.collect()

    succeeded = sum(1 for r in results if r.ok)
    logger.info(f"✅ Analysis complete: {succeeded}/{total} tracks analyzed")
    return results
