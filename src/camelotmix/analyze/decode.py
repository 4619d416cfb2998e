"""
Audio decoding and tag lookup for analysis.

- aubio.source decodes at the file's native rate, all channels kept
- mutagen reads artist/title tags for the display name
"""

import logging
from pathlib import Path
from typing import Optional

import mutagen
import numpy as np

from .preprocess import AudioBuffer

logger = logging.getLogger(__name__)

# Supported audio formats
AUDIO_FORMATS = {".mp3", ".m4a", ".flac", ".wav", ".aif", ".aiff", ".ogg"}


class DecodeError(Exception):
    """Raised when an audio file cannot be decoded."""
    pass


def load_audio(audio_path: str, hop_size: int = 512) -> AudioBuffer:
    """
    Decode an audio file into a multi-channel buffer.

    Args:
        audio_path: Path to audio file
        hop_size: Frames read per aubio call

    Returns:
        AudioBuffer shaped (channels, samples) at the native sample rate

    Raises:
        DecodeError: If aubio cannot open or read the file
    """
    import aubio

    try:
        source = aubio.source(str(audio_path), 0, hop_size)
    except RuntimeError as e:
        raise DecodeError(f"Could not open {audio_path}: {e}") from e

    try:
        blocks = []
        while True:
            frames, num_read = source.do_multi()
            if num_read > 0:
                blocks.append(np.array(frames[:, :num_read], dtype=np.float32))
            if num_read < hop_size:
                break

        channels = source.channels
        sample_rate = source.samplerate
    except RuntimeError as e:
        raise DecodeError(f"Could not read {audio_path}: {e}") from e
    finally:
        source.close()

    if blocks:
        data = np.concatenate(blocks, axis=1)
    else:
        data = np.zeros((channels, 0), dtype=np.float32)

    logger.debug(
        f"Decoded {Path(audio_path).name}: {channels} ch, {sample_rate} Hz, "
        f"{data.shape[1] / sample_rate:.1f}s"
    )
    return AudioBuffer(data=data, sample_rate=sample_rate)


def read_display_name(audio_path: str) -> str:
    """
    Display name for a file: "artist - title" from tags, else the file stem.

    Args:
        audio_path: Path to audio file.

    Returns:
        Display name string.
    """
    stem = Path(audio_path).stem
    tags = _read_tags(audio_path)
    if tags is None:
        return stem

    artist = _first_tag(tags, "artist")
    title = _first_tag(tags, "title")
    if artist and title:
        return f"{artist} - {title}"
    return stem


def _read_tags(audio_path: str):
    try:
        return mutagen.File(str(audio_path), easy=True)
    except (mutagen.MutagenError, OSError) as e:
        logger.debug(f"Could not read tags from {audio_path}: {e}")
        return None


def _first_tag(tags, name: str) -> Optional[str]:
    values = tags.get(name) if hasattr(tags, "get") else None
    if not values:
        return None
    value = str(values[0]).strip()
    return value or None


def discover_audio_files(library_path: str) -> list:
    """
    Discover all audio files under a folder.

    Args:
        library_path: Path to music library directory.

    Returns:
        Sorted list of audio file paths.
    """
    lib_path = Path(library_path)

    if not lib_path.exists():
        logger.warning(f"Library path not found: {library_path}")
        return []

    audio_files = [
        path for path in lib_path.rglob("*")
        if path.is_file() and path.suffix.lower() in AUDIO_FORMATS
    ]

    logger.info(f"Found {len(audio_files)} audio files in {library_path}")
    return sorted(audio_files)
