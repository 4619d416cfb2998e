"""
Signal Preprocessing: prepare decoded audio for feature extraction.

- Downmix to mono (channels 0 and 1 averaged, extra channels ignored)
- Block-averaging downsample to the estimator rate (16 kHz by default)
- RMS energy computed from the raw signal

No anti-aliasing filter is applied; the estimators only need coarse
spectral content.
"""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

ESTIMATOR_SAMPLE_RATE = 16000


class InvalidAudioError(ValueError):
    """Raised when preprocessing receives something that is not decoded audio."""
    pass


@dataclass(frozen=True)
class AudioBuffer:
    """
    Decoded multi-channel audio.

    Attributes:
        data: Sample array shaped (channels, samples)
        sample_rate: Samples per second
    """

    data: np.ndarray
    sample_rate: int

    @property
    def number_of_channels(self) -> int:
        return int(self.data.shape[0]) if self.data.ndim == 2 else 0

    @property
    def length(self) -> int:
        """Samples per channel."""
        return int(self.data.shape[1]) if self.data.ndim == 2 else 0

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return self.length / self.sample_rate

    def get_channel_data(self, channel: int) -> np.ndarray:
        return self.data[channel]


def to_mono(buffer: AudioBuffer) -> np.ndarray:
    """
    Downmix a buffer to a single channel.

    A mono buffer is returned as-is (no copy). With two or more channels only
    channel 0 and channel 1 are combined: mono[i] = 0.5 * (left[i] + right[i]).

    Raises:
        InvalidAudioError: If the buffer has no channels.
    """
    channels = buffer.number_of_channels
    if channels == 0:
        raise InvalidAudioError("Audio buffer has no channels")

    if channels == 1:
        return buffer.get_channel_data(0)

    if channels > 2:
        logger.debug(f"Ignoring {channels - 2} extra channel(s) in downmix")

    left = buffer.get_channel_data(0)
    right = buffer.get_channel_data(1)
    return 0.5 * (left + right)


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5).astype(np.int64)


def resample(signal: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
    """
    Downsample by averaging blocks of input samples.

    Output sample j is the mean of input samples in
    [round(j * ratio), round((j + 1) * ratio)), ratio = source_rate / target_rate.
    Output length is round(len(signal) / ratio).

    Args:
        signal: 1-D sample array
        source_rate: Rate of the input signal
        target_rate: Desired rate (must not exceed source_rate)

    Returns:
        The input object itself when the rates match, else a new float32 array

    Raises:
        ValueError: On non-positive rates or an upsampling request
    """
    if source_rate == target_rate:
        return signal

    if source_rate <= 0 or target_rate <= 0:
        raise ValueError(f"Sample rates must be positive (got {source_rate} -> {target_rate})")

    if target_rate > source_rate:
        raise ValueError(f"Upsampling is not supported ({source_rate} Hz -> {target_rate} Hz)")

    samples = np.asarray(signal, dtype=np.float64)
    ratio = source_rate / target_rate
    new_length = int(_round_half_up(np.array(len(samples) / ratio)))

    if new_length == 0:
        return np.zeros(0, dtype=np.float32)

    offsets = _round_half_up(np.arange(new_length + 1) * ratio)
    starts = offsets[:-1]
    ends = np.minimum(offsets[1:], len(samples))

    cumulative = np.concatenate(([0.0], np.cumsum(samples)))
    sums = cumulative[ends] - cumulative[starts]
    counts = ends - starts

    logger.debug(f"Downsampled {len(samples)} samples {source_rate} Hz -> {target_rate} Hz ({new_length})")
    return (sums / counts).astype(np.float32)


def energy(signal: np.ndarray) -> float:
    """
    Root-mean-square level of a signal.

    Returns 0.0 for an empty signal.
    """
    samples = np.asarray(signal, dtype=np.float64)
    if samples.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(samples ** 2)))


def preprocess(buffer: AudioBuffer, target_rate: int = ESTIMATOR_SAMPLE_RATE) -> np.ndarray:
    """
    Mono downmix followed by resampling to the estimator rate.

    Raises:
        InvalidAudioError: If buffer is not an AudioBuffer or has no channels.
    """
    if not isinstance(buffer, AudioBuffer):
        raise InvalidAudioError(
            f"Input to audio preprocessing is not an AudioBuffer (got {type(buffer).__name__})"
        )

    mono = to_mono(buffer)
    return resample(mono, buffer.sample_rate, target_rate)
