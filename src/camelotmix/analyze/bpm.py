"""
BPM Detection using essentia (primary) with aubio fallback.

- Runs on the prepared 16 kHz mono signal, not on the file
- essentia PercivalBpmEstimator with the analyzer's frame/hop settings
- Fallback to aubio tempo fed hop-sized blocks
- Output: integer BPM

References:
- https://essentia.upf.edu/reference/std_PercivalBpmEstimator.html
- https://github.com/aubio/aubio/issues/227
"""

import logging
import math
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


def _detect_bpm_essentia(signal: np.ndarray, params: dict, sample_rate: int) -> Optional[float]:
    """
    Estimate tempo with essentia's PercivalBpmEstimator.

    Returns:
        BPM or None if essentia is missing or the estimate failed
    """
    try:
        import essentia.standard as es

        logger.debug("Using essentia PercivalBpmEstimator...")

        estimator = es.PercivalBpmEstimator(
            frameSize=params.get("frame_size", 1024),
            frameSizeOSS=params.get("frame_size_oss", 2048),
            hopSize=params.get("hop_size", 128),
            hopSizeOSS=params.get("hop_size_oss", 128),
            maxBPM=params.get("max_bpm", 210),
            minBPM=params.get("min_bpm", 50),
            sampleRate=sample_rate,
        )
        bpm = float(estimator(np.asarray(signal, dtype=np.float32)))

        logger.debug(f"Essentia raw BPM: {bpm:.1f}")

        if bpm > 0:
            return bpm
        return None

    except ImportError:
        logger.debug("Essentia not available")
        return None
    except Exception as e:
        logger.debug(f"Essentia BPM detection failed: {e}")
        return None


def _detect_bpm_aubio(signal: np.ndarray, params: dict, sample_rate: int) -> Optional[float]:
    """
    Estimate tempo with aubio (fallback method).

    Returns:
        BPM or None if aubio is missing or found no beats
    """
    try:
        import aubio

        logger.debug("Using aubio tempo detection...")

        hop_size = params.get("aubio_hop_size", 512)
        buf_size = params.get("aubio_buf_size", 1024)

        tempo = aubio.tempo("default", buf_size, hop_size, sample_rate)
        samples = np.asarray(signal, dtype=np.float32)

        for start in range(0, len(samples) - hop_size + 1, hop_size):
            tempo(samples[start:start + hop_size])

        detected_bpm = float(tempo.get_bpm())
        logger.debug(f"Aubio raw BPM: {detected_bpm:.1f}, confidence: {tempo.get_confidence():.2f}")

        if detected_bpm > 0:
            return detected_bpm
        return None

    except ImportError:
        logger.debug("Aubio not available")
        return None
    except Exception as e:
        logger.debug(f"Aubio BPM detection failed: {e}")
        return None


def detect_bpm(signal: np.ndarray, config: dict) -> Optional[int]:
    """
    Detect BPM from a prepared mono signal.

    Strategy:
    1. essentia PercivalBpmEstimator
    2. aubio tempo if essentia is unavailable or returns nothing
    3. Round to the nearest integer

    Args:
        signal: Mono signal at the estimator sample rate
        config: Full config dict; reads the "bpm" section and
            analysis.target_sample_rate

    Returns:
        Integer BPM, or None if detection failed
    """
    params = config.get("bpm", {})
    sample_rate = config.get("analysis", {}).get("target_sample_rate", 16000)

    method = "essentia"
    detected_bpm = _detect_bpm_essentia(signal, params, sample_rate)

    if detected_bpm is None:
        method = "aubio"
        detected_bpm = _detect_bpm_aubio(signal, params, sample_rate)

    if detected_bpm is None:
        logger.warning("All BPM detection methods failed")
        return None

    bpm = int(math.floor(detected_bpm + 0.5))
    if bpm <= 0:
        logger.warning(f"Detected BPM {detected_bpm:.2f} rounds to {bpm}. Rejecting.")
        return None

    logger.info(f"✅ BPM detected: {bpm} (raw: {detected_bpm:.1f}, method: {method})")
    return bpm
