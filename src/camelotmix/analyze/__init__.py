"""
Analysis Module: Prepare audio and extract BPM, key and energy.

- One file at a time
- Downmix + block-average resample to 16 kHz before estimation
- A failing file never aborts the batch
"""

__all__ = ["preprocess", "key", "bpm", "decode", "pipeline"]
