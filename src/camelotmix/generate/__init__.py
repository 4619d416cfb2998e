"""
Mix Generation Module: Order tracks and label transitions.

- Camelot compatibility predicates
- Greedy nearest-successor planner (no backtracking)
- Output: mix JSON, text summary and M3U
"""

__all__ = ["rules", "sequencer", "playlist"]
