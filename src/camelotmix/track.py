"""
Track record shared by analysis, the library and the mix planner.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any

from .analyze.key import MissingCamelotKeyError, is_valid_camelot

logger = logging.getLogger(__name__)

REQUIRED_RECORD_FIELDS = ("name", "camelotKey", "bpm", "key")
DEFAULT_ENERGY = 0.5


def round_bpm(value) -> int:
    """
    Round a tempo to the nearest integer BPM, halves rounding up.

    Raises:
        ValueError: If the value is not a finite number
    """
    bpm = float(value)
    if not math.isfinite(bpm):
        raise ValueError(f"BPM must be a finite number (got {value!r})")
    return int(math.floor(bpm + 0.5))


class TrackOrigin(Enum):
    """Where a track came from. Informational only."""
    ANALYZED = "analyzed"
    MANUAL = "manual"
    IMPORTED = "imported"


@dataclass(frozen=True)
class Track:
    """Immutable container for one song's mixing attributes."""

    display_name: str
    bpm: int
    key_label: str
    camelot_key: str  # Camelot notation (1A-12B)
    energy: float
    duration_seconds: float = 0.0  # 0 = unknown
    origin: TrackOrigin = TrackOrigin.ANALYZED
    source_path: Optional[str] = None

    def __post_init__(self):
        if not is_valid_camelot(self.camelot_key):
            raise MissingCamelotKeyError(
                f"Track {self.display_name!r} has no valid Camelot key: {self.camelot_key!r}"
            )
        if self.bpm <= 0:
            raise ValueError(f"BPM must be positive (got {self.bpm})")
        if not 0.0 <= self.energy <= 1.0:
            raise ValueError(f"Energy must be within [0, 1] (got {self.energy})")
        if self.duration_seconds < 0:
            raise ValueError(f"Duration cannot be negative (got {self.duration_seconds})")

    @property
    def is_manual(self) -> bool:
        return self.origin is TrackOrigin.MANUAL

    @property
    def file_name(self) -> Optional[str]:
        """Name of the analyzed audio file, if any."""
        return Path(self.source_path).name if self.source_path else None

    def to_record(self, exported_at: Optional[str] = None) -> Dict[str, Any]:
        """Convert to the song-list JSON record. "file" is only written for analyzed audio."""
        record = {
            "name": self.display_name,
            "bpm": self.bpm,
            "key": self.key_label,
            "camelotKey": self.camelot_key,
            "energy": self.energy,
            "duration": self.duration_seconds,
            "isManual": self.is_manual,
            "exportedAt": exported_at or datetime.now(timezone.utc).isoformat(),
        }
        if self.source_path:
            record["file"] = self.source_path
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Track":
        """
        Build a track from a song-list JSON record.

        Records with isManual set to true keep the manual origin; everything
        else is marked as imported. An optional "file" restores source_path.

        Raises:
            ValueError: If a required field is missing or a value is invalid
            MissingCamelotKeyError: If camelotKey is not a wheel position
        """
        missing = [field for field in REQUIRED_RECORD_FIELDS if not record.get(field)]
        if missing:
            raise ValueError(f"Record is missing required field(s): {', '.join(missing)}")

        energy = record.get("energy")
        duration = record.get("duration")

        return cls(
            display_name=str(record["name"]),
            bpm=round_bpm(record["bpm"]),
            key_label=str(record["key"]),
            camelot_key=str(record["camelotKey"]),
            energy=float(energy) if energy is not None else DEFAULT_ENERGY,
            duration_seconds=float(duration) if duration else 0.0,
            origin=TrackOrigin.MANUAL if record.get("isManual") is True else TrackOrigin.IMPORTED,
            source_path=str(record["file"]) if record.get("file") else None,
        )
