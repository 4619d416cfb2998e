"""
Track library: the working set of tracks a mix is built from.

The track set is the source of truth. Mixes are derived from it on demand
and never stored. Every track in the set has a valid Camelot key; records
that cannot satisfy that are rejected on entry.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable

from .analyze.key import MissingCamelotKeyError, key_label_for
from .generate.sequencer import InsufficientTracksError, MixPlanner, MixSequence, MIN_TRACKS
from .track import DEFAULT_ENERGY, Track, TrackOrigin, round_bpm

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


class ImportFormatError(ValueError):
    """Raised when a song list payload has no usable songs."""
    pass


class TrackLibrary:
    """In-memory track set with song-list import/export."""

    def __init__(self, manual_default_energy: float = DEFAULT_ENERGY):
        """
        Args:
            manual_default_energy: Energy given to manually entered tracks.
        """
        self.manual_default_energy = manual_default_energy
        self.tracks: List[Track] = []

    @classmethod
    def from_config(cls, config) -> "TrackLibrary":
        return cls(manual_default_energy=config.get("library", "manual_default_energy", DEFAULT_ENERGY))

    def __len__(self) -> int:
        return len(self.tracks)

    def __iter__(self):
        return iter(self.tracks)

    def add(self, track: Track) -> Track:
        """Add a track to the set."""
        self.tracks.append(track)
        logger.debug(f"Added track: {track.display_name} ({track.camelot_key}, {track.bpm} BPM)")
        return track

    def add_analyzed(self, results: Iterable) -> List[Track]:
        """
        Add the successful tracks from a batch of AnalysisResult objects.

        Returns:
            Tracks that were added, in result order
        """
        added = [self.add(result.track) for result in results if result.ok]
        logger.info(f"Added {len(added)} analyzed tracks ({len(self.tracks)} in library)")
        return added

    def add_manual(self, title: str, artist: str, camelot_key: str, bpm: int) -> Track:
        """
        Add a track entered by hand.

        Args:
            title: Song title
            artist: Artist name
            camelot_key: Camelot code (e.g. "8A")
            bpm: Tempo

        Returns:
            The new track ("artist - title", default energy, unknown duration)

        Raises:
            ValueError: If a field is blank or BPM is not positive
            MissingCamelotKeyError: If camelot_key is not a wheel position
        """
        title = (title or "").strip()
        artist = (artist or "").strip()
        if not title or not artist or not camelot_key or not bpm:
            raise ValueError("Title, artist, Camelot key and BPM are all required")

        track = Track(
            display_name=f"{artist} - {title}",
            bpm=round_bpm(bpm),
            key_label=key_label_for(camelot_key),
            camelot_key=camelot_key,
            energy=self.manual_default_energy,
            duration_seconds=0.0,
            origin=TrackOrigin.MANUAL,
        )
        logger.info(f"Added \"{track.display_name}\" manually")
        return self.add(track)

    def import_songs(self, payload: Dict[str, Any]) -> List[Track]:
        """
        Import a song-list payload ({"songs": [...]}).

        Invalid records are skipped one by one; the rest are added.

        Returns:
            Tracks that were added

        Raises:
            ImportFormatError: No songs list, or no valid record in it
        """
        songs = payload.get("songs") if isinstance(payload, dict) else None
        if not isinstance(songs, list):
            raise ImportFormatError("Invalid song list format: missing 'songs' list")

        imported = []
        for index, record in enumerate(songs):
            if not isinstance(record, dict):
                logger.warning(f"Skipping song #{index}: not an object")
                continue
            try:
                imported.append(Track.from_record(record))
            except (ValueError, TypeError, OverflowError) as e:
                logger.warning(f"Skipping song #{index} ({record.get('name', '?')}): {e}")

        if not imported:
            raise ImportFormatError("No valid songs found in the song list")

        self.tracks.extend(imported)
        logger.info(f"✅ Imported {len(imported)} of {len(songs)} songs")
        return imported

    def import_json(self, path: str) -> List[Track]:
        """
        Import a song-list JSON file.

        Raises:
            ImportFormatError: Unreadable or unparseable JSON, or no valid songs
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ImportFormatError(f"Could not parse song list {path}: {e}") from e

        return self.import_songs(payload)

    def export_songs(self) -> Dict[str, Any]:
        """Build the song-list payload for the current set."""
        exported_at = datetime.now(timezone.utc).isoformat()
        return {
            "songs": [track.to_record(exported_at) for track in self.tracks],
            "exportInfo": {
                "totalSongs": len(self.tracks),
                "exportedAt": exported_at,
                "version": EXPORT_VERSION,
            },
        }

    def export_json(self, path: str) -> Path:
        """
        Write the song list to a JSON file.

        Raises:
            ValueError: If the library is empty
        """
        if not self.tracks:
            raise ValueError("No songs to export")

        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.export_songs(), f, indent=2)

        logger.info(f"Wrote song list: {output_path} ({len(self.tracks)} songs)")
        return output_path

    def reset(self) -> None:
        """Remove every track."""
        self.tracks = []
        logger.info("Library reset")

    def sequenceable_tracks(self) -> List[Track]:
        """Tracks eligible for the mix planner."""
        eligible = []
        for track in self.tracks:
            try:
                key_label_for(track.camelot_key)
            except MissingCamelotKeyError:
                logger.warning(f"Excluding {track.display_name}: invalid Camelot key {track.camelot_key!r}")
                continue
            eligible.append(track)
        return eligible

    def build_mix(self, planner: Optional[MixPlanner] = None) -> MixSequence:
        """
        Build a mix from the current set.

        Raises:
            InsufficientTracksError: Fewer than two eligible tracks
        """
        tracks = self.sequenceable_tracks()
        if len(tracks) < MIN_TRACKS:
            raise InsufficientTracksError(
                f"At least {MIN_TRACKS} tracks are needed to build a mix (have {len(tracks)})"
            )

        planner = planner or MixPlanner()
        return planner.build_sequence(tracks)

    def get_stats(self) -> Dict[str, Any]:
        """
        Summary of the current set.

        Returns:
            Dictionary with counts per origin and BPM range.
        """
        bpms = [t.bpm for t in self.tracks]
        return {
            "total_tracks": len(self.tracks),
            "by_origin": {
                origin.value: sum(1 for t in self.tracks if t.origin is origin)
                for origin in TrackOrigin
            },
            "bpm_stats": {
                "min_bpm": min(bpms) if bpms else None,
                "max_bpm": max(bpms) if bpms else None,
                "avg_bpm": sum(bpms) / len(bpms) if bpms else None,
            },
        }
