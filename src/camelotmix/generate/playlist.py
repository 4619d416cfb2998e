"""
Mix export: JSON playlist, text summary and M3U.

Outputs are views of a MixSequence; nothing here feeds back into planning.
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from ..track import Track
from .sequencer import MixSequence

logger = logging.getLogger(__name__)

TEXT_HEADER = "🎵 Optimal Mix Sequence - Generated by Camelot Wheel Analyzer"


def playlist_file_name(track: Track) -> str:
    """
    File name for a track in an exported playlist.

    Analyzed tracks use their source file; others get a name derived from
    the display name ("Artist - Song!" -> "Artist_-_Song.mp3").
    """
    if track.file_name:
        return track.file_name

    cleaned = re.sub(r"[^a-zA-Z0-9\s-]", "", track.display_name)
    return re.sub(r"\s+", "_", cleaned) + ".mp3"


def format_mix_lines(sequence: MixSequence) -> List[str]:
    """One numbered line per entry: "1. Name (128 BPM • 8A (A minor)) - Opening Track"."""
    return [
        f"{index}. {entry.track.display_name} "
        f"({entry.track.bpm} BPM • {entry.track.camelot_key} ({entry.track.key_label})) "
        f"- {entry.transition}"
        for index, entry in enumerate(sequence, start=1)
    ]


def write_mix_text(sequence: MixSequence, output_path: Path) -> Path:
    """
    Write a human-readable mix summary.

    Args:
        sequence: Mix to export
        output_path: Output text file path

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        TEXT_HEADER,
        "=" * 60,
        "",
        *format_mix_lines(sequence),
        "",
        f"Generated on: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"Total tracks: {len(sequence)}",
    ]
    output_path.write_text("\n".join(lines), encoding="utf-8")

    logger.info(f"Wrote mix summary: {output_path}")
    return output_path


def write_mix_json(sequence: MixSequence, output_path: Path) -> Path:
    """
    Write the mix as JSON.

    The payload carries the playlist file names in order and the full
    transition records.

    Args:
        sequence: Mix to export
        output_path: Output JSON file path

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    plan = {
        "playlist": [playlist_file_name(entry.track) for entry in sequence],
        "sequence": sequence.to_records(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(plan, f, indent=2, ensure_ascii=False)

    logger.info(f"Wrote mix playlist: {output_path}")
    return output_path


def write_m3u(sequence: MixSequence, output_path: Path) -> Path:
    """
    Write an M3U playlist for tracks that have an audio file.

    Manual and imported tracks have no file and are left out.

    Args:
        sequence: Mix to export
        output_path: Output M3U file path

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    skipped = 0
    with open(output_path, "w", encoding="utf-8") as f:
        f.write("#EXTM3U\n")
        for entry in sequence:
            track = entry.track
            if not track.source_path:
                skipped += 1
                continue
            f.write(f"#EXTINF:{int(track.duration_seconds)},{track.display_name}\n")
            f.write(f"{Path(track.source_path).resolve()}\n")

    if skipped:
        logger.debug(f"Left {skipped} track(s) without audio files out of {output_path.name}")
    logger.info(f"Wrote playlist: {output_path}")
    return output_path
