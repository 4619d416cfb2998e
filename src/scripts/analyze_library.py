#!/usr/bin/env python3
"""
Analyze Music Library Script

Analyzes every audio file under the music library folder, one at a time,
and writes the resulting song list JSON.

- MUSIC_LIBRARY_PATH overrides paths.music_library
- SONGS_FILE overrides paths.songs_file
- Existing songs in the song list are kept; new analyses are appended
"""

import sys
import logging
import os
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from camelotmix.config import Config
from camelotmix.library import ImportFormatError, TrackLibrary
from camelotmix.analyze.decode import discover_audio_files
from camelotmix.analyze.pipeline import analyze_batch

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _report_progress(current: int, total: int, result) -> None:
    status = "ok" if result.ok else f"failed ({result.error})"
    logger.info(f"Analyzing... {current}/{total} - {Path(result.path).name}: {status}")


def main():
    """Main analysis entrypoint."""
    try:
        logger.info("🔍 Starting library analysis...")

        config = Config.load()
        logger.info(f"Config loaded: {config}")

        library_path = os.getenv("MUSIC_LIBRARY_PATH", config.get("paths", "music_library"))
        songs_file = Path(os.getenv("SONGS_FILE", config.get("paths", "songs_file")))

        library = TrackLibrary.from_config(config)
        known_names = set()
        if songs_file.exists():
            try:
                library.import_json(str(songs_file))
                known_names = {t.display_name for t in library}
            except ImportFormatError as e:
                logger.warning(f"Ignoring existing song list {songs_file}: {e}")

        audio_files = discover_audio_files(library_path)
        if not audio_files:
            logger.warning("No audio files found!")
            return 0

        results = analyze_batch(audio_files, config, on_progress=_report_progress)
        new_results = [r for r in results if not (r.ok and r.track.display_name in known_names)]
        library.add_analyzed(new_results)

        failed = [r for r in results if not r.ok]

        logger.info("")
        logger.info("=" * 60)
        logger.info("📊 Analysis Summary")
        logger.info("=" * 60)
        logger.info(f"  Files:      {len(results)}")
        logger.info(f"  Analyzed:   {len(results) - len(failed)}")
        logger.info(f"  Errors:     {len(failed)}")
        logger.info(f"  Library:    {len(library)} songs")
        for result in failed:
            logger.info(f"    ✗ {Path(result.path).name}: {result.error}")
        logger.info("=" * 60)

        if len(library) == 0:
            logger.warning("No songs analyzed; song list not written")
            return 1

        library.export_json(str(songs_file))
        logger.info("✅ Analysis complete")
        return 0

    except KeyboardInterrupt:
        logger.warning("Analysis interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
