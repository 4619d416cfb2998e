#!/usr/bin/env python3
"""
Generate Mix Script

Loads the song list JSON, orders it on the Camelot wheel and writes:
- mix-<timestamp>.txt   (numbered summary)
- mix-<timestamp>.json  (playlist file names + transition records)
- mix-<timestamp>.m3u   (analyzed tracks only)
"""

import sys
import logging
import os
from pathlib import Path
from datetime import datetime

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from camelotmix.config import Config
from camelotmix.library import ImportFormatError, TrackLibrary
from camelotmix.generate.sequencer import InsufficientTracksError
from camelotmix.generate.playlist import format_mix_lines, write_m3u, write_mix_json, write_mix_text

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    """Main generation entrypoint."""
    try:
        logger.info("🎵 Starting mix generation...")

        config = Config.load()
        logger.info(f"Config loaded: {config}")

        songs_file = os.getenv("SONGS_FILE", config.get("paths", "songs_file"))
        output_dir = Path(os.getenv("MIX_OUTPUT_DIR", config.get("paths", "output_dir")))

        library = TrackLibrary.from_config(config)
        try:
            library.import_json(songs_file)
        except (FileNotFoundError, ImportFormatError) as e:
            logger.error(f"Could not load song list {songs_file}: {e}")
            return 1

        try:
            sequence = library.build_mix()
        except InsufficientTracksError as e:
            logger.error(str(e))
            return 1

        for line in format_mix_lines(sequence):
            logger.info(f"  {line}")

        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        write_mix_text(sequence, output_dir / f"mix-{timestamp}.txt")
        write_mix_json(sequence, output_dir / f"mix-{timestamp}.json")
        write_m3u(sequence, output_dir / f"mix-{timestamp}.m3u")

        logger.info(f"✅ Mix generated: {len(sequence)} tracks in {output_dir}")
        return 0

    except KeyboardInterrupt:
        logger.warning("Generation interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Generation failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
