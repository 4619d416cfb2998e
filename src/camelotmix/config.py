"""
Configuration management for camelotmix.

Loads and validates a TOML config against fixed bounds.
All tunable parameters are bounded and validated at startup.
"""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional
import toml
import logging

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when config validation fails."""
    pass


class Config:
    """Configuration loader and validator."""

    PARAM_BOUNDS = {
        "analysis": {
            "target_sample_rate": (8000, 48000),
            "decode_hop_size": (256, 8192),
        },
        "bpm": {
            "frame_size": (256, 8192),
            "frame_size_oss": (256, 8192),
            "hop_size": (32, 4096),
            "hop_size_oss": (32, 4096),
            "min_bpm": (30, 300),
            "max_bpm": (30, 300),
            "aubio_hop_size": (128, 4096),
            "aubio_buf_size": (256, 8192),
        },
        "key_detection": {
            "frame_size": (1024, 16384),
            "hop_size": (512, 16384),
            "hpcp_size": (12, 120),
            "min_frequency": (20, 1000),
            "max_frequency": (1000, 8000),
            "pcp_threshold": (0.0, 1.0),
            "tuning_frequency": (400, 480),
            "profile_type": None,  # String type
        },
        "library": {
            "manual_default_energy": (0.0, 1.0),
        },
        "paths": {
            "music_library": None,
            "songs_file": None,
            "output_dir": None,
        },
    }

    DEFAULT_CONFIG = {
        "config_version": "1.0",
        "analysis": {
            "target_sample_rate": 16000,
            "decode_hop_size": 512,
        },
        "bpm": {
            "frame_size": 1024,
            "frame_size_oss": 2048,
            "hop_size": 128,
            "hop_size_oss": 128,
            "min_bpm": 50,
            "max_bpm": 210,
            "aubio_hop_size": 512,
            "aubio_buf_size": 1024,
        },
        "key_detection": {
            "frame_size": 4096,
            "hop_size": 4096,
            "hpcp_size": 12,
            "min_frequency": 25,
            "max_frequency": 3500,
            "maximum_spectral_peaks": 60,
            "pcp_threshold": 0.2,
            "profile_type": "bgate",
            "spectral_peaks_threshold": 0.0001,
            "tuning_frequency": 440,
            "weight_type": "cosine",
            "window_type": "hann",
        },
        "library": {
            "manual_default_energy": 0.5,
        },
        "paths": {
            "music_library": "data/music",
            "songs_file": "data/camelot-songs.json",
            "output_dir": "data/mixes",
        },
    }

    def __init__(self, config_dict: Dict[str, Any]):
        """Initialize config from dictionary."""
        self.data = config_dict
        self._validate()

    @classmethod
    def defaults(cls) -> "Config":
        """Config built from DEFAULT_CONFIG alone."""
        return cls(copy.deepcopy(cls.DEFAULT_CONFIG))

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load config from TOML file.

        Args:
            config_path: Path to camelotmix.toml. If None, uses CAMELOTMIX_CONFIG_PATH
                        env var or defaults to configs/camelotmix.toml.

        Returns:
            Config instance.

        Raises:
            ConfigError: If config is invalid or unreadable.
        """
        if config_path is None:
            config_path = os.getenv("CAMELOTMIX_CONFIG_PATH", "configs/camelotmix.toml")

        config_path = Path(config_path)

        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}. Using defaults.")
            return cls.defaults()

        try:
            config_dict = toml.load(config_path)
        except (toml.TomlDecodeError, OSError) as e:
            raise ConfigError(f"Failed to load config from {config_path}: {e}")

        logger.info(f"Loaded config from {config_path}")
        return cls(config_dict)

    def _validate(self) -> None:
        """
        Validate all config parameters against PARAM_BOUNDS.

        Raises:
            ConfigError: If any parameter is out of bounds.
        """
        for section, params in self.PARAM_BOUNDS.items():
            if section not in self.data:
                logger.warning(f"Missing config section: {section}. Using defaults.")
                self.data[section] = copy.deepcopy(self.DEFAULT_CONFIG.get(section, {}))
                continue

            section_data = self.data[section]

            for param, bounds in params.items():
                if param not in section_data:
                    default_val = self.DEFAULT_CONFIG.get(section, {}).get(param)
                    if default_val is not None:
                        logger.warning(f"Missing param {section}.{param}. Using default: {default_val}")
                        section_data[param] = default_val
                    continue

                value = section_data[param]

                # Strings and paths have no bounds
                if bounds is None:
                    continue

                min_val, max_val = bounds
                if not isinstance(value, (int, float)) or not (min_val <= value <= max_val):
                    raise ConfigError(
                        f"Parameter {section}.{param}={value} out of bounds "
                        f"[{min_val}, {max_val}]"
                    )

        bpm = self.data["bpm"]
        if bpm["min_bpm"] >= bpm["max_bpm"]:
            raise ConfigError(f"bpm.min_bpm={bpm['min_bpm']} must be below bpm.max_bpm={bpm['max_bpm']}")

        logger.debug("Config validation passed")

    def get(self, section: str, param: str, default: Any = None) -> Any:
        """Get a config parameter safely."""
        return self.data.get(section, {}).get(param, default)

    def __getitem__(self, section: str) -> Dict[str, Any]:
        """Allow dict-like access: config["analysis"]"""
        return self.data.get(section, {})

    def __repr__(self) -> str:
        version = self.data.get('config_version', 'unknown')
        return f"Config(version={version})"
