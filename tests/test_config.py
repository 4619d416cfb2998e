"""
Unit tests for config loading and validation.
"""

from pathlib import Path

import pytest

from camelotmix.config import Config, ConfigError

SHIPPED_CONFIG = Path(__file__).resolve().parent.parent / "configs" / "camelotmix.toml"


class TestConfigLoad:
    """Test loading from disk and the environment."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = Config.load(str(tmp_path / "absent.toml"))
        assert config.get("analysis", "target_sample_rate") == 16000
        assert config.get("library", "manual_default_energy") == 0.5

    def test_load_toml(self, tmp_path):
        path = tmp_path / "camelotmix.toml"
        path.write_text(
            'config_version = "2.0"\n'
            "[bpm]\nmin_bpm = 70\nmax_bpm = 180\n"
            "[library]\nmanual_default_energy = 0.25\n"
        )

        config = Config.load(str(path))

        assert config.get("bpm", "min_bpm") == 70
        assert config.get("bpm", "max_bpm") == 180
        assert config.get("library", "manual_default_energy") == 0.25
        assert repr(config) == "Config(version=2.0)"

    def test_env_var_path(self, tmp_path, monkeypatch):
        path = tmp_path / "env.toml"
        path.write_text("[analysis]\ntarget_sample_rate = 22050\n")
        monkeypatch.setenv("CAMELOTMIX_CONFIG_PATH", str(path))

        assert Config.load().get("analysis", "target_sample_rate") == 22050

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[bpm\nmin_bpm = ")
        with pytest.raises(ConfigError):
            Config.load(str(path))

    def test_shipped_config_is_valid(self):
        config = Config.load(str(SHIPPED_CONFIG))
        assert config["key_detection"]["profile_type"] == "bgate"


class TestConfigValidation:
    """Test bounds checking and default filling."""

    def test_missing_sections_filled(self):
        config = Config({})
        assert config["bpm"]["max_bpm"] == 210
        assert config["paths"]["songs_file"] == "data/camelot-songs.json"

    def test_missing_params_filled(self):
        config = Config({"bpm": {"min_bpm": 60}})
        assert config.get("bpm", "min_bpm") == 60
        assert config.get("bpm", "hop_size") == 128

    @pytest.mark.parametrize(
        "section,param,value",
        [
            ("analysis", "target_sample_rate", 4000),
            ("bpm", "max_bpm", 500),
            ("key_detection", "pcp_threshold", 1.5),
            ("library", "manual_default_energy", -0.1),
            ("bpm", "min_bpm", "fast"),
        ],
    )
    def test_out_of_bounds(self, section, param, value):
        with pytest.raises(ConfigError):
            Config({section: {param: value}})

    def test_min_bpm_must_be_below_max(self):
        with pytest.raises(ConfigError):
            Config({"bpm": {"min_bpm": 150, "max_bpm": 150}})

    def test_defaults_not_shared(self):
        first = Config.defaults()
        first.data["bpm"]["min_bpm"] = 99
        assert Config.defaults().get("bpm", "min_bpm") == 50

    def test_get_default(self):
        assert Config.defaults().get("nope", "missing", 7) == 7
