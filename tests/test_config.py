"""
Tests for centralized configuration and ffmpeg defaults.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from autolens_video.config import (
    BinaryConfig,
    CompilationDefaults,
    PathConfig,
    Settings,
    get_settings,
    reload_settings,
)
from autolens_video.ffmpeg_config import QUALITY_TIERS, QualityTier, parse_resolution, resolve_quality
from autolens_video.ffmpeg_utils import VideoEncodingParams, build_ffmpeg_cmd, build_ffprobe_cmd, format_command


class TestPathConfig:
    """Tests for PathConfig."""

    def test_default_paths(self):
        with patch.dict(os.environ, {}, clear=True):
            config = PathConfig()
            assert config.temp_dir == Path("/tmp/autolensai-videos")
            assert config.output_dir == Path("/tmp/autolensai-videos/output")

    def test_custom_paths_from_env(self):
        with patch.dict(os.environ, {"AUTOLENS_TEMP_DIR": "/scratch"}):
            assert PathConfig().temp_dir == Path("/scratch")

    def test_ensure_directories(self, tmp_path):
        config = PathConfig(temp_dir=tmp_path / "t", output_dir=tmp_path / "o")
        config.ensure_directories()
        assert config.temp_dir.is_dir()
        assert config.output_dir.is_dir()


class TestDefaults:

    def test_compilation_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            defaults = CompilationDefaults()
            assert defaults.aspect_ratio == "9:16"
            assert defaults.resolution == "1080x1920"
            assert defaults.quality == "high"

    def test_binaries_from_env(self):
        with patch.dict(os.environ, {"FFMPEG_BIN": "/opt/ffmpeg/bin/ffmpeg"}):
            assert BinaryConfig().ffmpeg_bin == "/opt/ffmpeg/bin/ffmpeg"


class TestSettingsSingleton:

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reload_picks_up_env(self):
        with patch.dict(os.environ, {"DEFAULT_QUALITY": "LOW"}):
            assert reload_settings().defaults.quality == "low"

    def test_string_paths_are_coerced(self):
        settings = Settings(paths=PathConfig(temp_dir="/a", output_dir="/b"))
        assert settings.paths.temp_dir == Path("/a")

    def test_to_env_dict_roundtrips_binaries(self):
        env = get_settings().to_env_dict()
        assert env["FFMPEG_BIN"] == get_settings().binaries.ffmpeg_bin
        assert "DEFAULT_RESOLUTION" in env


class TestQualityTiers:

    def test_high(self):
        assert resolve_quality("high").to_args() == [
            "-crf", "18", "-preset", "medium", "-profile:v", "high", "-level", "4.0",
        ]

    def test_case_insensitive(self):
        assert resolve_quality("LOW") is QUALITY_TIERS[QualityTier.LOW]

    def test_unknown_falls_back_to_medium(self):
        assert resolve_quality("cinema") is QUALITY_TIERS[QualityTier.MEDIUM]

    def test_parse_resolution(self):
        assert parse_resolution("1920x1080") == (1920, 1080)

    @pytest.mark.parametrize("value", ["1080", "axb", "0x100", "1x2x3"])
    def test_parse_resolution_invalid(self, value):
        with pytest.raises(ValueError):
            parse_resolution(value)


class TestCommandBuilders:

    def test_overwrite_flag_is_last(self):
        assert build_ffmpeg_cmd(["-i", "a.mp4", "b.mp4"]) == ["ffmpeg", "-i", "a.mp4", "b.mp4", "-y"]

    def test_hide_banner_and_loglevel(self):
        cmd = build_ffmpeg_cmd(["-i", "a"], hide_banner=True, loglevel="error", binary="ff")
        assert cmd[:4] == ["ff", "-hide_banner", "-loglevel", "error"]

    def test_no_duplicate_overwrite(self):
        assert build_ffmpeg_cmd(["-n", "out.mp4"]).count("-y") == 0

    def test_ffprobe(self):
        assert build_ffprobe_cmd(["x.mp4"], verbosity="error") == ["ffprobe", "-v", "error", "x.mp4"]

    def test_format_command_quotes(self):
        assert format_command(["ffmpeg", "-i", "my clip.mp4"]) == "ffmpeg -i 'my clip.mp4'"

    def test_encoding_params(self):
        assert VideoEncodingParams(bitrate="4000k").to_args() == ["-b:v", "4000k", "-c:v", "libx264", "-c:a", "aac"]
