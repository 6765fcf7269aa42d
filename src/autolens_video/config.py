"""
Runtime settings for AutoLens Video.

Paths, ffmpeg binaries, request defaults and post-processing constants,
each read from an environment variable when a Settings object is built.

Usage:
    from autolens_video.config import get_settings

    settings = get_settings()
    scratch = settings.paths.temp_dir
    ffmpeg = settings.binaries.ffmpeg_bin
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _env_float(key: str, default: str) -> float:
    return float(os.environ.get(key, default) or default)


def _env_int(key: str, default: str) -> int:
    return int(os.environ.get(key, default) or default)


# =============================================================================
# Path Configuration
# =============================================================================
@dataclass
class PathConfig:
    """Filesystem locations used by the pipeline."""

    temp_dir: Path = field(default_factory=lambda: Path(os.environ.get("AUTOLENS_TEMP_DIR", "/tmp/autolensai-videos")))
    output_dir: Path = field(default_factory=lambda: Path(os.environ.get("AUTOLENS_OUTPUT_DIR", "/tmp/autolensai-videos/output")))

    def ensure_directories(self) -> None:
        """mkdir -p the scratch and output directories."""
        for path in [self.temp_dir, self.output_dir]:
            path.mkdir(parents=True, exist_ok=True)


# =============================================================================
# External binaries
# =============================================================================
@dataclass
class BinaryConfig:
    """Names or paths of the external transcoder and prober."""

    ffmpeg_bin: str = field(default_factory=lambda: os.environ.get("FFMPEG_BIN", "ffmpeg"))
    ffprobe_bin: str = field(default_factory=lambda: os.environ.get("FFPROBE_BIN", "ffprobe"))


# =============================================================================
# Compilation defaults
# =============================================================================
@dataclass
class CompilationDefaults:
    """Defaults applied when a request leaves an output knob unset."""

    aspect_ratio: str = field(default_factory=lambda: os.environ.get("DEFAULT_ASPECT_RATIO", "9:16"))
    resolution: str = field(default_factory=lambda: os.environ.get("DEFAULT_RESOLUTION", "1080x1920"))
    quality: str = field(default_factory=lambda: os.environ.get("DEFAULT_QUALITY", "high").lower())


@dataclass
class TransitionConfig:
    """Timing assumptions for transition offsets."""

    # Clip length assumed when the caller gives no durations
    nominal_clip_seconds: float = field(default_factory=lambda: _env_float("NOMINAL_CLIP_SECONDS", "10"))


@dataclass
class PostProcessConfig:
    """Derived-asset parameters."""

    thumbnail_offset: float = field(default_factory=lambda: _env_float("THUMBNAIL_OFFSET", "5"))
    watermark_width: int = field(default_factory=lambda: _env_int("WATERMARK_WIDTH", "100"))
    watermark_height: int = field(default_factory=lambda: _env_int("WATERMARK_HEIGHT", "50"))


# =============================================================================
# Settings
# =============================================================================
@dataclass
class Settings:
    """Every section the pipeline reads."""

    paths: PathConfig = field(default_factory=PathConfig)
    binaries: BinaryConfig = field(default_factory=BinaryConfig)
    defaults: CompilationDefaults = field(default_factory=CompilationDefaults)
    transitions: TransitionConfig = field(default_factory=TransitionConfig)
    post: PostProcessConfig = field(default_factory=PostProcessConfig)

    def __post_init__(self):
        if isinstance(self.paths.temp_dir, str):
            self.paths.temp_dir = Path(self.paths.temp_dir)
        if isinstance(self.paths.output_dir, str):
            self.paths.output_dir = Path(self.paths.output_dir)

    def to_env_dict(self) -> dict:
        """The env vars that would reproduce these settings in a child process."""
        return {
            "AUTOLENS_TEMP_DIR": str(self.paths.temp_dir),
            "AUTOLENS_OUTPUT_DIR": str(self.paths.output_dir),
            "FFMPEG_BIN": self.binaries.ffmpeg_bin,
            "FFPROBE_BIN": self.binaries.ffprobe_bin,
            "DEFAULT_ASPECT_RATIO": self.defaults.aspect_ratio,
            "DEFAULT_RESOLUTION": self.defaults.resolution,
            "DEFAULT_QUALITY": self.defaults.quality,
            "NOMINAL_CLIP_SECONDS": str(self.transitions.nominal_clip_seconds),
        }


# =============================================================================
# Shared instance
# =============================================================================
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide Settings, built from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Rebuild the process-wide Settings (tests and long-lived workers)."""
    global _settings
    _settings = Settings()
    return _settings
