"""
FFmpeg Configuration - Central place for all encoding defaults.

All codec constants and the quality-tier table live here so the compiler
and the post-processing helpers build identical encoder arguments.

Usage:
    from .ffmpeg_config import QualityTier, resolve_quality

    quality = resolve_quality("high")
    cmd.extend(quality.to_args())
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Union

from .logger import logger


# =============================================================================
# Standard defaults (H.264 for broad compatibility)
# =============================================================================
STANDARD_CODEC = "libx264"
STANDARD_AUDIO_CODEC = "aac"
STANDARD_PIX_FMT = "yuv420p"

# Output flags shared by every compiled video
TIMESTAMP_FIX_ARGS = ["-avoid_negative_ts", "make_zero", "-fflags", "+genpts"]
FASTSTART_ARGS = ["-movflags", "+faststart"]

# ffmpeg prints this on stderr when stdin is a terminal; it is not an error
INTERACTIVE_PROMPT_PATTERN = "Press [q] to stop"


# =============================================================================
# Quality tiers
# =============================================================================
class QualityTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class EncoderQuality:
    """Fixed encoder bundle for one quality tier."""
    crf: int
    preset: str
    profile: str
    level: str

    def to_args(self) -> List[str]:
        return [
            "-crf", str(self.crf),
            "-preset", self.preset,
            "-profile:v", self.profile,
            "-level", self.level,
        ]


# Higher quality = lower CRF, slower preset, higher profile/level
QUALITY_TIERS: Mapping[QualityTier, EncoderQuality] = MappingProxyType({
    QualityTier.HIGH: EncoderQuality(crf=18, preset="medium", profile="high", level="4.0"),
    QualityTier.MEDIUM: EncoderQuality(crf=23, preset="fast", profile="main", level="3.1"),
    QualityTier.LOW: EncoderQuality(crf=28, preset="faster", profile="baseline", level="3.0"),
})

DEFAULT_QUALITY_TIER = QualityTier.MEDIUM


def resolve_quality(tier: Union[str, QualityTier]) -> EncoderQuality:
    """
    Resolve a tier name to its encoder bundle.

    Unknown names fall back to the medium tier.
    """
    try:
        key = QualityTier(tier.lower() if isinstance(tier, str) else tier)
    except ValueError:
        logger.warning(f"Unknown quality tier '{tier}', using {DEFAULT_QUALITY_TIER.value}")
        key = DEFAULT_QUALITY_TIER
    return QUALITY_TIERS[key]


def parse_resolution(resolution: str) -> tuple:
    """
    Split a "WIDTHxHEIGHT" string into integers.

    Raises:
        ValueError: if the string is not two positive integers joined by 'x'
    """
    parts = resolution.lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"Invalid resolution: {resolution}")
    width, height = int(parts[0]), int(parts[1])
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid resolution: {resolution}")
    return width, height
