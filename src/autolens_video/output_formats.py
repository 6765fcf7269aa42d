"""
Delivery formats and quality presets for exported videos.

Each VideoOutputFormat describes what a destination platform accepts;
each QualityPreset is a fixed encoder bundle. `build_output_args` turns a
pair of them into ffmpeg arguments.

Usage:
    from autolens_video.output_formats import get_format_by_id, get_quality_preset

    fmt = get_format_by_id("instagram_reels")
    quality = recommended_quality("instagram")
    args = build_output_args("in.mp4", "out.mp4", fmt, quality)
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .ffmpeg_config import STANDARD_AUDIO_CODEC, STANDARD_CODEC, STANDARD_PIX_FMT, parse_resolution


@dataclass(frozen=True)
class VideoOutputFormat:
    id: str
    name: str
    platform: str
    aspect_ratio: str
    resolution: str
    frame_rate: int
    bitrate: str
    max_duration: int
    optimizations: Tuple[str, ...] = ()
    audio_codec: str = STANDARD_AUDIO_CODEC
    video_codec: str = STANDARD_CODEC
    container: str = "mp4"


@dataclass(frozen=True)
class QualityPreset:
    id: str
    name: str
    description: str
    crf: int
    preset: str
    profile: str
    level: str
    estimated_file_size: str
    target_audience: str


VIDEO_OUTPUT_FORMATS: Tuple[VideoOutputFormat, ...] = (
    VideoOutputFormat("youtube_shorts", "YouTube Shorts", "YouTube", "9:16", "1080x1920", 30, "8000k", 60,
                      ("faststart", "web_optimized", "mobile_friendly")),
    VideoOutputFormat("instagram_reels", "Instagram Reels", "Instagram", "9:16", "1080x1920", 30, "6000k", 90,
                      ("faststart", "mobile_optimized", "story_format")),
    VideoOutputFormat("tiktok", "TikTok", "TikTok", "9:16", "1080x1920", 30, "4000k", 60,
                      ("faststart", "mobile_first", "quick_load")),
    VideoOutputFormat("facebook_video", "Facebook Video", "Facebook", "16:9", "1920x1080", 30, "8000k", 240,
                      ("faststart", "social_optimized", "auto_play")),
    VideoOutputFormat("linkedin_video", "LinkedIn Video", "LinkedIn", "16:9", "1920x1080", 30, "10000k", 600,
                      ("professional_quality", "business_optimized", "desktop_friendly")),
    VideoOutputFormat("twitter_video", "Twitter Video", "Twitter", "16:9", "1280x720", 30, "5000k", 140,
                      ("faststart", "quick_preview", "bandwidth_efficient")),
    VideoOutputFormat("website_embed", "Website Embed", "Website", "16:9", "1920x1080", 30, "6000k", 120,
                      ("faststart", "progressive_download", "cross_browser")),
)

VIDEO_QUALITY_PRESETS: Tuple[QualityPreset, ...] = (
    QualityPreset("ultra_high", "Ultra High Quality", "Maximum quality for premium content",
                  15, "slow", "high", "4.2", "50-80MB", "Professional/Premium"),
    QualityPreset("high", "High Quality", "High quality for professional use",
                  18, "medium", "high", "4.0", "25-40MB", "Professional"),
    QualityPreset("standard", "Standard Quality", "Good balance of quality and file size",
                  23, "fast", "main", "3.1", "15-25MB", "General/Social Media"),
    QualityPreset("optimized", "Optimized", "Optimized for fast loading and mobile",
                  28, "faster", "main", "3.1", "8-15MB", "Mobile/Quick Loading"),
    QualityPreset("compressed", "Compressed", "Highly compressed for bandwidth-limited scenarios",
                  32, "veryfast", "baseline", "3.0", "5-10MB", "Limited Bandwidth"),
)

DEFAULT_FORMAT = VIDEO_OUTPUT_FORMATS[0]
DEFAULT_QUALITY_ID = "standard"

# Encoding cost per second of video, relative to veryfast
PRESET_MULTIPLIERS = {
    "ultrafast": 0.5,
    "superfast": 0.7,
    "veryfast": 1,
    "faster": 1.5,
    "fast": 2,
    "medium": 3,
    "slow": 5,
    "slower": 8,
    "veryslow": 12,
}

PLATFORM_QUALITY = {
    "instagram": "optimized",
    "tiktok": "optimized",
    "facebook": "standard",
    "linkedin": "high",
    "twitter": "optimized",
    "website": "standard",
}


# =============================================================================
# Lookups
# =============================================================================

def get_format_by_platform(platform: str) -> Optional[VideoOutputFormat]:
    wanted = platform.lower()
    return next((f for f in VIDEO_OUTPUT_FORMATS if f.platform.lower() == wanted), None)


def get_format_by_id(format_id: str) -> Optional[VideoOutputFormat]:
    return next((f for f in VIDEO_OUTPUT_FORMATS if f.id == format_id), None)


def get_quality_preset(preset_id: str) -> Optional[QualityPreset]:
    return next((q for q in VIDEO_QUALITY_PRESETS if q.id == preset_id), None)


def _default_quality() -> QualityPreset:
    return get_quality_preset(DEFAULT_QUALITY_ID)


def supported_platforms() -> List[str]:
    return [f.platform for f in VIDEO_OUTPUT_FORMATS]


def format_requirements(platform: str) -> Optional[dict]:
    fmt = get_format_by_platform(platform)
    if fmt is None:
        return None
    return {
        "aspect_ratio": fmt.aspect_ratio,
        "max_duration": fmt.max_duration,
        "recommended_resolution": fmt.resolution,
        "required_codecs": {"video": fmt.video_codec, "audio": fmt.audio_codec},
        "optimizations": list(fmt.optimizations),
    }


# =============================================================================
# Command building
# =============================================================================

def build_output_args(
    input_path: str,
    output_path: str,
    fmt: VideoOutputFormat,
    quality: QualityPreset,
    extra_args: Optional[List[str]] = None,
) -> List[str]:
    """ffmpeg arguments (without the binary) for exporting to `fmt`."""
    width, height = parse_resolution(fmt.resolution)
    args = [
        "-i", str(input_path),
        "-c:v", fmt.video_codec,
        "-c:a", fmt.audio_codec,
        "-crf", str(quality.crf),
        "-preset", quality.preset,
        "-profile:v", quality.profile,
        "-level", quality.level,
        "-r", str(fmt.frame_rate),
        "-b:v", fmt.bitrate,
        "-vf", f"scale={width}:{height}",
        "-t", str(fmt.max_duration),
    ]

    if "faststart" in fmt.optimizations:
        args.extend(["-movflags", "+faststart"])
    if "mobile_optimized" in fmt.optimizations:
        args.extend(["-tune", "film"])
    if "web_optimized" in fmt.optimizations:
        args.extend(["-pix_fmt", STANDARD_PIX_FMT])

    if extra_args:
        args.extend(extra_args)

    args.append(str(output_path))
    return args


# =============================================================================
# Recommendations
# =============================================================================

def recommended_quality(platform: str, file_size: Optional[str] = None) -> QualityPreset:
    """Quality preset suited to a platform; YouTube gets 'high' only for large files."""
    name = platform.lower()
    if name == "youtube":
        quality_id = "high" if file_size == "large" else "standard"
    else:
        quality_id = PLATFORM_QUALITY.get(name, DEFAULT_QUALITY_ID)
    return get_quality_preset(quality_id) or _default_quality()


@dataclass
class OutputValidation:
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.warnings


def validate_output_settings(
    fmt: VideoOutputFormat,
    quality: QualityPreset,
    duration: float,
) -> OutputValidation:
    result = OutputValidation()

    if duration > fmt.max_duration:
        result.warnings.append(
            f"Video duration ({duration:g}s) exceeds platform limit ({fmt.max_duration}s)"
        )
    if quality.crf < 15:
        result.warnings.append("Very high quality setting may result in large file sizes")
    if quality.crf > 30:
        result.warnings.append("Low quality setting may result in visible compression artifacts")
    if "mobile" in fmt.platform.lower() and quality.preset == "slow":
        result.warnings.append("Slow encoding preset may not be optimal for mobile platforms")

    return result


def estimate_processing_time(video_duration: float, quality: QualityPreset, resolution: str) -> int:
    """Rough encode time in seconds for `video_duration` seconds of output."""
    width, height = parse_resolution(resolution)
    pixels = width * height

    multiplier = PRESET_MULTIPLIERS.get(quality.preset, 2)

    if pixels > 2_000_000:
        multiplier *= 1.5
    elif pixels > 900_000:
        multiplier *= 1.2

    if quality.crf < 20:
        multiplier *= 1.3

    return math.ceil(video_duration * multiplier)


def optimal_settings(platform: str, content_type: str, bandwidth: str) -> Dict[str, object]:
    """
    Pick a format and quality from platform, content type
    (commercial/social/professional) and bandwidth (high/medium/low).
    """
    fmt = get_format_by_platform(platform) or DEFAULT_FORMAT

    quality_id = DEFAULT_QUALITY_ID
    if content_type == "professional" and bandwidth == "high":
        quality_id = "high"
    elif content_type == "commercial":
        quality_id = "high" if bandwidth == "high" else "standard"
    elif bandwidth == "low":
        quality_id = "optimized"

    quality = get_quality_preset(quality_id) or _default_quality()
    return {"format": fmt, "quality": quality}
