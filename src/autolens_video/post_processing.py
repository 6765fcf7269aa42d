"""
Post-processing for compiled videos.

Each operation takes a finished file and runs its own ffmpeg/ffprobe
process; none of them share state with the compiler.

Usage:
    from autolens_video.post_processing import PostProcessor

    post = PostProcessor()
    if await post.check_ffmpeg_availability():
        tiktok = await post.optimize_for_platform("/tmp/out.mp4", "tiktok")
        thumb = await post.generate_thumbnail(tiktok)
"""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

from .config import get_settings
from .core.cmd_runner import CommandError, run_command
from .exceptions import (
    ExportError,
    InvalidRequestError,
    PlatformOptimizationError,
    ThumbnailError,
    VideoInfoError,
    WatermarkError,
)
from .ffmpeg_config import parse_resolution
from .ffmpeg_utils import VideoEncodingParams, build_ffmpeg_cmd, build_ffprobe_cmd, format_command
from .logger import log_success, logger
from .output_formats import build_output_args, get_format_by_id, get_quality_preset, recommended_quality

PathLike = Union[str, Path]


class Platform(str, Enum):
    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"


@dataclass(frozen=True)
class PlatformSettings:
    resolution: str
    bitrate: str
    max_duration: int


PLATFORM_SETTINGS: Mapping[Platform, PlatformSettings] = MappingProxyType({
    Platform.YOUTUBE: PlatformSettings(resolution="1080x1920", bitrate="8000k", max_duration=60),
    Platform.INSTAGRAM: PlatformSettings(resolution="1080x1920", bitrate="6000k", max_duration=60),
    Platform.TIKTOK: PlatformSettings(resolution="1080x1920", bitrate="4000k", max_duration=60),
})


class WatermarkPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


# Overlay offsets: W/H are the frame, w/h the watermark, 10px margin
WATERMARK_OFFSETS: Mapping[WatermarkPosition, str] = MappingProxyType({
    WatermarkPosition.TOP_LEFT: "10:10",
    WatermarkPosition.TOP_RIGHT: "W-w-10:10",
    WatermarkPosition.BOTTOM_LEFT: "10:H-h-10",
    WatermarkPosition.BOTTOM_RIGHT: "W-w-10:H-h-10",
})


@dataclass
class VideoInfo:
    duration_seconds: float
    resolution: str
    container_format: str

    def to_dict(self) -> dict:
        return {
            "duration": self.duration_seconds,
            "resolution": self.resolution,
            "format": self.container_format,
        }


def derive_output_path(path: PathLike, tag: str, extension: Optional[str] = None) -> Path:
    """'/x/car.mp4' + 'tiktok' -> '/x/car_tiktok.mp4' (optionally with a new extension)."""
    source = Path(path)
    suffix = extension if extension is not None else source.suffix
    return source.with_name(f"{source.stem}_{tag}{suffix}")


def parse_probe_output(stdout: str) -> VideoInfo:
    """
    Pull duration, resolution and container out of ffprobe JSON.

    Raises:
        ValueError / KeyError / TypeError: output is not what ffprobe produces
    """
    info = json.loads(stdout)
    video_stream = next(
        (s for s in info.get("streams", []) if s.get("codec_type") == "video"),
        None,
    )
    if video_stream is None:
        raise ValueError("no video stream")

    return VideoInfo(
        duration_seconds=float(info["format"]["duration"]),
        resolution=f"{int(video_stream['width'])}x{int(video_stream['height'])}",
        container_format=str(info["format"]["format_name"]),
    )


class PostProcessor:
    """Platform re-encodes, probing, watermarks, thumbnails and cleanup."""

    def __init__(self):
        self.settings = get_settings()

    async def check_ffmpeg_availability(self) -> bool:
        """True if `ffmpeg -version` runs cleanly. Never raises."""
        cmd = [self.settings.binaries.ffmpeg_bin, "-version"]
        try:
            result = await run_command(cmd, check=False)
        except OSError as e:
            logger.error(f"FFmpeg not available: {e}")
            return False
        if not result.ok:
            logger.error(f"FFmpeg not available (exit {result.returncode})")
            return False
        return True

    async def optimize_for_platform(self, input_path: PathLike, platform: Union[str, Platform]) -> str:
        """
        Re-encode for a platform and truncate to its duration cap.

        Raises:
            InvalidRequestError: unknown platform
            PlatformOptimizationError: ffmpeg failed
        """
        try:
            target = Platform(platform.lower() if isinstance(platform, str) else platform)
        except ValueError as e:
            raise InvalidRequestError(f"Unsupported platform: {platform}") from e

        platform_settings = PLATFORM_SETTINGS[target]
        width, height = parse_resolution(platform_settings.resolution)
        output_path = derive_output_path(input_path, target.value)

        args = ["-i", str(input_path), "-vf", f"scale={width}:{height}"]
        args.extend(VideoEncodingParams(bitrate=platform_settings.bitrate).to_args())
        args.extend(["-t", str(platform_settings.max_duration), str(output_path)])
        cmd = build_ffmpeg_cmd(args)

        try:
            await run_command(cmd)
        except (CommandError, OSError) as e:
            logger.error(f"Platform optimization error for {target.value}: {e}")
            raise PlatformOptimizationError(
                target.value, command=format_command(cmd), stderr=getattr(e, "stderr", str(e))
            ) from e

        log_success(f"Optimized for {target.value}: {output_path}")
        return str(output_path)

    async def extract_info(self, file_path: PathLike) -> VideoInfo:
        """
        Probe duration, resolution and container format.

        Raises:
            VideoInfoError: ffprobe failed or its output was unusable
        """
        cmd = build_ffprobe_cmd(
            ["-print_format", "json", "-show_format", "-show_streams", str(file_path)],
            verbosity="quiet",
        )
        try:
            result = await run_command(cmd)
            return parse_probe_output(result.stdout)
        except (CommandError, OSError) as e:
            logger.error(f"Video info extraction error: {e}")
            raise VideoInfoError(command=format_command(cmd), stderr=getattr(e, "stderr", str(e))) from e
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Could not parse ffprobe output for {file_path}: {e}")
            raise VideoInfoError(command=format_command(cmd), stderr=str(e)) from e

    def build_watermark_filter(self, position: Union[str, WatermarkPosition]) -> str:
        """Scale the watermark to the fixed size and overlay it at `position`."""
        offset = WATERMARK_OFFSETS[WatermarkPosition(position)]
        post = self.settings.post
        return (
            f"[1:v]scale={post.watermark_width}:{post.watermark_height}[watermark];"
            f"[0:v][watermark]overlay={offset}"
        )

    async def add_watermark(
        self,
        input_path: PathLike,
        watermark_path: PathLike,
        position: Union[str, WatermarkPosition] = WatermarkPosition.BOTTOM_RIGHT,
    ) -> str:
        """
        Overlay a watermark image in one corner; audio is copied untouched.

        Raises:
            InvalidRequestError: unknown position
            WatermarkError: ffmpeg failed
        """
        try:
            filter_complex = self.build_watermark_filter(position)
        except ValueError as e:
            raise InvalidRequestError(f"Unsupported watermark position: {position}") from e

        output_path = derive_output_path(input_path, "watermarked")
        cmd = build_ffmpeg_cmd([
            "-i", str(input_path),
            "-i", str(watermark_path),
            "-filter_complex", filter_complex,
            "-c:a", "copy",
            str(output_path),
        ])

        try:
            await run_command(cmd)
        except (CommandError, OSError) as e:
            logger.error(f"Watermark addition error: {e}")
            raise WatermarkError(command=format_command(cmd), stderr=getattr(e, "stderr", str(e))) from e

        return str(output_path)

    async def generate_thumbnail(self, video_path: PathLike, time_offset: Optional[float] = None) -> str:
        """
        Extract one frame at `time_offset` seconds as a JPEG.

        Raises:
            ThumbnailError: ffmpeg failed
        """
        if time_offset is None:
            time_offset = self.settings.post.thumbnail_offset
        thumbnail_path = derive_output_path(video_path, "thumb", ".jpg")

        cmd = build_ffmpeg_cmd([
            "-i", str(video_path),
            "-ss", f"{time_offset:g}",
            "-vframes", "1",
            "-q:v", "2",
            str(thumbnail_path),
        ])

        try:
            await run_command(cmd)
        except (CommandError, OSError) as e:
            logger.error(f"Thumbnail generation error: {e}")
            raise ThumbnailError(command=format_command(cmd), stderr=getattr(e, "stderr", str(e))) from e

        return str(thumbnail_path)

    async def export_for_format(
        self,
        input_path: PathLike,
        format_id: str,
        quality_id: Optional[str] = None,
    ) -> str:
        """
        Re-encode with a full delivery format and quality preset.

        Without `quality_id` the platform's recommended preset is used.

        Raises:
            InvalidRequestError: unknown format or quality preset
            ExportError: ffmpeg failed
        """
        fmt = get_format_by_id(format_id)
        if fmt is None:
            raise InvalidRequestError(f"Unknown output format: {format_id}")

        if quality_id is None:
            quality = recommended_quality(fmt.platform)
        else:
            quality = get_quality_preset(quality_id)
            if quality is None:
                raise InvalidRequestError(f"Unknown quality preset: {quality_id}")

        output_path = derive_output_path(input_path, fmt.id, f".{fmt.container}")
        cmd = build_ffmpeg_cmd(build_output_args(str(input_path), str(output_path), fmt, quality))

        try:
            await run_command(cmd)
        except (CommandError, OSError) as e:
            logger.error(f"Export error for {fmt.id}: {e}")
            raise ExportError(fmt.id, command=format_command(cmd), stderr=getattr(e, "stderr", str(e))) from e

        return str(output_path)

    async def cleanup(self, file_paths: Iterable[PathLike]) -> int:
        """
        Best-effort delete. Failures are logged and the batch continues.

        Returns:
            Number of files removed
        """
        removed = 0
        for file_path in file_paths:
            try:
                Path(file_path).unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Failed to delete file {file_path}: {e}")
        return removed
