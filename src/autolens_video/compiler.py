"""
Video Compiler - assembles scene clips and one audio track into a single video.

Pipeline per request:
    1. Sort clips by scene number (stable)
    2. Resolve the quality tier to its encoder bundle
    3. Build the filter graph: normalize every clip, then chain transitions
    4. Run ffmpeg once and return the output path

Usage:
    from autolens_video.compiler import VideoCompiler, CompilationRequest, VideoClip, AudioTrack

    compiler = VideoCompiler()
    request = CompilationRequest(
        clips=[VideoClip("c1", "/tmp/a.mp4", 10, 1), VideoClip("c2", "/tmp/b.mp4", 10, 2)],
        audio=AudioTrack("music", "/tmp/music.mp3", 30),
        output_path="/tmp/out.mp4",
        transitions=["fade"],
    )
    output = await compiler.compile(request)
"""

import random
import string
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence

from .config import get_settings
from .core.cmd_runner import CommandError, run_command
from .effects import build_clip_effect_chain
from .exceptions import CompilationError, InvalidRequestError, TransitionNotFoundError
from .ffmpeg_config import (
    FASTSTART_ARGS,
    INTERACTIVE_PROMPT_PATTERN,
    STANDARD_AUDIO_CODEC,
    STANDARD_CODEC,
    TIMESTAMP_FIX_ARGS,
    parse_resolution,
    resolve_quality,
)
from .ffmpeg_utils import build_ffmpeg_cmd, format_command
from .filter_graph import SEGMENT_SEPARATOR, VideoFilterChain, chain_transitions
from .logger import log_error, log_step, log_success, log_warning, logger
from .transitions import Transition, TransitionCatalog, get_catalog

FINAL_VIDEO_LABEL = "final_video"


# =============================================================================
# Request types
# =============================================================================

class TransitionType(str, Enum):
    FADE = "fade"
    SLIDE = "slide"
    ZOOM = "zoom"
    NONE = "none"


# Catalog entry each simple transition type renders as
TRANSITION_TYPE_IDS: Mapping[TransitionType, str] = MappingProxyType({
    TransitionType.FADE: "fade_black",
    TransitionType.SLIDE: "slide_left",
    TransitionType.ZOOM: "zoom_in",
    TransitionType.NONE: "hard_cut",
})

DEFAULT_TRANSITION = TransitionType.FADE
DEFAULT_TRANSITIONS = (TransitionType.FADE.value, TransitionType.FADE.value)


class AspectRatio(str, Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"


class Resolution(str, Enum):
    PORTRAIT = "1080x1920"
    LANDSCAPE = "1920x1080"
    SQUARE = "1080x1080"


# Orientation each aspect ratio implies; used only for a mismatch warning
_ASPECT_ORIENTATION = {
    AspectRatio.LANDSCAPE.value: "horizontal",
    AspectRatio.PORTRAIT.value: "vertical",
    AspectRatio.SQUARE.value: "square",
}


@dataclass
class VideoClip:
    id: str
    source_path: str
    duration_seconds: float
    scene_number: int


@dataclass
class AudioTrack:
    id: str
    source_path: str
    duration_seconds: float


@dataclass
class CompilationRequest:
    """
    Everything one compile() call needs.

    `transitions` holds TransitionType values ("fade", "slide", "zoom",
    "none") or transition catalog ids; None means the default fade pair.
    `resolution` and `aspect_ratio` are independent and are not reconciled.
    """
    clips: List[VideoClip]
    audio: AudioTrack
    output_path: str
    transitions: Optional[List[str]] = None
    aspect_ratio: Optional[str] = None
    resolution: Optional[str] = None
    quality: Optional[str] = None
    effects: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "CompilationRequest":
        """Build a request from a JSON manifest."""
        clips = [
            VideoClip(
                id=str(c.get("id", f"clip{i}")),
                source_path=c["path"],
                duration_seconds=float(c.get("duration", 0)),
                scene_number=int(c.get("scene", i + 1)),
            )
            for i, c in enumerate(data.get("clips", []))
        ]
        audio_data = data["audio"]
        audio = AudioTrack(
            id=str(audio_data.get("id", "audio")),
            source_path=audio_data["path"],
            duration_seconds=float(audio_data.get("duration", 0)),
        )
        return cls(
            clips=clips,
            audio=audio,
            output_path=data["output"],
            transitions=data.get("transitions"),
            aspect_ratio=data.get("aspect_ratio"),
            resolution=data.get("resolution"),
            quality=data.get("quality"),
            effects=list(data.get("effects", [])),
        )


def sort_clips(clips: Sequence[VideoClip]) -> List[VideoClip]:
    """Order clips by scene number; ties keep their input order."""
    return sorted(clips, key=lambda clip: clip.scene_number)


def _orientation(width: int, height: int) -> str:
    ratio = width / height
    if ratio > 1.1:
        return "horizontal"
    if ratio < 0.9:
        return "vertical"
    return "square"


# =============================================================================
# Compiler
# =============================================================================

class VideoCompiler:
    """Builds and runs the single ffmpeg invocation for a compilation request."""

    def __init__(self, catalog: Optional[TransitionCatalog] = None, temp_dir: Optional[Path] = None):
        self.settings = get_settings()
        self.catalog = catalog or get_catalog()
        self.temp_dir = Path(temp_dir) if temp_dir else self.settings.paths.temp_dir
        self._ensure_temp_directory()

    def _ensure_temp_directory(self) -> None:
        try:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create temp directory {self.temp_dir}: {e}")

    def get_temp_file_path(self, extension: str = "mp4") -> Path:
        """Collision-free scratch path; the directory is shared and unlocked."""
        suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
        filename = f"video_{int(time.time() * 1000)}_{suffix}.{extension}"
        return self.temp_dir / filename

    # -------------------------------------------------------------------------
    # Transition resolution
    # -------------------------------------------------------------------------

    def resolve_transition(self, value: str) -> Transition:
        """
        Map a TransitionType or catalog id to a catalog entry.

        Raises:
            TransitionNotFoundError: neither a type nor a known id
        """
        try:
            transition_id = TRANSITION_TYPE_IDS[TransitionType(value)]
        except ValueError:
            transition_id = value

        transition = self.catalog.get_by_id(transition_id)
        if transition is None:
            raise TransitionNotFoundError(value)
        return transition

    def resolve_transitions(self, values: Optional[Sequence[str]], clip_count: int) -> List[Transition]:
        """One transition per adjacent pair; missing entries become fades."""
        requested = list(DEFAULT_TRANSITIONS if values is None else values)
        pairs = max(0, clip_count - 1)
        chosen = [
            requested[i] if i < len(requested) and requested[i] else DEFAULT_TRANSITION.value
            for i in range(pairs)
        ]
        return [self.resolve_transition(value) for value in chosen]

    # -------------------------------------------------------------------------
    # Graph and command
    # -------------------------------------------------------------------------

    def build_filter_complex(
        self,
        clips: Sequence[VideoClip],
        transitions: Sequence[Transition],
        resolution: str,
        effects: Sequence[str] = (),
    ) -> str:
        """
        Normalize every input to `resolution`, then fold the normalized
        streams through `transitions` into FINAL_VIDEO_LABEL.
        """
        width, height = parse_resolution(resolution)
        effect_chain = build_clip_effect_chain(effects) if effects else ""

        segments = []
        for index, _clip in enumerate(clips):
            chain = VideoFilterChain().add_scale(width, height).add_raw(effect_chain).add_setsar(1)
            segments.append(chain.build(f"{index}:v", f"v{index}"))

        labels = [f"v{index}" for index in range(len(clips))]
        if len(clips) == 1:
            segments.append(f"[v0]copy[{FINAL_VIDEO_LABEL}]")
        else:
            durations = [clip.duration_seconds or None for clip in clips]
            if any(d is None for d in durations):
                durations = None
            segments.extend(chain_transitions(labels, transitions, FINAL_VIDEO_LABEL, durations))

        return SEGMENT_SEPARATOR.join(segments)

    def build_command(self, request: CompilationRequest) -> List[str]:
        """
        Full ffmpeg argument list for a request. Pure; nothing is executed.

        Raises:
            InvalidRequestError: no clips, or an unparseable resolution
            TransitionNotFoundError: an unknown transition in the request
        """
        if not request.clips:
            raise InvalidRequestError("At least one clip is required to compile a video")

        defaults = self.settings.defaults
        resolution = request.resolution or defaults.resolution
        aspect_ratio = request.aspect_ratio or defaults.aspect_ratio
        quality = resolve_quality(request.quality or defaults.quality)

        try:
            width, height = parse_resolution(resolution)
        except ValueError as e:
            raise InvalidRequestError(f"Invalid resolution: {resolution}", technical_details=str(e)) from e

        expected = _ASPECT_ORIENTATION.get(aspect_ratio)
        if expected and expected != _orientation(width, height):
            log_warning(f"Aspect ratio {aspect_ratio} does not match resolution {resolution}")

        clips = sort_clips(request.clips)
        transitions = self.resolve_transitions(request.transitions, len(clips))
        filter_complex = self.build_filter_complex(clips, transitions, resolution, request.effects)

        args: List[str] = []
        for clip in clips:
            args.extend(["-i", str(clip.source_path)])
        args.extend(["-i", str(request.audio.source_path)])

        args.extend(["-filter_complex", filter_complex])
        args.extend([
            "-map", f"[{FINAL_VIDEO_LABEL}]",
            # Audio comes from the last input
            "-map", f"{len(clips)}:a",
            "-c:v", STANDARD_CODEC,
            "-c:a", STANDARD_AUDIO_CODEC,
        ])
        args.extend(quality.to_args())
        args.append("-shortest")
        args.extend(TIMESTAMP_FIX_ARGS)
        args.extend(FASTSTART_ARGS)
        args.append(str(request.output_path))

        return build_ffmpeg_cmd(args, hide_banner=True)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def compile(self, request: CompilationRequest) -> str:
        """
        Compile the request into `request.output_path`.

        Every call re-runs the full transcode and overwrites the destination.

        Raises:
            InvalidRequestError / TransitionNotFoundError: before ffmpeg starts
            CompilationError: ffmpeg could not be launched or exited non-zero
        """
        cmd = self.build_command(request)
        log_step(f"Compiling {len(request.clips)} clips -> {request.output_path}", "🎬")
        logger.debug(f"Executing FFmpeg command: {format_command(cmd)}")

        try:
            result = await run_command(cmd)
        except CommandError as e:
            log_error(f"Video compilation failed (exit {e.returncode})")
            logger.error(f"FFmpeg stderr: {e.stderr.strip()}")
            raise CompilationError(command=format_command(cmd), stderr=e.stderr) from e
        except OSError as e:
            log_error(f"Video compilation failed: {e}")
            raise CompilationError(command=format_command(cmd), stderr=str(e)) from e

        if result.stderr and INTERACTIVE_PROMPT_PATTERN not in result.stderr:
            logger.warning(f"FFmpeg warnings: {result.stderr.strip()}")

        log_success(f"Video compilation completed: {request.output_path}")
        return str(request.output_path)
