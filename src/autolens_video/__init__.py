"""
AutoLens Video - marketing video compilation for vehicle listings

Compile:
    from autolens_video import VideoCompiler, CompilationRequest, VideoClip, AudioTrack

    compiler = VideoCompiler()
    output = await compiler.compile(CompilationRequest(clips, audio, "/tmp/out.mp4"))

Transitions:
    from autolens_video import get_catalog, recommended_sequence, optimize_for_pacing

    ids = optimize_for_pacing("sporty", ["exciting launch", "calm interior"])
    graph = build_graph(ids, clip_count=3)

Post-processing:
    from autolens_video import PostProcessor

    post = PostProcessor()
    await post.optimize_for_platform("/tmp/out.mp4", "tiktok")
"""

from ._version import __version__
from .compiler import (
    AudioTrack,
    CompilationRequest,
    TransitionType,
    VideoClip,
    VideoCompiler,
)
from .exceptions import (
    CompilationError,
    InvalidRequestError,
    TransitionNotFoundError,
    VideoInfoError,
    VideoPipelineError,
)
from .filter_graph import build_graph
from .post_processing import Platform, PostProcessor, VideoInfo, WatermarkPosition
from .transition_selector import (
    get_transition_presets,
    optimize_for_pacing,
    recommended_sequence,
    validate_sequence,
)
from .transitions import Transition, TransitionCatalog, VehicleStyle, get_catalog

__all__ = [
    "__version__",
    # Compilation
    "VideoCompiler",
    "CompilationRequest",
    "VideoClip",
    "AudioTrack",
    "TransitionType",
    # Transitions
    "Transition",
    "TransitionCatalog",
    "VehicleStyle",
    "get_catalog",
    "recommended_sequence",
    "optimize_for_pacing",
    "validate_sequence",
    "get_transition_presets",
    "build_graph",
    # Post-processing
    "PostProcessor",
    "Platform",
    "WatermarkPosition",
    "VideoInfo",
    # Errors
    "VideoPipelineError",
    "InvalidRequestError",
    "TransitionNotFoundError",
    "CompilationError",
    "VideoInfoError",
]
