"""
Filter graph construction for clip compilation.

Two layers:
    - VideoFilterChain: builder for the per-clip normalization chain
      (scale, sample aspect ratio, optional effects)
    - chain_transitions / build_graph: the left fold that joins N streams
      pairwise through transition fragments into one terminal stream

Usage:
    from autolens_video.filter_graph import build_graph, VideoFilterChain

    build_graph(["fade_black", "slide_left"], clip_count=3)
    # -> "[0:v][1:v]xfade=...[t0];[t0][2:v]xfade=...[v]"

    (VideoFilterChain()
        .add_scale(1080, 1920)
        .add_setsar()
        .build("0:v", "v0"))
    # -> "[0:v]scale=1080:1920,setsar=1[v0]"
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import get_settings
from .ffmpeg_utils import build_filter_chain
from .logger import logger
from .transitions import Transition, TransitionCatalog, get_catalog

SEGMENT_SEPARATOR = ";"
TERMINAL_LABEL = "v"
INTERMEDIATE_PREFIX = "t"


@dataclass
class FilterStep:
    """Single filter operation in a chain."""
    name: str
    args: Tuple[Any, ...] = ()
    params: Dict[str, Any] = field(default_factory=dict)

    def to_string(self) -> str:
        """
        FilterStep("scale", args=(1080, 1920)) -> "scale=1080:1920"
        FilterStep("fps", params={"fps": 30}) -> "fps=fps=30"
        """
        parts = [str(a) for a in self.args]
        for key, value in self.params.items():
            if isinstance(value, str) and any(c in value for c in " ;:[],'\""):
                value = f"'{value}'"
            parts.append(f"{key}={value}")
        if not parts:
            return self.name
        return f"{self.name}={':'.join(parts)}"


class VideoFilterChain:
    """Builder for a linear video filter chain between two labels."""

    def __init__(self):
        self.filters: List[str] = []

    def add_scale(self, width: int, height: int) -> "VideoFilterChain":
        """Scale to exact dimensions (no aspect preservation)."""
        self.filters.append(FilterStep("scale", args=(width, height)).to_string())
        return self

    def add_setsar(self, ratio: int = 1) -> "VideoFilterChain":
        """Normalize sample aspect ratio so streams can be blended."""
        self.filters.append(FilterStep("setsar", args=(ratio,)).to_string())
        return self

    def add_raw(self, expression: str) -> "VideoFilterChain":
        """Append a prebuilt filter expression (e.g. from the effects catalog)."""
        if expression and expression.strip():
            self.filters.append(expression)
        return self

    def to_string(self) -> str:
        return build_filter_chain(self.filters)

    def build(self, input_label: str, output_label: str) -> str:
        """Wrap the chain in graph labels: "[in]f1,f2[out]"."""
        chain = self.to_string() or "null"
        return f"[{input_label}]{chain}[{output_label}]"


# =============================================================================
# Transition chaining
# =============================================================================

def chain_transitions(
    labels: Sequence[str],
    transitions: Sequence[Transition],
    terminal_label: str,
    clip_durations: Optional[Sequence[float]] = None,
    intermediate_prefix: str = INTERMEDIATE_PREFIX,
) -> List[str]:
    """
    Left-fold `labels` through `transitions`.

    Step i joins the running stream with labels[i + 1]. Only
    min(len(transitions), len(labels) - 1) steps are built; surplus
    transitions are ignored. The last step writes `terminal_label`,
    earlier steps write "<prefix><i>".

    Offsets follow xfade semantics: a transition starts `duration` seconds
    before the end of the running stream, and the stream then grows by the
    next clip minus the overlap. Missing durations use the nominal clip
    length.
    """
    steps = min(len(transitions), len(labels) - 1)
    if steps <= 0:
        return []

    nominal = get_settings().transitions.nominal_clip_seconds

    def clip_length(index: int) -> float:
        if clip_durations is not None and index < len(clip_durations):
            return float(clip_durations[index])
        return nominal

    segments = []
    current = labels[0]
    running_length = clip_length(0)

    for i in range(steps):
        transition = transitions[i]
        duration = transition.default_duration
        offset = max(0.0, running_length - duration)
        output = terminal_label if i == steps - 1 else f"{intermediate_prefix}{i}"

        segments.append(transition.render(current, labels[i + 1], output, offset=offset, duration=duration))

        running_length = offset + clip_length(i + 1)
        current = output

    return segments


def concat_graph(clip_count: int) -> str:
    """Zero-transition fallback: plain N-way concatenation."""
    return f"concat=n={clip_count}:v=1:a=0"


def build_graph(
    transition_ids: Sequence[str],
    clip_count: int,
    clip_durations: Optional[Sequence[float]] = None,
    catalog: Optional[TransitionCatalog] = None,
) -> str:
    """
    Compile a transition id sequence into one filter graph over raw inputs.

    - fewer than two clips: empty graph
    - unknown ids are dropped, the rest still render
    - nothing left after dropping: N-way concat
    """
    if clip_count < 2:
        return ""

    catalog = catalog or get_catalog()
    transitions = catalog.resolve(transition_ids)

    if not transitions:
        logger.debug(f"No usable transitions, concatenating {clip_count} clips")
        return concat_graph(clip_count)

    labels = [f"{i}:v" for i in range(clip_count)]
    segments = chain_transitions(labels, transitions, TERMINAL_LABEL, clip_durations)
    return SEGMENT_SEPARATOR.join(segments)
