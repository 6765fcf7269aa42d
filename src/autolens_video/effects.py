"""
Per-clip visual effects (color, enhancement, motion).

Effects are single-input filter expressions applied to each normalized clip
before transitions run. The table is immutable; unknown ids are dropped when
building a chain, the same way unknown transitions are.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .ffmpeg_utils import build_filter_chain
from .logger import logger


class EffectCategory(str, Enum):
    TRANSITION = "transition"
    FILTER = "filter"
    ENHANCEMENT = "enhancement"
    MOTION = "motion"


ALL_SCENES = "all"


@dataclass(frozen=True)
class VideoEffect:
    id: str
    name: str
    description: str
    category: EffectCategory
    filter_expr: str
    applicable_scenes: str = ALL_SCENES
    duration: Optional[float] = None
    parameters: Mapping[str, float] = field(default_factory=dict)
    # False for effects that retime frames or write side files; the xfade
    # offsets assume every clip keeps its own length
    per_clip: bool = True


VIDEO_EFFECTS: Tuple[VideoEffect, ...] = (
    # Transition-style effects on a single clip
    VideoEffect("fade_in_out", "Fade In/Out", "Smooth fade transition between scenes",
                EffectCategory.TRANSITION, "fade=t=in:st=0:d=1,fade=t=out:st=9:d=1", duration=1),
    VideoEffect("crossfade", "Crossfade", "Blend transition between two video clips",
                EffectCategory.TRANSITION, "xfade=transition=fade:duration=1:offset=9", duration=1),
    VideoEffect("slide_left", "Slide Left", "Slide transition moving left",
                EffectCategory.TRANSITION, "xfade=transition=slideleft:duration=0.8:offset=9.2", duration=0.8),
    VideoEffect("slide_right", "Slide Right", "Slide transition moving right",
                EffectCategory.TRANSITION, "xfade=transition=slideright:duration=0.8:offset=9.2", duration=0.8),
    VideoEffect("zoom_in", "Zoom In", "Zoom in transition effect",
                EffectCategory.TRANSITION, "xfade=transition=smoothleft:duration=1:offset=9",
                applicable_scenes="exterior", duration=1),

    # Color filters
    VideoEffect("color_enhance", "Color Enhancement", "Enhance colors and saturation",
                EffectCategory.FILTER, "eq=contrast=1.2:brightness=0.05:saturation=1.3"),
    VideoEffect("cinematic_color", "Cinematic Color", "Professional cinematic color grading",
                EffectCategory.FILTER, "curves=vintage"),
    VideoEffect("warm_tone", "Warm Tone", "Add warm, golden tones",
                EffectCategory.FILTER, "colorbalance=rs=0.3:gs=0.1:bs=-0.2", applicable_scenes="exterior"),
    VideoEffect("cool_tone", "Cool Tone", "Add cool, modern tones",
                EffectCategory.FILTER, "colorbalance=rs=-0.2:gs=0.1:bs=0.3", applicable_scenes="interior"),
    VideoEffect("high_contrast", "High Contrast", "Increase contrast for dramatic effect",
                EffectCategory.FILTER, "eq=contrast=1.5:brightness=0.1"),

    # Enhancement
    VideoEffect("sharpen", "Sharpen", "Enhance image sharpness",
                EffectCategory.ENHANCEMENT, "unsharp=5:5:1.0:5:5:0.0"),
    VideoEffect("stabilize", "Stabilization", "Reduce camera shake",
                EffectCategory.ENHANCEMENT,
                "vidstabdetect=stepsize=6:shakiness=8:accuracy=15:result=transforms.trf",
                applicable_scenes="driving", per_clip=False),
    VideoEffect("noise_reduce", "Noise Reduction", "Reduce video noise",
                EffectCategory.ENHANCEMENT, "hqdn3d=4:3:6:4.5"),

    # Motion
    VideoEffect("slow_motion", "Slow Motion", "Slow down video for dramatic effect",
                EffectCategory.MOTION, "setpts=2.0*PTS", applicable_scenes="exterior",
                parameters=MappingProxyType({"speed": 0.5}), per_clip=False),
    VideoEffect("speed_ramp", "Speed Ramp", "Variable speed effect",
                EffectCategory.MOTION, "setpts=if(lt(T,2),2*PTS,if(lt(T,8),PTS,0.5*PTS))",
                applicable_scenes="driving", per_clip=False),
    VideoEffect("motion_blur", "Motion Blur", "Add motion blur for speed effect",
                EffectCategory.MOTION, "minterpolate=fps=60:mi_mode=mci:mc_mode=aobmc",
                applicable_scenes="driving"),
)

_EFFECT_INDEX: Mapping[str, VideoEffect] = MappingProxyType({e.id: e for e in VIDEO_EFFECTS})

EFFECT_PRESETS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "luxury": ("color_enhance", "warm_tone", "cinematic_color", "sharpen"),
    "sporty": ("color_enhance", "high_contrast", "cool_tone", "sharpen"),
    "family": ("color_enhance", "warm_tone", "sharpen"),
    "adventure": ("color_enhance", "high_contrast", "stabilize", "sharpen"),
    "eco": ("color_enhance", "cool_tone", "sharpen"),
    "classic": ("color_enhance", "warm_tone", "cinematic_color"),
})


def get_effect(effect_id: str) -> Optional[VideoEffect]:
    return _EFFECT_INDEX.get(effect_id)


def effects_by_category(category: str) -> List[VideoEffect]:
    return [e for e in VIDEO_EFFECTS if e.category.value == category]


def applicable_effects(scene_type: str) -> List[VideoEffect]:
    return [e for e in VIDEO_EFFECTS if e.applicable_scenes in (ALL_SCENES, scene_type)]


def build_effect_chain(effect_ids: Sequence[str]) -> str:
    """Join the filter expressions of known effects with ','."""
    filters = []
    for effect_id in effect_ids:
        effect = _EFFECT_INDEX.get(effect_id)
        if effect is None:
            logger.debug(f"Skipping unknown effect '{effect_id}'")
            continue
        filters.append(effect.filter_expr)
    return build_filter_chain(filters)


def build_clip_effect_chain(effect_ids: Sequence[str]) -> str:
    """
    Like build_effect_chain, but only effects that keep a clip's length.

    Transition-category effects blend two streams. Retiming effects
    (slow motion, speed ramp) would desync the xfade offsets, and
    stabilization writes a shared analysis file, so all of them are
    dropped here.
    """
    single_input = []
    for effect_id in effect_ids:
        effect = _EFFECT_INDEX.get(effect_id)
        if effect is not None and effect.category == EffectCategory.TRANSITION:
            logger.debug(f"Effect '{effect_id}' needs two streams, not applied per clip")
            continue
        if effect is not None and not effect.per_clip:
            logger.warning(f"Effect '{effect_id}' cannot run inside a per-clip chain, skipped")
            continue
        single_input.append(effect_id)
    return build_effect_chain(single_input)


def recommended_effects(vehicle_type: str, scene_type: str) -> List[VideoEffect]:
    """
    Base look for every video plus vehicle- and scene-specific additions.
    """
    vehicle = vehicle_type.lower()
    scene = scene_type.lower()

    ids = ["color_enhance", "sharpen"]

    if "luxury" in vehicle:
        ids += ["warm_tone", "cinematic_color"]
    elif "sport" in vehicle:
        ids += ["high_contrast", "cool_tone"]
    elif "electric" in vehicle or "hybrid" in vehicle:
        ids.append("cool_tone")

    if "driving" in scene:
        ids += ["stabilize", "motion_blur"]

    return [_EFFECT_INDEX[i] for i in ids]


def get_effect_presets() -> Dict[str, List[str]]:
    return {name: list(ids) for name, ids in EFFECT_PRESETS.items()}
