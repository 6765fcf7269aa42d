"""
Transition selection policies.

Picks an ordered transition sequence for a vehicle style or a set of scene
moods, and reports whether a sequence fits the clips it will join.
All tables here are plain data; the functions only look them up.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from .transitions import Transition, TransitionCatalog, VehicleStyle, get_catalog

# Seconds a clip must run beyond the transition that leaves it
SAFETY_MARGIN_SECONDS = 1.0


# =============================================================================
# Style sequences
# =============================================================================

STYLE_SEQUENCES: Mapping[VehicleStyle, Tuple[str, str]] = MappingProxyType({
    VehicleStyle.LUXURY: ("fade_black", "crossfade"),
    VehicleStyle.SPORTY: ("slide_left", "zoom_in"),
    VehicleStyle.FAMILY: ("crossfade", "fade_black"),
    VehicleStyle.ADVENTURE: ("slide_up", "wipe_right"),
    VehicleStyle.ECO: ("fade_white", "dissolve"),
})

# Unknown styles get the family sequence
FALLBACK_STYLE = VehicleStyle.FAMILY

# Pacing overrides
SPORT_ENERGETIC_SEQUENCE = ("slide_left", "zoom_in")
ENERGETIC_SEQUENCE = ("wipe_left", "slide_right")
SMOOTH_SEQUENCE = ("fade_black", "crossfade")

ENERGETIC_MOODS = ("exciting", "dynamic")
ELEGANT_MOODS = ("elegant", "sophisticated")


class TransitionPreset(str, Enum):
    SMOOTH = "smooth"
    DYNAMIC = "dynamic"
    ELEGANT = "elegant"
    ENERGETIC = "energetic"
    MODERN = "modern"
    CLASSIC = "classic"


TRANSITION_PRESETS: Mapping[TransitionPreset, Tuple[str, str]] = MappingProxyType({
    TransitionPreset.SMOOTH: ("crossfade", "fade_black"),
    TransitionPreset.DYNAMIC: ("slide_left", "zoom_in"),
    TransitionPreset.ELEGANT: ("fade_black", "radial_wipe"),
    TransitionPreset.ENERGETIC: ("wipe_left", "slide_right"),
    TransitionPreset.MODERN: ("fade_white", "dissolve"),
    TransitionPreset.CLASSIC: ("crossfade", "fade_black"),
})


def get_transition_presets() -> Mapping[str, Tuple[str, str]]:
    """Preset name -> transition id pair, keyed by plain strings."""
    return MappingProxyType({preset.value: ids for preset, ids in TRANSITION_PRESETS.items()})


def _sequence_ids(style: Union[str, VehicleStyle, None]) -> Tuple[str, str]:
    key = VehicleStyle.parse(style)
    if key is None:
        key = FALLBACK_STYLE
    return STYLE_SEQUENCES[key]


def recommended_sequence(
    style: Union[str, VehicleStyle, None],
    catalog: Optional[TransitionCatalog] = None,
) -> List[Transition]:
    """
    Hand-curated two-transition sequence for a vehicle style.

    Unknown styles fall back to the family sequence.
    """
    catalog = catalog or get_catalog()
    return [catalog.get_by_id(transition_id) for transition_id in _sequence_ids(style)]


def _mentions(moods: Sequence[str], keywords: Sequence[str]) -> bool:
    return any(keyword in mood for mood in moods for keyword in keywords)


def optimize_for_pacing(
    style: Union[str, VehicleStyle],
    scene_moods: Sequence[str],
    catalog: Optional[TransitionCatalog] = None,
) -> List[str]:
    """
    Choose transition ids from the scene moods, first match wins:

    1. exciting/dynamic mood -> quick cuts (sport pair for sport styles)
    2. elegant/sophisticated mood -> smooth pair
    3. otherwise the style's recommended sequence
    """
    style_text = (style.value if isinstance(style, VehicleStyle) else style or "").lower()
    moods = [mood.lower() for mood in scene_moods]

    if _mentions(moods, ENERGETIC_MOODS):
        if "sport" in style_text:
            return list(SPORT_ENERGETIC_SEQUENCE)
        return list(ENERGETIC_SEQUENCE)

    if _mentions(moods, ELEGANT_MOODS):
        return list(SMOOTH_SEQUENCE)

    return [t.id for t in recommended_sequence(style_text, catalog)]


# =============================================================================
# Validation
# =============================================================================

@dataclass
class SequenceValidation:
    """Diagnostics for a transition sequence; check `is_valid` explicitly."""
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": list(self.errors)}


def validate_sequence(
    transition_ids: Sequence[str],
    clip_durations: Sequence[float],
    catalog: Optional[TransitionCatalog] = None,
) -> SequenceValidation:
    """
    Check a sequence against the clips it joins. Never raises.

    Errors accumulate for a count mismatch, for each unknown id, and for each
    clip shorter than its outgoing transition plus a one-second margin.
    """
    catalog = catalog or get_catalog()
    result = SequenceValidation()

    if len(transition_ids) != len(clip_durations) - 1:
        result.errors.append("Number of transitions must be one less than number of clips")

    for index, transition_id in enumerate(transition_ids):
        transition = catalog.get_by_id(transition_id)
        if transition is None:
            result.errors.append(f"Invalid transition ID: {transition_id}")
            continue

        if index >= len(clip_durations):
            continue
        if clip_durations[index] < transition.default_duration + SAFETY_MARGIN_SECONDS:
            result.errors.append(
                f"Clip {index + 1} is too short for transition {transition.display_name}"
            )

    return result
