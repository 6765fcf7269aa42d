"""
Transition catalog (config-first, loaded once, never mutated).

Features
- Ships with the transition table in `autolens_video/data/transitions.json`.
- The table is validated against a JSON schema when loaded.
- `get_catalog()` returns the process-wide read-only instance; tests and
  callers with their own table use `load_catalog(path)` and inject it.

Usage:
    from autolens_video.transitions import get_catalog

    catalog = get_catalog()
    fade = catalog.get_by_id("fade_black")
    graph_step = fade.render("v0", "v1", "final_video")
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from jsonschema import ValidationError, validate

from .config import get_settings
from .exceptions import CatalogError
from .logger import logger

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "transitions.json"

ANY_STYLE = "any"


class TransitionCategory(str, Enum):
    CUT = "cut"
    FADE = "fade"
    SLIDE = "slide"
    ZOOM = "zoom"
    WIPE = "wipe"
    DISSOLVE = "dissolve"


class Easing(str, Enum):
    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"


class VehicleStyle(str, Enum):
    LUXURY = "luxury"
    SPORTY = "sporty"
    FAMILY = "family"
    ADVENTURE = "adventure"
    ECO = "eco"

    @classmethod
    def parse(cls, value: Union[str, "VehicleStyle", None]) -> Optional["VehicleStyle"]:
        """Return the matching style, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# Validation schema
# ---------------------------------------------------------------------------

CATALOG_SCHEMA = {
    "type": "object",
    "required": ["transitions"],
    "properties": {
        "transitions": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "name", "category", "filter", "duration", "easing", "suitable_for"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "category": {"enum": [c.value for c in TransitionCategory]},
                    "filter": {"type": "string", "minLength": 1},
                    "duration": {"type": "number", "minimum": 0},
                    "easing": {"enum": [e.value for e in Easing]},
                    "suitable_for": {"enum": [ANY_STYLE] + [s.value for s in VehicleStyle]},
                },
            },
        },
    },
}


def format_seconds(value: float) -> str:
    """Render seconds for a filter argument: 9.0 -> '9', 9.2000001 -> '9.2'."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


@dataclass(frozen=True)
class Transition:
    """One catalog entry."""
    id: str
    display_name: str
    category: TransitionCategory
    filter_fragment: str
    default_duration: float
    easing: Easing
    suitable_for: str
    description: str = ""

    @property
    def is_cut(self) -> bool:
        """Cuts consume no time; their offset is irrelevant."""
        return self.default_duration == 0

    def render(
        self,
        first: str,
        second: str,
        output: str,
        offset: Optional[float] = None,
        duration: Optional[float] = None,
    ) -> str:
        """
        Fill the fragment with graph labels and timing.

        Labels are given without brackets. When no offset is supplied the
        transition starts `duration` seconds before the end of a clip of
        nominal length.
        """
        if duration is None:
            duration = self.default_duration
        if offset is None:
            offset = max(0.0, get_settings().transitions.nominal_clip_seconds - duration)
        return self.filter_fragment.format(
            first=first,
            second=second,
            output=output,
            duration=format_seconds(duration),
            offset=format_seconds(offset),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Transition":
        return cls(
            id=data["id"],
            display_name=data.get("name", data["id"]),
            category=TransitionCategory(data["category"]),
            filter_fragment=data["filter"],
            default_duration=float(data["duration"]),
            easing=Easing(data["easing"]),
            suitable_for=data["suitable_for"],
            description=data.get("description", ""),
        )


class TransitionCatalog:
    """Read-only, ordered collection of transitions."""

    def __init__(self, transitions: Iterable[Transition]):
        entries = tuple(transitions)
        index = {}
        for transition in entries:
            if transition.id in index:
                raise CatalogError(f"Duplicate transition id: {transition.id}")
            index[transition.id] = transition
        self._entries: Tuple[Transition, ...] = entries
        self._index: Mapping[str, Transition] = MappingProxyType(index)

    def __iter__(self) -> Iterator[Transition]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, transition_id: object) -> bool:
        return transition_id in self._index

    @property
    def ids(self) -> List[str]:
        return [t.id for t in self._entries]

    def get_by_id(self, transition_id: str) -> Optional[Transition]:
        return self._index.get(transition_id)

    def list_by_category(self, category: Union[str, TransitionCategory]) -> List[Transition]:
        try:
            wanted = TransitionCategory(category)
        except ValueError:
            return []
        return [t for t in self._entries if t.category == wanted]

    def list_suitable_for(self, style: Union[str, VehicleStyle]) -> List[Transition]:
        """Entries marked 'any' or exactly `style`; no fuzzy matching."""
        value = style.value if isinstance(style, VehicleStyle) else style
        return [t for t in self._entries if t.suitable_for in (ANY_STYLE, value)]

    def resolve(self, transition_ids: Sequence[str]) -> List[Transition]:
        """Look up ids in order, skipping the ones that are not in the catalog."""
        resolved = []
        for transition_id in transition_ids:
            transition = self._index.get(transition_id)
            if transition is None:
                logger.debug(f"Skipping unknown transition '{transition_id}'")
                continue
            resolved.append(transition)
        return resolved

    def total_duration(self, transition_ids: Sequence[str]) -> float:
        """Summed default duration of the resolvable ids."""
        return sum(t.default_duration for t in self.resolve(transition_ids))


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_catalog(path: Path) -> TransitionCatalog:
    """
    Build a catalog from a JSON file.

    Raises:
        CatalogError: the file is missing, not JSON, or fails validation
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Cannot read transition catalog {path}", technical_details=str(exc)) from exc

    try:
        validate(instance=data, schema=CATALOG_SCHEMA)
    except ValidationError as exc:
        raise CatalogError(f"Invalid transition catalog {path}", technical_details=exc.message) from exc

    return TransitionCatalog(Transition.from_dict(item) for item in data["transitions"])


@lru_cache(maxsize=1)
def get_catalog() -> TransitionCatalog:
    """Process-wide catalog, loaded on first use."""
    catalog = load_catalog(DEFAULT_CATALOG_PATH)
    logger.debug(f"Loaded {len(catalog)} transitions from {DEFAULT_CATALOG_PATH.name}")
    return catalog
