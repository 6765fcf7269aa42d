"""
Tests for the transition catalog.
"""

import json
from dataclasses import FrozenInstanceError

import pytest

from autolens_video.exceptions import CatalogError
from autolens_video.transitions import (
    Easing,
    Transition,
    TransitionCatalog,
    TransitionCategory,
    VehicleStyle,
    format_seconds,
    get_catalog,
    load_catalog,
)


def _entry(transition_id, **overrides):
    data = {
        "id": transition_id,
        "name": transition_id.title(),
        "category": "fade",
        "filter": "[{first}][{second}]xfade=transition=fade:duration={duration}:offset={offset}[{output}]",
        "duration": 1,
        "easing": "linear",
        "suitable_for": "any",
    }
    data.update(overrides)
    return data


class TestShippedCatalog:
    """The packaged transitions.json."""

    def test_loads_all_entries(self):
        catalog = get_catalog()
        assert len(catalog) == 16
        assert "fade_black" in catalog
        assert "radial_wipe" in catalog

    def test_get_catalog_is_cached(self):
        assert get_catalog() is get_catalog()

    def test_ids_are_unique(self):
        ids = get_catalog().ids
        assert len(ids) == len(set(ids))

    def test_get_by_id(self):
        fade = get_catalog().get_by_id("fade_black")
        assert fade.display_name == "Fade to Black"
        assert fade.category == TransitionCategory.FADE
        assert fade.default_duration == 1.0
        assert fade.easing == Easing.EASE_IN_OUT

    def test_get_by_id_unknown_returns_none(self):
        assert get_catalog().get_by_id("does_not_exist") is None

    def test_hard_cut_is_zero_length(self):
        cut = get_catalog().get_by_id("hard_cut")
        assert cut.is_cut
        assert cut.category == TransitionCategory.CUT

    def test_list_by_category(self):
        wipes = get_catalog().list_by_category("wipe")
        assert [t.id for t in wipes] == ["wipe_left", "wipe_right", "wipe_up", "wipe_down"]

    def test_list_by_unknown_category_is_empty(self):
        assert get_catalog().list_by_category("spin") == []

    def test_list_suitable_for_includes_any(self):
        eco = [t.id for t in get_catalog().list_suitable_for(VehicleStyle.ECO)]
        assert "crossfade" in eco
        assert "fade_white" in eco
        assert "dissolve" in eco
        assert "slide_left" not in eco

    def test_list_suitable_for_is_exact(self):
        """No substring matching on style tags."""
        ids = [t.id for t in get_catalog().list_suitable_for("sport")]
        assert ids == ["crossfade"]

    def test_entries_are_immutable(self):
        fade = get_catalog().get_by_id("fade_black")
        with pytest.raises(FrozenInstanceError):
            fade.default_duration = 5

    def test_total_duration_skips_unknown(self):
        total = get_catalog().total_duration(["fade_black", "nope", "wipe_left"])
        assert total == pytest.approx(1.6)


class TestRender:
    """Filling filter fragments."""

    def test_render_with_offset(self):
        fade = get_catalog().get_by_id("fade_black")
        assert fade.render("0:v", "1:v", "v", offset=9) == (
            "[0:v][1:v]xfade=transition=fade:duration=1:offset=9[v]"
        )

    def test_render_default_offset_uses_nominal_clip(self):
        slide = get_catalog().get_by_id("slide_left")
        assert "duration=0.8:offset=9.2" in slide.render("a", "b", "c")

    def test_render_cut_ignores_timing(self):
        cut = get_catalog().get_by_id("hard_cut")
        assert cut.render("a", "b", "out", offset=12) == "[a][b]concat=n=2:v=1:a=0[out]"

    def test_format_seconds(self):
        assert format_seconds(9.0) == "9"
        assert format_seconds(9.2000001) == "9.2"
        assert format_seconds(0) == "0"


class TestVehicleStyle:

    def test_parse_is_case_insensitive(self):
        assert VehicleStyle.parse(" Luxury ") == VehicleStyle.LUXURY

    def test_parse_unknown(self):
        assert VehicleStyle.parse("hovercraft") is None
        assert VehicleStyle.parse(None) is None


class TestLoadCatalog:
    """Loading custom catalog files."""

    def test_load_custom_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"transitions": [_entry("one"), _entry("two", category="wipe")]}))

        catalog = load_catalog(path)

        assert catalog.ids == ["one", "two"]
        assert isinstance(catalog.get_by_id("one"), Transition)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(tmp_path / "missing.json")

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"transitions": [_entry("bad", category="spin")]}))

        with pytest.raises(CatalogError) as exc_info:
            load_catalog(path)
        assert "Invalid transition catalog" in exc_info.value.user_message

    def test_duplicate_ids_rejected(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"transitions": [_entry("dup"), _entry("dup")]}))

        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_resolve_keeps_order(self):
        catalog = TransitionCatalog(Transition.from_dict(_entry(i)) for i in ("a", "b", "c"))
        assert [t.id for t in catalog.resolve(["c", "x", "a"])] == ["c", "a"]
