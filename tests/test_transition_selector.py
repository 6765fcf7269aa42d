"""
Tests for transition selection and sequence validation.
"""

import pytest

from autolens_video.transition_selector import (
    STYLE_SEQUENCES,
    get_transition_presets,
    optimize_for_pacing,
    recommended_sequence,
    validate_sequence,
)
from autolens_video.transitions import VehicleStyle, get_catalog


class TestRecommendedSequence:

    @pytest.mark.parametrize("style", [s.value for s in VehicleStyle])
    def test_known_styles_have_two_resolvable_transitions(self, style):
        sequence = recommended_sequence(style)
        assert len(sequence) == 2
        for transition in sequence:
            assert get_catalog().get_by_id(transition.id) is transition

    @pytest.mark.parametrize("style", ["hovercraft", "", None, "SPORT"])
    def test_unknown_styles_fall_back_to_family(self, style):
        assert recommended_sequence(style) == recommended_sequence("family")

    def test_luxury_sequence(self):
        assert [t.id for t in recommended_sequence("luxury")] == ["fade_black", "crossfade"]

    def test_every_style_has_a_sequence(self):
        assert set(STYLE_SEQUENCES) == set(VehicleStyle)


class TestOptimizeForPacing:

    def test_exciting_sport(self):
        assert optimize_for_pacing("sporty", ["exciting acceleration"]) == ["slide_left", "zoom_in"]

    def test_dynamic_non_sport(self):
        assert optimize_for_pacing("family", ["calm", "Dynamic turn"]) == ["wipe_left", "slide_right"]

    def test_elegant(self):
        assert optimize_for_pacing("luxury", ["sophisticated interior"]) == ["fade_black", "crossfade"]

    def test_energy_wins_over_elegance(self):
        moods = ["elegant", "exciting"]
        assert optimize_for_pacing("eco", moods) == ["wipe_left", "slide_right"]

    def test_no_mood_match_uses_style(self):
        assert optimize_for_pacing("adventure", ["calm"]) == ["slide_up", "wipe_right"]

    def test_no_moods_unknown_style(self):
        assert optimize_for_pacing("spaceship", []) == ["crossfade", "fade_black"]


class TestPresets:

    def test_smooth_preset_resolves(self):
        for transition_id in get_transition_presets()["smooth"]:
            assert get_catalog().get_by_id(transition_id) is not None

    def test_all_presets_resolve(self):
        for ids in get_transition_presets().values():
            assert all(i in get_catalog() for i in ids)

    def test_presets_are_read_only(self):
        with pytest.raises(TypeError):
            get_transition_presets()["smooth"] = ("hard_cut",)


class TestValidateSequence:

    def test_valid_sequence(self):
        result = validate_sequence(["fade_black", "wipe_left"], [5, 5, 5])
        assert result.is_valid
        assert result.errors == []

    def test_exact_margin_is_valid(self):
        assert validate_sequence(["fade_black"], [2.0, 3.0]).is_valid

    def test_count_mismatch(self):
        result = validate_sequence(["fade_black"], [5, 5, 5])
        assert not result.is_valid
        assert "Number of transitions must be one less than number of clips" in result.errors

    def test_unknown_id(self):
        result = validate_sequence(["fade_black", "spin"], [5, 5, 5])
        assert result.errors == ["Invalid transition ID: spin"]

    def test_clip_too_short(self):
        result = validate_sequence(["fade_black"], [1.5, 5])
        assert result.errors == ["Clip 1 is too short for transition Fade to Black"]

    def test_errors_accumulate(self):
        result = validate_sequence(["spin", "fade_black", "crossfade"], [5, 0.5, 5])
        assert not result.is_valid
        assert len(result.errors) == 3

    def test_to_dict(self):
        assert validate_sequence([], [3]).to_dict() == {"is_valid": True, "errors": []}
