"""Tests for obs_cutter.services.encoding_planner."""

import pytest

from obs_cutter.domain.exceptions import UnknownPresetException
from obs_cutter.domain.jobs import EncodeParameters
from obs_cutter.services.encoding_planner import QualityPreset, preset_names, resolve


class TestResolve:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("lossless", EncodeParameters("libx264", 0, "veryslow")),
            ("high", EncodeParameters("libx264", 18, "slow")),
            ("medium", EncodeParameters("libx264", 23, "medium")),
        ],
    )
    def test_known_presets(self, name, expected):
        assert resolve(name) == expected

    @pytest.mark.parametrize("name", ["High", "", "ultra", "LOSSLESS", " high"])
    def test_unknown_presets_raise(self, name):
        with pytest.raises(UnknownPresetException) as exc_info:
            resolve(name)
        assert exc_info.value.preset_name == name
        assert exc_info.value.valid_names == ("lossless", "high", "medium")

    def test_error_lists_valid_names(self):
        with pytest.raises(UnknownPresetException, match="lossless, high, medium"):
            resolve("ultra")


class TestPresetNames:
    def test_declaration_order(self):
        assert preset_names() == ("lossless", "high", "medium")

    def test_matches_enum(self):
        assert {preset.value for preset in QualityPreset} == set(preset_names())
