"""Tests for obs_cutter.utils.format_utils."""

import pytest

from obs_cutter.utils.format_utils import format_duration, formatted_size


class TestFormattedSize:
    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 B"),
            (-5, "0 B"),
            (512, "512 B"),
            (1536, "1.50 KB"),
            (2 * 1024 * 1024, "2 MB"),
            (3 * 1024 ** 3 + 512 * 1024 ** 2, "3.50 GB"),
        ],
    )
    def test_sizes(self, size, expected):
        assert formatted_size(size) == expected


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "0s"), (42.9, "42s"), (125, "2m 5s"), (3725, "1h 2m 5s"), (-3, "0s")],
    )
    def test_durations(self, seconds, expected):
        assert format_duration(seconds) == expected
