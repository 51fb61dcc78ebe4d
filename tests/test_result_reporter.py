"""Tests for obs_cutter.services.result_reporter."""

import time
from pathlib import Path

import yaml

from obs_cutter.domain.exceptions import EncodeProcessFailedException
from obs_cutter.domain.jobs import Side, SideOutcome
from obs_cutter.services.result_reporter import ResultReporter


def _result(left_error=None):
    if left_error is None:
        left = SideOutcome(Side.LEFT, Path("/out/v-left.mp4"), size_bytes=1536, elapsed_seconds=1.234)
    else:
        left = SideOutcome(Side.LEFT, Path("/out/v-left.mp4"), error=left_error, elapsed_seconds=0.5)
    right = SideOutcome(Side.RIGHT, Path("/out/v-right.mp4"), size_bytes=2 * 1024 * 1024)
    return ResultReporter.build(Path("/in/v.mp4"), left, right, ["odd geometry"], time.monotonic() - 2)


class TestBuild:
    def test_carries_outcomes_and_warnings(self):
        result = _result()
        assert result.succeeded
        assert result.warnings == ("odd geometry",)
        assert result.elapsed_seconds >= 2

    def test_without_start_time(self):
        left = SideOutcome(Side.LEFT, Path("l"), size_bytes=1)
        right = SideOutcome(Side.RIGHT, Path("r"), size_bytes=1)
        assert ResultReporter.build(Path("in"), left, right).elapsed_seconds == 0.0


class TestToDict:
    def test_success(self):
        data = ResultReporter.to_dict(_result())
        assert data["status"] == "completed"
        assert data["left"]["size"] == "1.50 KB"
        assert data["right"]["size"] == "2 MB"
        assert data["left"]["elapsed_seconds"] == 1.23
        assert data["warnings"] == ["odd geometry"]

    def test_failed_side_has_error_details(self):
        error = EncodeProcessFailedException(Side.LEFT, 187, "Error while opening encoder")
        data = ResultReporter.to_dict(_result(error))
        assert data["status"] == "failed"
        assert data["left"]["status"] == "failed"
        assert data["left"]["error_type"] == "EncodeProcessFailedException"
        assert data["left"]["exit_code"] == 187
        assert "size" not in data["left"]
        assert data["right"]["status"] == "completed"


class TestWriteSummary:
    def test_writes_yaml(self, tmp_path):
        path = ResultReporter.write_summary(_result(), tmp_path / "logs" / "summary.yaml")
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["input_path"] == str(Path("/in/v.mp4"))
        assert data["left"]["side"] == "left"
        assert data["right"]["size_bytes"] == 2 * 1024 * 1024
        assert "ended_datetime" in data
