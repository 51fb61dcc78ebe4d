"""Tests for obs_cutter.cli: argument parsing and exit codes."""

from pathlib import Path
from unittest.mock import patch

import pytest

from obs_cutter.cli import ProgressLogger, get_args, run
from obs_cutter.domain.exceptions import (
    EncodeProcessFailedException,
    NoVideoStreamFoundException,
    SplitCancelledException,
    ToolNotFoundException,
)
from obs_cutter.domain.jobs import Side, SideOutcome, SplitResult
from obs_cutter.pipeline.split_pipeline import STAGE_ENCODING, SplitProgress
from obs_cutter.utils.progress import EncodingProgress


def _result(left_ok=True):
    if left_ok:
        left = SideOutcome(Side.LEFT, Path("v-left.mp4"), size_bytes=100)
    else:
        left = SideOutcome(Side.LEFT, Path("v-left.mp4"), error=EncodeProcessFailedException(Side.LEFT, 1, "x"))
    right = SideOutcome(Side.RIGHT, Path("v-right.mp4"), size_bytes=100)
    return SplitResult(Path("v.mp4"), left, right)


@pytest.fixture
def no_config(tmp_path):
    return ["--config", str(tmp_path / "missing.yaml")]


@pytest.fixture
def mock_split():
    with patch("obs_cutter.cli.verify_tool", return_value="ffmpeg version test"), \
         patch("obs_cutter.cli.SplitOrchestrator") as mock_cls:
        yield mock_cls


class TestGetArgs:
    def test_defaults(self):
        args = get_args(["video.mp4"])
        assert args.input == Path("video.mp4")
        assert args.format is None
        assert args.quality is None
        assert args.output is None
        assert args.sequential is False
        assert args.timeout is None
        assert args.log_level == "INFO"

    def test_all_options(self, tmp_path):
        args = get_args([
            "video.mkv", "--format", "mp4", "--quality", "medium", "--output", str(tmp_path),
            "--sequential", "--timeout", "600", "--summary", "s.yaml", "--log-level", "DEBUG",
        ])
        assert args.quality == "medium"
        assert args.output == tmp_path
        assert args.sequential is True
        assert args.timeout == 600.0
        assert args.summary == Path("s.yaml")

    def test_unknown_quality_is_rejected(self):
        with pytest.raises(SystemExit):
            get_args(["video.mp4", "--quality", "ultra"])

    def test_non_positive_timeout_is_rejected(self):
        with pytest.raises(SystemExit):
            get_args(["video.mp4", "--timeout", "0"])


class TestRunExitCodes:
    def test_success(self, mock_split, no_config):
        mock_split.return_value.split.return_value = _result()
        assert run(get_args(["v.mp4"] + no_config)) == 0

    def test_options_are_forwarded(self, mock_split, no_config):
        mock_split.return_value.split.return_value = _result()
        run(get_args(["v.mp4", "--format", "mkv", "--quality", "high", "--sequential", "--timeout", "30"] + no_config))

        kwargs = mock_split.call_args.kwargs
        assert kwargs["parallel"] is False
        assert kwargs["timeout"] == 30.0
        mock_split.return_value.split.assert_called_once_with(
            Path("v.mp4"), format_override="mkv", preset_name="high", output_dir=None
        )

    def test_quality_defaults_to_config_then_lossless(self, mock_split, tmp_path):
        mock_split.return_value.split.return_value = _result()
        config = tmp_path / "config.user.yaml"
        config.write_text("defaults:\n  quality: medium\n", encoding="utf-8")
        run(get_args(["v.mp4", "--config", str(config)]))
        assert mock_split.return_value.split.call_args.kwargs["preset_name"] == "medium"

        run(get_args(["v.mp4", "--config", str(tmp_path / "missing.yaml")]))
        assert mock_split.return_value.split.call_args.kwargs["preset_name"] == "lossless"

    def test_encode_failure(self, mock_split, no_config):
        mock_split.return_value.split.return_value = _result(left_ok=False)
        assert run(get_args(["v.mp4"] + no_config)) == 3

    def test_analysis_failure(self, mock_split, no_config):
        mock_split.return_value.split.side_effect = NoVideoStreamFoundException("no video")
        assert run(get_args(["v.mp4"] + no_config)) == 1

    def test_cancelled(self, mock_split, no_config):
        mock_split.return_value.split.side_effect = SplitCancelledException("cancelled")
        assert run(get_args(["v.mp4"] + no_config)) == 130

    def test_missing_ffmpeg(self, no_config):
        with patch("obs_cutter.cli.verify_tool", side_effect=ToolNotFoundException("ffmpeg")), \
             patch("obs_cutter.cli.SplitOrchestrator") as mock_cls:
            assert run(get_args(["v.mp4"] + no_config)) == 1
        mock_cls.return_value.split.assert_not_called()

    def test_summary_is_written(self, mock_split, no_config, tmp_path):
        mock_split.return_value.split.return_value = _result()
        summary = tmp_path / "summary.yaml"
        assert run(get_args(["v.mp4", "--summary", str(summary)] + no_config)) == 0
        assert summary.is_file()


class TestProgressLogger:
    def _update(self, side, percentage):
        return SplitProgress(STAGE_ENCODING, side=side, encoding=EncodingProgress(percentage=percentage))

    def test_logs_once_per_step(self):
        progress_logger = ProgressLogger(step=10)
        with patch("obs_cutter.cli.logger") as mock_logger:
            for pct in (1.0, 5.0, 9.9, 10.0, 12.0, 25.0):
                progress_logger(self._update(Side.LEFT, pct))
        # 0%, 10% and 20% buckets.
        assert mock_logger.info.call_count == 3

    def test_sides_are_throttled_independently(self):
        progress_logger = ProgressLogger(step=10)
        with patch("obs_cutter.cli.logger") as mock_logger:
            progress_logger(self._update(Side.LEFT, 50.0))
            progress_logger(self._update(Side.RIGHT, 50.0))
        assert mock_logger.info.call_count == 2

    def test_ignores_updates_without_encoding(self):
        progress_logger = ProgressLogger()
        with patch("obs_cutter.cli.logger") as mock_logger:
            progress_logger(SplitProgress(STAGE_ENCODING, side=Side.LEFT))
        mock_logger.info.assert_not_called()
