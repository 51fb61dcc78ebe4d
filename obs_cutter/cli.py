"""
Command-Line Interface (CLI) setup for OBS-Cutter.

This module uses Python's `argparse` to define the command-line arguments,
runs one split and renders the final result as log lines. The return value of
`run()` is the process exit code.
"""
import argparse
import threading
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from .config.common import (
    EXIT_ANALYSIS_FAILED,
    EXIT_CANCELLED,
    EXIT_ENCODE_FAILED,
    EXIT_OK,
    LOG_LEVELS,
    USER_CONFIG_PATH,
    load_user_config,
)
from .config.video import DEFAULT_QUALITY
from .domain.exceptions import ObsCutterException, SplitCancelledException, ToolNotFoundException
from .domain.jobs import Side, SplitResult
from .pipeline.split_pipeline import STAGE_ANALYZING, STAGE_ENCODING, SplitOrchestrator, SplitProgress
from .services.encoding_planner import preset_names
from .services.result_reporter import ResultReporter
from .utils.ffmpeg_utils import FFMPEG_INSTALL_HINT, verify_tool
from .utils.format_utils import format_duration, formatted_size
from .utils.process_runner import ProcessRunner

# Progress is logged once per step of this many percent, per side.
PROGRESS_LOG_STEP = 10


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for OBS-Cutter.

    Args:
        argv: Argument list to parse; `sys.argv[1:]` when None.

    Returns:
        argparse.Namespace: The parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        prog="obs-cutter",
        description="Split a 32:9 dual-monitor OBS recording into two 16:9 videos.",
    )
    parser.add_argument("input", type=Path, help="The ultra-wide video file to split.")
    parser.add_argument(
        "--format", type=str, default=None,
        help="Output container extension (e.g. mp4, mkv). Defaults to the input's extension."
    )
    parser.add_argument(
        "--quality", type=str, default=None, choices=preset_names(),
        help=f"Encoding quality preset. Defaults to the config file value, then '{DEFAULT_QUALITY}'."
    )
    parser.add_argument(
        "--output", type=Path, default=None,
        help="Directory for the two output files. Defaults to the input's directory."
    )
    parser.add_argument(
        "--sequential", action="store_true",
        help="Encode the left side, then the right side, instead of both at once."
    )
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="Kill an encode that runs longer than this many seconds."
    )
    parser.add_argument(
        "--summary", type=Path, default=None,
        help="Write a YAML summary of the run to this file."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=LOG_LEVELS,
        help="Set the logging level."
    )
    parser.add_argument(
        "--config", type=Path, default=USER_CONFIG_PATH,
        help="User configuration file (YAML)."
    )

    args = parser.parse_args(argv)

    if args.timeout is not None and args.timeout <= 0:
        parser.error(f"--timeout must be positive, got {args.timeout:g}")

    return args


class ProgressLogger:
    """Turns orchestrator notifications into throttled log lines."""

    def __init__(self, step: int = PROGRESS_LOG_STEP):
        self.step = step
        self._last_logged: Dict[Side, int] = {}
        self._lock = threading.Lock()

    def __call__(self, progress: SplitProgress):
        if progress.stage == STAGE_ANALYZING:
            logger.info("Analyzing video...")
            return
        if progress.stage != STAGE_ENCODING or progress.encoding is None:
            return

        encoding = progress.encoding
        bucket = int(encoding.percentage // self.step) * self.step
        with self._lock:
            if bucket <= self._last_logged.get(progress.side, -1):
                return
            self._last_logged[progress.side] = bucket
        logger.info(
            f"[{progress.side}] {encoding.percentage:5.1f}% | frame {encoding.current_frame} "
            f"| {encoding.fps:.1f} fps | {encoding.speed:.2f}x | ETA {encoding.eta_string()}"
        )


def render_result(result: SplitResult):
    """Logs the final outcome of a split, one line per side."""
    for warning in result.warnings:
        logger.warning(warning)

    for outcome in result.sides:
        label = str(outcome.side).capitalize()
        if outcome.succeeded:
            logger.success(f"{label}:  {outcome.output_path} ({formatted_size(outcome.size_bytes)})")
        else:
            logger.error(f"{label}:  FAILED - {outcome.error}")

    logger.info(f"Total time: {format_duration(result.elapsed_seconds)}")


def run(args: argparse.Namespace) -> int:
    """
    Runs one split as described by `args`.

    Returns:
        The exit code: 0 on full success, 1 when analysis or planning failed,
        3 when at least one encode failed and 130 when cancelled.
    """
    config = load_user_config(args.config)
    quality = args.quality or config.default_quality or DEFAULT_QUALITY

    runner = ProcessRunner()
    orchestrator = SplitOrchestrator(
        runner=runner,
        ffmpeg=config.ffmpeg,
        ffprobe=config.ffprobe,
        parallel=not args.sequential,
        timeout=args.timeout,
        progress_callback=ProgressLogger(),
    )

    try:
        verify_tool(config.ffmpeg, runner)
        result = orchestrator.split(
            args.input,
            format_override=args.format,
            preset_name=quality,
            output_dir=args.output,
        )
    except SplitCancelledException as e:
        logger.warning(str(e))
        return EXIT_CANCELLED
    except ToolNotFoundException as e:
        logger.error(str(e))
        logger.info(FFMPEG_INSTALL_HINT)
        return EXIT_ANALYSIS_FAILED
    except ObsCutterException as e:
        logger.error(f"{type(e).__name__}: {e}")
        return EXIT_ANALYSIS_FAILED

    render_result(result)

    if args.summary:
        try:
            ResultReporter.write_summary(result, args.summary)
        except OSError as e:
            logger.error(f"Failed to write summary to {args.summary}: {e}")

    return EXIT_OK if result.succeeded else EXIT_ENCODE_FAILED
