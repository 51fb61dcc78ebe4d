"""
The split pipeline: analyze the input, plan the two crops and run both encodes.

The left and right encodes are independent (disjoint outputs, read-only
input), so they run as two concurrent FFmpeg processes by default. A failure
on one side never stops the other; the `SplitResult` reports each side on its
own. Analysis and planning errors are raised before any encode is spawned.
"""
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Tuple

from loguru import logger

from ..config.common import DEFAULT_FFMPEG, DEFAULT_FFPROBE
from ..config.video import DEFAULT_QUALITY, FALLBACK_EXTENSION, LEFT_SUFFIX, RIGHT_SUFFIX
from ..domain.exceptions import (
    EncodeProcessFailedException,
    InvalidDimensionsException,
    InvalidOutputFormatException,
    ObsCutterException,
    OutputDirectoryException,
    OutputMissingAfterSuccessException,
    OutputPathCollisionException,
    ProcessCancelledException,
    ProcessRunnerException,
    SplitCancelledException,
)
from ..domain.jobs import CropRegion, EncodeJob, EncodeParameters, Side, SideOutcome, SplitResult
from ..domain.media import MediaProber
from ..services.encoding_planner import resolve
from ..services.result_reporter import ResultReporter
from ..utils.format_utils import formatted_size
from ..utils.process_runner import ProcessRunner
from ..utils.progress import EncodingProgress, FfmpegProgressParser

STAGE_ANALYZING = "analyzing"
STAGE_ENCODING = "encoding"
STAGE_SIDE_FINISHED = "side_finished"


@dataclass(frozen=True)
class SplitProgress:
    """A progress notification. `encoding` is set for FFmpeg status updates, `outcome` when a side finishes."""

    stage: str
    side: Optional[Side] = None
    encoding: Optional[EncodingProgress] = None
    outcome: Optional[SideOutcome] = None


ProgressCallback = Callable[[SplitProgress], None]

# (mtime_ns, size) of a file, or None when it does not exist.
FileSignature = Optional[Tuple[int, int]]


def file_signature(path: Path) -> FileSignature:
    try:
        stat = path.stat()
    except OSError:
        return None
    return stat.st_mtime_ns, stat.st_size


def compute_crops(width: int, height: int) -> Tuple[CropRegion, CropRegion]:
    """
    Splits a frame at its horizontal midpoint.

    For an odd width the right half absorbs the extra column, e.g. 3841 -> 1920 + 1921.
    The two widths always sum to `width`.

    Raises:
        InvalidDimensionsException: If the frame is narrower than 2 pixels or has no height.
    """
    if width < 2 or height < 1:
        raise InvalidDimensionsException(width, height)
    half = width // 2
    left = CropRegion(x_offset=0, width=half, height=height)
    right = CropRegion(x_offset=half, width=width - half, height=height)
    return left, right


def derive_output_paths(
    input_path: Path,
    format_override: Optional[str] = None,
    output_dir: Optional[Path] = None,
) -> Tuple[Path, Path]:
    """
    Computes "{stem}-left.{ext}" and "{stem}-right.{ext}".

    `ext` is `format_override` (a leading dot is ignored) or the input's own
    extension. The directory is `output_dir` or the input's directory.

    Raises:
        InvalidOutputFormatException: If `format_override` contains a path separator.
    """
    input_path = Path(input_path)
    if format_override and any(sep and sep in format_override for sep in (os.sep, os.altsep)):
        raise InvalidOutputFormatException(format_override)
    ext = (format_override or input_path.suffix).lstrip(".") or FALLBACK_EXTENSION
    directory = Path(output_dir) if output_dir else input_path.parent
    stem = input_path.stem
    return (
        directory / f"{stem}-{LEFT_SUFFIX}.{ext}",
        directory / f"{stem}-{RIGHT_SUFFIX}.{ext}",
    )


def _comparable(path: Path) -> str:
    return os.path.normcase(str(Path(path).resolve()))


def check_output_paths(input_path: Path, left_path: Path, right_path: Path):
    """
    Rejects output paths that would overwrite the input or each other.

    Raises:
        OutputPathCollisionException: On any collision.
    """
    source = _comparable(input_path)
    left = _comparable(left_path)
    right = _comparable(right_path)
    if left == source or right == source:
        raise OutputPathCollisionException(f"An output path would overwrite the input file {input_path}")
    if left == right:
        raise OutputPathCollisionException(f"Left and right outputs resolve to the same file {left_path}")


def build_jobs(
    input_path: Path,
    paths: Tuple[Path, Path],
    crops: Tuple[CropRegion, CropRegion],
    params: EncodeParameters,
) -> Tuple[EncodeJob, EncodeJob]:
    left_path, right_path = paths
    left_crop, right_crop = crops
    return (
        EncodeJob(Side.LEFT, Path(input_path), left_path, left_crop, params),
        EncodeJob(Side.RIGHT, Path(input_path), right_path, right_crop, params),
    )


class SplitOrchestrator:
    """
    Splits one ultra-wide recording into two 16:9 halves.

    The orchestrator keeps no state between `split()` calls, so the same
    instance can be reused for several inputs.

    Args:
        runner: Process runner shared by the probe and both encodes.
        prober: Media prober; built from `runner` and `ffprobe` when omitted.
        ffmpeg: FFmpeg executable name or path.
        ffprobe: FFprobe executable name or path.
        parallel: Run both encodes at the same time (default) or one after the other.
        timeout: Per-encode timeout in seconds; None waits forever.
        progress_callback: Receives `SplitProgress` notifications, possibly from
                           worker threads. Its exceptions are logged and ignored.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        prober: Optional[MediaProber] = None,
        ffmpeg: str = DEFAULT_FFMPEG,
        ffprobe: str = DEFAULT_FFPROBE,
        parallel: bool = True,
        timeout: Optional[float] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.runner = runner or ProcessRunner()
        self.prober = prober or MediaProber(self.runner, ffprobe=ffprobe)
        self.ffmpeg = ffmpeg
        self.parallel = parallel
        self.timeout = timeout
        self.progress_callback = progress_callback

    def split(
        self,
        input_path: Path,
        format_override: Optional[str] = None,
        preset_name: str = DEFAULT_QUALITY,
        output_dir: Optional[Path] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SplitResult:
        """
        Runs the whole split for `input_path`.

        Returns:
            A `SplitResult` describing both sides, including failed ones.

        Raises:
            UnknownPresetException: Before anything else happens.
            ProbeException / ToolNotFoundException / SpawnFailedException: From the analysis.
            InvalidOutputFormatException, OutputPathCollisionException,
            InvalidDimensionsException, OutputDirectoryException: While planning.
            SplitCancelledException: If the run was cancelled; outputs this run wrote are removed.
        """
        started_at = time.monotonic()
        input_path = Path(input_path)
        params = resolve(preset_name)

        self._notify(SplitProgress(STAGE_ANALYZING))
        analysis = self.prober.analyze(input_path)

        crops = compute_crops(analysis.width, analysis.height)
        paths = derive_output_paths(input_path, format_override, output_dir)
        check_output_paths(input_path, *paths)
        self.runner.locate(self.ffmpeg)
        self._ensure_output_dir(paths[0].parent)

        jobs = build_jobs(input_path, paths, crops, params)
        logger.info(
            f"Splitting {input_path.name} ({analysis.width}x{analysis.height}) with "
            f"{params.encoder} crf={params.crf} preset={params.preset}"
        )

        cancel_event = cancel_event or threading.Event()
        # Output signatures taken right before each side's encode was spawned.
        spawned: Dict[Side, FileSignature] = {}
        try:
            left, right = self._execute(jobs, analysis.duration, cancel_event, spawned)
        except (KeyboardInterrupt, ProcessCancelledException):
            cancel_event.set()
            self._discard_outputs(jobs, spawned)
            logger.warning(f"Split of {input_path.name} cancelled; partial outputs removed.")
            raise SplitCancelledException(f"Split of {input_path} was cancelled") from None

        result = ResultReporter.build(input_path, left, right, analysis.warnings, started_at)
        if result.succeeded:
            logger.success(f"Split complete: {formatted_size(left.size_bytes)} | {formatted_size(right.size_bytes)}")
        else:
            failed = ", ".join(str(outcome.side) for outcome in result.failed_sides)
            logger.error(f"Split of {input_path.name} finished with failures on: {failed}")
        return result

    def _ensure_output_dir(self, directory: Path):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryException(f"Failed to create output directory {directory}: {e}") from e

    def _execute(
        self,
        jobs: Sequence[EncodeJob],
        duration: Optional[float],
        cancel_event: threading.Event,
        spawned: Dict[Side, FileSignature],
    ) -> Tuple[SideOutcome, SideOutcome]:
        if not self.parallel:
            left, right = (self._run_job(job, duration, cancel_event, spawned) for job in jobs)
            return left, right

        executor = ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="encode")
        try:
            futures = [executor.submit(self._run_job, job, duration, cancel_event, spawned) for job in jobs]
            left, right = (future.result() for future in futures)
            return left, right
        except BaseException:
            # Stop the sibling before waiting for the pool to drain.
            cancel_event.set()
            raise
        finally:
            executor.shutdown(wait=True)

    def _run_job(
        self,
        job: EncodeJob,
        duration: Optional[float],
        cancel_event: threading.Event,
        spawned: Dict[Side, FileSignature],
    ) -> SideOutcome:
        if cancel_event.is_set():
            raise ProcessCancelledException(self.ffmpeg)

        started = time.monotonic()
        parser = FfmpegProgressParser(duration)

        def on_stderr_line(line: str):
            progress = parser.parse_line(line)
            if progress is not None:
                self._notify(SplitProgress(STAGE_ENCODING, side=job.side, encoding=progress))

        self._notify(SplitProgress(STAGE_ENCODING, side=job.side))
        logger.info(f"Extracting {job.side} video -> {job.output_path.name} ({job.crop.filter})")

        error: Optional[ObsCutterException] = None
        size_bytes: Optional[int] = None
        spawned[job.side] = file_signature(job.output_path)
        try:
            result = self.runner.run(
                self.ffmpeg,
                job.build_args(),
                timeout=self.timeout,
                on_stderr_line=on_stderr_line,
                cancel_event=cancel_event,
            )
        except ProcessCancelledException:
            raise
        except ProcessRunnerException as e:
            error = e
        else:
            if not result.succeeded:
                error = EncodeProcessFailedException(job.side, result.exit_code, result.stderr_tail())
            else:
                try:
                    size_bytes = job.output_path.stat().st_size
                except OSError as e:
                    error = OutputMissingAfterSuccessException(job.side, job.output_path, e.strerror)

        elapsed = time.monotonic() - started
        if error is not None:
            logger.error(f"{job.side.value.capitalize()} side failed after {elapsed:.1f}s: {error}")
            self._discard_output(job.output_path, spawned[job.side])
            outcome = SideOutcome(job.side, job.output_path, error=error, elapsed_seconds=elapsed)
        else:
            logger.info(f"{job.side.value.capitalize()} side done in {elapsed:.1f}s: {job.output_path} ({formatted_size(size_bytes)})")
            outcome = SideOutcome(job.side, job.output_path, size_bytes=size_bytes, elapsed_seconds=elapsed)

        self._notify(SplitProgress(STAGE_SIDE_FINISHED, side=job.side, outcome=outcome))
        return outcome

    def _discard_outputs(self, jobs: Sequence[EncodeJob], spawned: Dict[Side, FileSignature]):
        for job in jobs:
            if job.side in spawned:
                self._discard_output(job.output_path, spawned[job.side])

    @staticmethod
    def _discard_output(path: Path, before: FileSignature):
        """Removes `path` only if it was created or modified since `before` was taken."""
        current = file_signature(path)
        if current is None:
            return
        if current == before:
            logger.debug(f"Keeping {path}: it was not written by this run")
            return
        try:
            path.unlink()
            logger.debug(f"Removed incomplete output {path}")
        except OSError as e:
            logger.error(f"Could not remove incomplete output {path}: {e}")

    def _notify(self, progress: SplitProgress):
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(progress)
        except Exception as e:
            logger.warning(f"Progress callback raised {type(e).__name__}: {e}")
