"""
Media analysis: turning ffprobe output into a validated description of the
input's video geometry.

ffprobe reports one JSON object per stream, and the fields present depend on
the stream kind. Audio streams have no `width`/`height`, and malformed or
unusual files may omit them on video streams too, so every dimension is
treated as optional on every stream. Only a video stream that declares both
dimensions can be chosen.
"""
import json
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from pprint import pformat
from typing import Any, List, Optional, Sequence, Tuple

from loguru import logger

from ..config.common import DEFAULT_FFPROBE
from ..config.video import (
    EXPECTED_ASPECT_RATIO,
    EXPECTED_HEIGHT,
    EXPECTED_WIDTH,
    PROBE_SHOW_ENTRIES,
    PROBE_STREAM_SELECTOR,
)
from ..utils.process_runner import ProcessRunner
from .exceptions import (
    InputFileNotFoundException,
    MalformedProbeOutputException,
    NoVideoStreamFoundException,
    ProbeToolFailedException,
)


class CodecType(Enum):
    """The kind of an elementary stream. Anything that is not video or audio is OTHER."""

    VIDEO = "video"
    AUDIO = "audio"
    OTHER = "other"

    @classmethod
    def from_probe(cls, value: Any) -> "CodecType":
        if value == "video":
            return cls.VIDEO
        if value == "audio":
            return cls.AUDIO
        return cls.OTHER


@dataclass(frozen=True)
class StreamDescriptor:
    """One stream as reported by ffprobe."""

    index: int
    codec_type: CodecType
    width: Optional[int] = None
    height: Optional[int] = None
    codec_name: Optional[str] = None

    @property
    def has_dimensions(self) -> bool:
        return self.width is not None and self.height is not None

    @property
    def is_selectable_video(self) -> bool:
        return self.codec_type is CodecType.VIDEO and self.has_dimensions


@dataclass(frozen=True)
class MediaAnalysis:
    """
    The validated result of probing one input file.

    Attributes:
        path: The probed file.
        chosen_stream: The authoritative video stream (video, both dimensions present).
        streams: Every stream the probe reported, in probe order.
        warnings: Human-readable, non-fatal findings such as an unexpected aspect ratio.
        duration: Container duration in seconds, when the probe reported one.
    """

    path: Path
    chosen_stream: StreamDescriptor
    streams: Tuple[StreamDescriptor, ...] = ()
    warnings: Tuple[str, ...] = ()
    duration: Optional[float] = None

    def __post_init__(self):
        if not self.chosen_stream.is_selectable_video:
            raise ValueError(
                f"MediaAnalysis requires a video stream with both dimensions, got {self.chosen_stream}"
            )

    @property
    def width(self) -> int:
        return self.chosen_stream.width

    @property
    def height(self) -> int:
        return self.chosen_stream.height

    @property
    def aspect_ratio(self) -> str:
        return aspect_ratio(self.width, self.height)


def aspect_ratio(width: int, height: int) -> str:
    """Reduces width:height to lowest terms, e.g. 3840x1080 -> "32:9"."""
    divisor = math.gcd(width, height) or 1
    return f"{width // divisor}:{height // divisor}"


def _optional_dimension(value: Any) -> Optional[int]:
    # bool is an int subclass; never a dimension.
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _optional_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) and number > 0 else None


def parse_streams(raw_streams: Sequence[Any]) -> List[StreamDescriptor]:
    """
    Converts ffprobe stream objects into `StreamDescriptor`s, keeping probe order.

    Any of `index`, `codec_type`, `codec_name`, `width` and `height` may be
    missing. A stream without an `index` gets its position in the list.

    Raises:
        MalformedProbeOutputException: If an entry is not a JSON object.
    """
    streams: List[StreamDescriptor] = []
    for position, raw in enumerate(raw_streams):
        if not isinstance(raw, dict):
            raise MalformedProbeOutputException(
                f"Stream entry #{position} is a {type(raw).__name__}, expected an object"
            )
        index = raw.get("index")
        codec_name = raw.get("codec_name")
        streams.append(
            StreamDescriptor(
                index=index if isinstance(index, int) and not isinstance(index, bool) else position,
                codec_type=CodecType.from_probe(raw.get("codec_type")),
                width=_optional_dimension(raw.get("width")),
                height=_optional_dimension(raw.get("height")),
                codec_name=str(codec_name) if codec_name is not None else None,
            )
        )
    return streams


def parse_probe_output(stdout: str) -> Tuple[List[StreamDescriptor], Optional[float]]:
    """
    Parses ffprobe's JSON output into stream descriptors and the container duration.

    A response without a "streams" key is treated as having no streams.

    Raises:
        MalformedProbeOutputException: If the output is not JSON, or the
                                       top level / "streams" has the wrong shape.
    """
    try:
        data = json.loads(stdout)
    except (TypeError, ValueError) as e:
        raise MalformedProbeOutputException(f"ffprobe output is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedProbeOutputException(
            f"ffprobe output is a {type(data).__name__}, expected an object"
        )

    raw_streams = data.get("streams", [])
    if raw_streams is None:
        raw_streams = []
    if not isinstance(raw_streams, list):
        raise MalformedProbeOutputException(
            f"ffprobe 'streams' is a {type(raw_streams).__name__}, expected a list"
        )

    format_info = data.get("format")
    duration = None
    if isinstance(format_info, dict):
        duration = _optional_float(format_info.get("duration"))

    return parse_streams(raw_streams), duration


def select_video_stream(streams: Sequence[StreamDescriptor]) -> StreamDescriptor:
    """
    Returns the first video stream, in probe order, that declares both dimensions.

    Raises:
        NoVideoStreamFoundException: If no stream qualifies.
    """
    for stream in streams:
        if stream.is_selectable_video:
            return stream

    kinds = ", ".join(f"#{s.index}:{s.codec_type.value}" for s in streams) or "none"
    raise NoVideoStreamFoundException(
        f"No video stream with width and height found (streams reported: {kinds})"
    )


def dimension_warnings(width: int, height: int) -> List[str]:
    """Returns a warning when the geometry differs from the expected 32:9 canvas."""
    if (width, height) == (EXPECTED_WIDTH, EXPECTED_HEIGHT):
        return []
    return [
        f"Video dimensions are {width}x{height} ({aspect_ratio(width, height)}); "
        f"expected {EXPECTED_WIDTH}x{EXPECTED_HEIGHT} ({EXPECTED_ASPECT_RATIO}). "
        "The output might not be as expected."
    ]


class MediaProber:
    """
    Analyzes an input file with ffprobe.

    The prober is cheap to construct and keeps no state between calls.
    """

    def __init__(self, runner: Optional[ProcessRunner] = None, ffprobe: str = DEFAULT_FFPROBE):
        self.runner = runner or ProcessRunner()
        self.ffprobe = ffprobe

    def build_probe_args(self, path: Path) -> List[str]:
        return [
            "-v", "error",
            "-select_streams", PROBE_STREAM_SELECTOR,
            "-show_entries", PROBE_SHOW_ENTRIES,
            "-of", "json",
            str(path),
        ]

    def analyze(self, path: Path) -> MediaAnalysis:
        """
        Probes `path` and returns its validated video geometry.

        A geometry other than 3840x1080 is not an error: it is recorded as a
        warning and the split proceeds at the midpoint.

        Raises:
            InputFileNotFoundException: If `path` does not exist.
            ToolNotFoundException: If ffprobe cannot be located.
            SpawnFailedException: If ffprobe cannot be launched.
            ProbeToolFailedException: If ffprobe exits with a non-zero code.
            MalformedProbeOutputException: If the output cannot be parsed.
            NoVideoStreamFoundException: If no usable video stream exists.
        """
        path = Path(path)
        if not path.is_file():
            logger.error(f"Video file not found: {path}")
            raise InputFileNotFoundException(path)

        result = self.runner.run(self.ffprobe, self.build_probe_args(path))
        if not result.succeeded:
            logger.error(f"ffprobe failed for {path.name} (exit code {result.exit_code}).")
            raise ProbeToolFailedException(path, result.exit_code, result.stderr_tail())

        streams, duration = parse_probe_output(result.stdout)
        logger.debug(f"Streams reported for {path.name}:\n{pformat(streams)}")

        chosen = select_video_stream(streams)
        warnings = dimension_warnings(chosen.width, chosen.height)
        for warning in warnings:
            logger.warning(warning)
        if chosen.width % 2:
            logger.warning(
                f"Odd width {chosen.width}: the right half gets the extra column "
                f"({chosen.width // 2} + {chosen.width - chosen.width // 2})."
            )

        analysis = MediaAnalysis(
            path=path,
            chosen_stream=chosen,
            streams=tuple(streams),
            warnings=tuple(warnings),
            duration=duration,
        )
        logger.info(
            f"Video analyzed: {analysis.width}x{analysis.height} ({analysis.aspect_ratio}), "
            f"stream #{chosen.index}"
        )
        return analysis
