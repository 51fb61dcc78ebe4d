"""
Data models for one split run: the crop geometry, the encode jobs handed to
FFmpeg and the per-side outcomes collected afterwards.

Jobs are immutable once built. A `SplitResult` is only created after both
sides have resolved, successfully or not.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import ffmpeg

from ..config.video import (
    AUDIO_COPY_CODEC,
    AUDIO_STREAM_SELECTOR,
    LEFT_SUFFIX,
    RIGHT_SUFFIX,
    VIDEO_STREAM_SELECTOR,
)
from .exceptions import ObsCutterException


class Side(Enum):
    LEFT = LEFT_SUFFIX
    RIGHT = RIGHT_SUFFIX

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EncodeParameters:
    """Concrete video encoder settings for one quality preset."""

    encoder: str
    crf: int
    preset: str


@dataclass(frozen=True)
class CropRegion:
    """A full-height crop: the y offset is always 0."""

    x_offset: int
    width: int
    height: int

    @property
    def filter(self) -> str:
        return f"crop={self.width}:{self.height}:{self.x_offset}:0"


@dataclass(frozen=True)
class EncodeJob:
    """
    One crop-and-encode unit for a single side.

    The first video stream is cropped and re-encoded with `params`; every
    audio stream (if any) is copied unchanged.
    """

    side: Side
    input_path: Path
    output_path: Path
    crop: CropRegion
    params: EncodeParameters

    def build_args(self) -> List[str]:
        """
        Builds the FFmpeg argument list (without the executable).

        Example for the left half of a 3840x1080 input:
            -i in.mp4 -map 0:v:0 -map 0:a? -c:a copy -c:v libx264 -crf 18
            -preset slow -vf crop=1920:1080:0:0 in-left.mp4 -hide_banner -nostdin -y

        Without explicit maps FFmpeg keeps a single audio stream, which would
        drop the extra tracks of a multi-track recording.
        """
        output_kwargs = {
            "vf": self.crop.filter,
            "c:v": self.params.encoder,
            "crf": self.params.crf,
            "preset": self.params.preset,
            "c:a": AUDIO_COPY_CODEC,
        }
        source = ffmpeg.input(str(self.input_path))
        stream = (
            ffmpeg.output(
                source[VIDEO_STREAM_SELECTOR],
                source[AUDIO_STREAM_SELECTOR],
                str(self.output_path),
                **output_kwargs,
            )
            .global_args("-hide_banner", "-nostdin")
            .overwrite_output()
        )
        return stream.get_args()


@dataclass(frozen=True)
class SideOutcome:
    """
    How one side ended. Exactly one of `size_bytes` (success) and `error` (failure) is set.
    """

    side: Side
    output_path: Path
    size_bytes: Optional[int] = None
    error: Optional[ObsCutterException] = None
    elapsed_seconds: float = 0.0

    def __post_init__(self):
        if (self.size_bytes is None) == (self.error is None):
            raise ValueError("SideOutcome needs exactly one of size_bytes or error")

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SplitResult:
    """The final outcome of splitting one input into its left and right halves."""

    input_path: Path
    left: SideOutcome
    right: SideOutcome
    warnings: Tuple[str, ...] = ()
    elapsed_seconds: float = 0.0

    @property
    def sides(self) -> Tuple[SideOutcome, SideOutcome]:
        return self.left, self.right

    @property
    def succeeded(self) -> bool:
        return self.left.succeeded and self.right.succeeded

    @property
    def failed_sides(self) -> List[SideOutcome]:
        return [outcome for outcome in self.sides if not outcome.succeeded]

    @property
    def outputs(self) -> Dict[Side, Path]:
        """Paths of the outputs that were actually produced."""
        return {outcome.side: outcome.output_path for outcome in self.sides if outcome.succeeded}
