"""
Parsing of FFmpeg's stderr progress output.

FFmpeg prints a "Duration:" line while opening the input and then periodic
status lines such as

    frame= 1234 fps= 45 q=28.0 size=  18234kB time=00:00:45.67 bitrate=3265.5kbits/s speed=1.23x

`FfmpegProgressParser` turns those lines into `EncodingProgress` values. The
values only feed progress notifications; nothing in the split depends on them.
"""
import re
from dataclasses import dataclass
from typing import Optional

DURATION_REGEX = re.compile(r"Duration:\s*(\d{2}):(\d{2}):(\d{2})\.(\d+)")
TIME_REGEX = re.compile(r"time=\s*(\d{2}):(\d{2}):(\d{2})\.(\d+)")
FRAME_REGEX = re.compile(r"frame=\s*(\d+)")
FPS_REGEX = re.compile(r"fps=\s*([\d.]+)")
SPEED_REGEX = re.compile(r"speed=\s*([\d.]+)x")


@dataclass(frozen=True)
class EncodingProgress:
    current_time_secs: float = 0.0
    total_duration_secs: float = 0.0
    current_frame: int = 0
    fps: float = 0.0
    speed: float = 0.0
    percentage: float = 0.0

    def eta_secs(self) -> Optional[float]:
        """Estimated seconds remaining, or None while speed or duration is unknown."""
        if self.speed <= 0 or self.total_duration_secs <= 0:
            return None
        remaining = self.total_duration_secs - self.current_time_secs
        if remaining <= 0:
            return 0.0
        return remaining / self.speed

    def eta_string(self) -> str:
        secs = self.eta_secs()
        if secs is None:
            return "calculating..."
        if secs < 60:
            return f"~{int(secs)}s"
        if secs < 3600:
            return f"~{int(secs // 60)}:{int(secs % 60):02}"
        return f"~{int(secs // 3600)}h {int((secs % 3600) // 60):02}m"


def _to_seconds(hours: str, minutes: str, seconds: str, fraction: str) -> float:
    # Only centiseconds are significant; ffmpeg prints 2 digits, some builds 3.
    centis = int(fraction[:2].ljust(2, "0"))
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds) + centis / 100


def parse_duration(line: str) -> Optional[float]:
    """Extracts the input duration from a "Duration: HH:MM:SS.cc" line."""
    match = DURATION_REGEX.search(line)
    if not match:
        return None
    return _to_seconds(*match.groups())


def parse_progress_line(line: str, total_duration: float) -> Optional[EncodingProgress]:
    """Parses one status line. Lines without a "time=" field are not progress lines."""
    time_match = TIME_REGEX.search(line)
    if not time_match:
        return None
    current_time = _to_seconds(*time_match.groups())

    frame_match = FRAME_REGEX.search(line)
    fps_match = FPS_REGEX.search(line)
    speed_match = SPEED_REGEX.search(line)

    percentage = 0.0
    if total_duration > 0:
        percentage = min(current_time / total_duration * 100, 100.0)

    return EncodingProgress(
        current_time_secs=current_time,
        total_duration_secs=total_duration,
        current_frame=int(frame_match.group(1)) if frame_match else 0,
        fps=_safe_float(fps_match.group(1)) if fps_match else 0.0,
        speed=_safe_float(speed_match.group(1)) if speed_match else 0.0,
        percentage=percentage,
    )


def _safe_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


class FfmpegProgressParser:
    """Stateful parser: remembers the duration announced before the status lines start."""

    def __init__(self, total_duration: Optional[float] = None):
        self.total_duration = total_duration or 0.0
        self.duration_found = bool(total_duration)

    def parse_line(self, line: str) -> Optional[EncodingProgress]:
        if not self.duration_found:
            duration = parse_duration(line)
            if duration is not None:
                self.total_duration = duration
                self.duration_found = True
        return parse_progress_line(line, self.total_duration)
