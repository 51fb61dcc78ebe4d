"""
Defines custom exception types for the OBS-Cutter application.

These exceptions give every failure a stage and enough context to reproduce it
(which tool, which side, the exit code and a bounded tail of the tool's
diagnostic output). Analysis and planning errors abort a run before any encode
process is spawned; encoding errors are recorded per side so that one failed
half never hides the other.

All custom exceptions inherit from the base `ObsCutterException`.
"""
from pathlib import Path
from typing import Optional


class ObsCutterException(Exception):
    """Base class for all custom exceptions in the OBS-Cutter application."""

    pass


# --- Process Execution Exceptions ---
class ProcessRunnerException(ObsCutterException):
    """Base class for failures to run an external tool at all."""

    pass


class ToolNotFoundException(ProcessRunnerException):
    """
    Raised when an external executable (ffmpeg, ffprobe) cannot be located.

    The executable was neither an existing path nor found on the system PATH.
    """

    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(
            f"Executable '{executable}' was not found. Install it or configure its location in config.user.yaml."
        )


class SpawnFailedException(ProcessRunnerException):
    """Raised when the OS refuses to launch an executable that does exist (permissions, bad format...)."""

    def __init__(self, executable: str, reason: str):
        self.executable = executable
        self.reason = reason
        super().__init__(f"Failed to launch '{executable}': {reason}")


class ProcessTimeoutException(ProcessRunnerException):
    """Raised when a child process exceeds the caller-supplied timeout and is killed."""

    def __init__(self, executable: str, timeout: float):
        self.executable = executable
        self.timeout = timeout
        super().__init__(f"'{executable}' did not finish within {timeout:g}s and was killed.")


class ProcessCancelledException(ProcessRunnerException):
    """Raised when a child process is terminated because the run was cancelled."""

    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(f"'{executable}' was terminated because the run was cancelled.")


# --- Media Analysis (Probe) Exceptions ---
class ProbeException(ObsCutterException):
    """
    Base class for exceptions raised while analyzing the input with ffprobe.

    Any of these is terminal for the current run; no partial analysis is returned.
    """

    pass


class InputFileNotFoundException(ProbeException):
    """Raised when the input video does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Video file not found: {path}")


class ProbeToolFailedException(ProbeException):
    """Raised when ffprobe runs but exits with a non-zero code (unreadable or corrupted input)."""

    def __init__(self, path: Path, exit_code: int, stderr_tail: str):
        self.path = path
        self.exit_code = exit_code
        self.stderr_tail = stderr_tail
        super().__init__(
            f"ffprobe failed on {path} (exit code {exit_code}):\n{stderr_tail}".rstrip()
        )


class MalformedProbeOutputException(ProbeException):
    """
    Raised when the structured ffprobe output cannot be parsed at all.

    Missing optional fields are not malformed; only output that is not JSON,
    or whose top-level shape is wrong, lands here.
    """

    pass


class NoVideoStreamFoundException(ProbeException):
    """
    Raised when the probe reports no video stream with both width and height.

    Audio-only files and files whose video stream lacks declared dimensions
    both end up here instead of crashing the parser.
    """

    pass


# --- Planning Exceptions ---
class PlanningException(ObsCutterException):
    """Base class for configuration errors detected before any encode process is spawned."""

    pass


class UnknownPresetException(PlanningException):
    """Raised when a quality preset name is not one of the recognised names."""

    def __init__(self, preset_name: str, valid_names: tuple):
        self.preset_name = preset_name
        self.valid_names = valid_names
        super().__init__(
            f"Invalid quality preset: '{preset_name}'. Valid options: {', '.join(valid_names)}"
        )


class OutputPathCollisionException(PlanningException):
    """Raised when a computed output path equals the input path or the other output path."""

    pass


class InvalidOutputFormatException(PlanningException):
    """Raised when the output format override is not a bare extension (e.g. contains a path separator)."""

    def __init__(self, format_override: str):
        self.format_override = format_override
        super().__init__(f"Invalid output format: '{format_override}'. Expected an extension such as 'mp4'.")


class InvalidDimensionsException(PlanningException):
    """Raised when the chosen video stream is too small to be split into two halves."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        super().__init__(f"Invalid video dimensions: {width}x{height}")


class OutputDirectoryException(PlanningException):
    """Raised when the output directory does not exist and cannot be created."""

    pass


# --- Encoding Specific Exceptions ---
class EncodingException(ObsCutterException):
    """
    Base class for per-side failures during the FFmpeg encoding stage.

    These are stored on the side's outcome rather than propagated, so the
    sibling job always runs to completion.
    """

    def __init__(self, side, message: str):
        self.side = side
        super().__init__(message)


class EncodeProcessFailedException(EncodingException):
    """Raised when ffmpeg exits with a non-zero code for one side."""

    def __init__(self, side, exit_code: int, stderr_tail: str):
        self.exit_code = exit_code
        self.stderr_tail = stderr_tail
        super().__init__(
            side,
            f"ffmpeg failed for the {side} side (exit code {exit_code}):\n{stderr_tail}".rstrip(),
        )


class OutputMissingAfterSuccessException(EncodingException):
    """
    Raised when ffmpeg reported success but the output file cannot be found.

    This means the external tool claimed success without producing a file.
    """

    def __init__(self, side, output_path: Path, reason: Optional[str] = None):
        self.output_path = output_path
        message = f"ffmpeg reported success for the {side} side, but {output_path} is missing"
        if reason:
            message += f" ({reason})"
        super().__init__(side, message)


class SplitCancelledException(ObsCutterException):
    """Raised when a split is aborted; in-flight processes were terminated and partial outputs removed."""

    pass
