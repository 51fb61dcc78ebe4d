"""
This module provides helpers for the external FFmpeg tools: checking that an
executable is installed and reporting its version.
"""
from typing import Optional

from loguru import logger

from ..domain.exceptions import ToolNotFoundException
from .process_runner import ProcessRunner

FFMPEG_INSTALL_HINT = (
    "To install FFmpeg:\n"
    "  macOS:          brew install ffmpeg\n"
    "  Ubuntu/Debian:  sudo apt-get install ffmpeg\n"
    "  Windows:        download from https://ffmpeg.org/download.html\n"
    "Or set 'paths.ffmpeg_dir' in config.user.yaml."
)


def verify_tool(executable: str, runner: Optional[ProcessRunner] = None) -> str:
    """
    Verifies that an FFmpeg-family tool is installed and can be executed.

    Runs `<tool> -version` and returns the first line of its output, which
    names the build.

    Args:
        executable: Name or path of the tool (e.g. "ffmpeg", "ffprobe").
        runner: The runner used to execute it.

    Returns:
        The first line of the version output.

    Raises:
        ToolNotFoundException: If the tool is missing or `-version` fails.
    """
    runner = runner or ProcessRunner()
    result = runner.run(executable, ["-version"])
    if not result.succeeded:
        logger.error(f"'{executable} -version' failed (return code {result.exit_code}):\n{result.stderr_tail()}")
        raise ToolNotFoundException(executable)

    lines = result.stdout.splitlines()
    version_line = lines[0] if lines else executable
    logger.info(f"{executable} version check successful: {version_line}")
    return version_line
