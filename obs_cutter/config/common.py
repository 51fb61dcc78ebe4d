"""
Common configuration settings used throughout the application.

This module centralizes the logging format, exit codes, process-output limits
and the loading of user-specific settings from an optional YAML file. The user
file lets people point the application at their own FFmpeg build without
touching the source code.
"""
import sys
from pathlib import Path
from typing import NamedTuple, Optional

import yaml
from loguru import logger

# --- User-Defined Path Configuration ---
# Settings can be overridden by a 'config.user.yaml' file at the project root
# (or any file passed with --config).

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

DEFAULT_FFMPEG = "ffmpeg"
DEFAULT_FFPROBE = "ffprobe"


class UserConfig(NamedTuple):
    """Values read from the user YAML file. Every field falls back to a built-in default."""

    ffmpeg: str = DEFAULT_FFMPEG
    ffprobe: str = DEFAULT_FFPROBE
    default_quality: Optional[str] = None


def _tool_in_dir(tool_dir: Path, name: str) -> str:
    exe_name = f"{name}.exe" if sys.platform == "win32" else name
    return str(tool_dir / exe_name)


def load_user_config(config_path: Path = USER_CONFIG_PATH) -> UserConfig:
    """
    Loads user overrides from a YAML file.

    Recognised keys:

        paths:
          ffmpeg_dir: /opt/ffmpeg/bin
        tools:
          ffmpeg: ffmpeg
          ffprobe: ffprobe
        defaults:
          quality: high

    An explicit `tools` entry wins over `paths.ffmpeg_dir`, which wins over the
    bare executable name (resolved through PATH at run time).

    Args:
        config_path: The YAML file to read.

    Returns:
        A `UserConfig`. A missing, unreadable or malformed file yields the defaults.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Relying on system PATH for executables.")
        return UserConfig()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return UserConfig()

    if not isinstance(user_config, dict):
        logger.warning(f"Ignoring '{config_path}': expected a mapping at the top level.")
        return UserConfig()

    paths_config = user_config.get("paths") or {}
    tools_config = user_config.get("tools") or {}
    defaults_config = user_config.get("defaults") or {}

    ffmpeg = DEFAULT_FFMPEG
    ffprobe = DEFAULT_FFPROBE
    ffmpeg_dir_str = paths_config.get("ffmpeg_dir")
    if ffmpeg_dir_str:
        ffmpeg_dir = Path(ffmpeg_dir_str)
        ffmpeg = _tool_in_dir(ffmpeg_dir, DEFAULT_FFMPEG)
        ffprobe = _tool_in_dir(ffmpeg_dir, DEFAULT_FFPROBE)

    ffmpeg = str(tools_config.get("ffmpeg") or ffmpeg)
    ffprobe = str(tools_config.get("ffprobe") or ffprobe)
    quality = defaults_config.get("quality")

    config = UserConfig(
        ffmpeg=ffmpeg,
        ffprobe=ffprobe,
        default_quality=str(quality) if quality else None,
    )
    logger.debug(f"Loaded user config from '{config_path}': {config}")
    return config


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR")


# --- Process Output ---

# How many trailing stderr lines are kept in error messages.
STDERR_TAIL_LINES = 20

# How long the runner waits between checks for timeout/cancellation (seconds).
PROCESS_POLL_INTERVAL = 0.1

# Grace period between terminate() and kill() for a cancelled child (seconds).
PROCESS_TERMINATE_GRACE = 5.0


# --- Exit Codes ---
EXIT_OK = 0
EXIT_ANALYSIS_FAILED = 1
EXIT_ENCODE_FAILED = 3
EXIT_CANCELLED = 130
