"""
Utilities Package for OBS-Cutter.

Modules:
    - process_runner.py: Runs external tools with captured output, timeouts
      and cancellation.
    - ffmpeg_utils.py: Installation/version checks for FFmpeg tools.
    - progress.py: Parses FFmpeg's progress output.
    - format_utils.py: Human-readable sizes and durations.
"""
