"""
This module contains helper functions for formatting data into human-readable strings.
They are used when rendering the split summary: output sizes and elapsed times.
"""

from typing import Union


def format_duration(seconds: Union[int, float]) -> str:
    """
    Formats a number of seconds as a short human-readable string.

    Examples: 42 -> "42s", 125 -> "2m 5s", 3725 -> "1h 2m 5s".
    """
    total_secs = max(0, int(seconds))
    hours, remainder = divmod(total_secs, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def formatted_size(size_bytes: int) -> str:
    """
    Converts a size in bytes to a human-readable string (e.g., B, KB, MB, GB, TB).

    For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    if size_bytes < 0:
        size_bytes = 0

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    factor = 1024.0

    if size_bytes == 0:
        return "0 B"

    for unit in units:
        if size_bytes < factor:
            if unit == "B":
                return f"{size_bytes} {unit}"
            # "2.00 MB" -> "2 MB"
            return f"{size_bytes:.2f} {unit}".replace(".00", "")
        size_bytes /= factor

    return f"{size_bytes:.2f} {units[-1]}".replace(".00", "")
