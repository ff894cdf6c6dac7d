"""
clipscribe.utils - Shared utility functions.
"""

from __future__ import annotations


def format_size(size: float) -> str:
    """Format a byte count in human-readable form.

    Args:
        size: Size in bytes

    Returns:
        Formatted string, e.g. "1.5 MB"
    """
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
