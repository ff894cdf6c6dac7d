"""
clipscribe.validation - Dependency checks.

Validates the environment before a pipeline run.
"""

from __future__ import annotations

import shutil
import subprocess

from clipscribe.exceptions import DependencyError
from clipscribe.transcode.engine import FFMPEG_INSTALL_HINT


def check_ffmpeg(binary: str = "ffmpeg") -> dict[str, str]:
    """Check if FFmpeg is installed and get its version.

    Args:
        binary: FFmpeg executable name or path

    Returns:
        Dict with 'ffmpeg_path' and 'ffmpeg_version'

    Raises:
        DependencyError: If FFmpeg is not found
    """
    ffmpeg_path = shutil.which(binary)
    if not ffmpeg_path:
        raise DependencyError("ffmpeg", f"'{binary}' not found in PATH", FFMPEG_INSTALL_HINT)

    result = {"ffmpeg_path": ffmpeg_path}

    try:
        proc = subprocess.run(
            [ffmpeg_path, "-version"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        version_line = proc.stdout.split("\n")[0]
        result["ffmpeg_version"] = version_line.split()[2] if version_line else "unknown"
    except (subprocess.TimeoutExpired, IndexError):
        result["ffmpeg_version"] = "unknown"

    return result
