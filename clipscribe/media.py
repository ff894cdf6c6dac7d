"""
clipscribe.media - Media payloads flowing through the pipeline.

A VideoAsset is what the caller hands to the pipeline; an AudioAsset is
what the transcoder produces from it and what gets uploaded.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from clipscribe.exceptions import ValidationError

ACCEPTED_VIDEO_TYPES = frozenset({"video/mp4"})


@dataclass(frozen=True)
class VideoAsset:
    """Raw video payload selected by the user."""

    data: bytes = field(repr=False)
    media_type: str = "video/mp4"
    filename: str = "video.mp4"

    def __post_init__(self) -> None:
        if self.media_type not in ACCEPTED_VIDEO_TYPES:
            raise ValidationError(
                f"Unsupported media type '{self.media_type}' for {self.filename}. "
                f"Expected one of: {', '.join(sorted(ACCEPTED_VIDEO_TYPES))}"
            )

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path) -> VideoAsset:
        """Load a video file from disk.

        Args:
            path: Path to the video file

        Returns:
            VideoAsset with the file contents

        Raises:
            ValidationError: If the file is missing or not a supported video type
        """
        if not path.is_file():
            raise ValidationError(f"Video file not found: {path}")

        media_type, _ = mimetypes.guess_type(path.name)
        if media_type is None:
            raise ValidationError(f"Cannot determine media type of {path.name}")

        return cls(data=path.read_bytes(), media_type=media_type, filename=path.name)


@dataclass(frozen=True)
class AudioAsset:
    """Extracted audio payload, ready for upload."""

    media_type: ClassVar[str] = "audio/mpeg"
    filename: ClassVar[str] = "audio.mp3"
    bitrate: ClassVar[str] = "20k"
    codec: ClassVar[str] = "libmp3lame"

    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)
