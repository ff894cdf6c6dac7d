"""
clipscribe.transcode.transcoder - Video to MP3 audio extraction.

Writes the video into the engine's input slot, runs a fixed FFmpeg
argument list that keeps only the audio stream, and reads back the
encoded MP3 from the output slot. Both slots are emptied afterwards.
"""

from __future__ import annotations

import logging

from clipscribe.exceptions import TranscodeError
from clipscribe.media import AudioAsset, VideoAsset
from clipscribe.transcode.engine import EngineHandle

logger = logging.getLogger(__name__)

INPUT_NAME = "input.mp4"
OUTPUT_NAME = "output.mp3"

EXTRACT_ARGS: tuple[str, ...] = (
    "-i",
    INPUT_NAME,
    "-map",
    "0:a",
    "-b:a",
    AudioAsset.bitrate,
    "-acodec",
    AudioAsset.codec,
    OUTPUT_NAME,
)


class MediaTranscoder:
    """Extracts the audio track of a video through a shared engine handle."""

    def __init__(self, handle: EngineHandle) -> None:
        self.handle = handle

    async def extract_audio(self, video: VideoAsset) -> AudioAsset:
        """Extract a low-bitrate MP3 track from a video.

        Args:
            video: Source video payload

        Returns:
            AudioAsset with the encoded MP3 bytes

        Raises:
            TranscodeError: If the engine cannot load, the input cannot be
                decoded, or no audio output is produced
        """
        logger.debug("Extracting audio from %s (%d bytes)", video.filename, video.size)

        try:
            async with self.handle.session() as engine:
                try:
                    await engine.write_file(INPUT_NAME, video.data)
                    await engine.exec(list(EXTRACT_ARGS))
                    data = await engine.read_file(OUTPUT_NAME)
                finally:
                    # Slots hold copies of the user's media and must not outlive the call
                    await engine.delete_file(INPUT_NAME)
                    await engine.delete_file(OUTPUT_NAME)
        except TranscodeError:
            raise
        except Exception as e:
            raise TranscodeError(f"Audio extraction failed: {e}") from e

        if not data:
            raise TranscodeError(f"No audio track extracted from {video.filename}")

        logger.debug("Extracted %d bytes of audio from %s", len(data), video.filename)
        return AudioAsset(data=data)
