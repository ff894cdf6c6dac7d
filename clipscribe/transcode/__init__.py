"""
clipscribe.transcode - Audio extraction from video payloads.

Pipeline Stage 1: Run FFmpeg against a shared scratch engine to turn
an MP4 video into a low-bitrate MP3 audio track.
"""

from __future__ import annotations

from clipscribe.transcode.engine import EngineHandle, FFmpegEngine, TranscodeEngine, shared_engine
from clipscribe.transcode.transcoder import EXTRACT_ARGS, INPUT_NAME, OUTPUT_NAME, MediaTranscoder

__all__ = [
    "EXTRACT_ARGS",
    "INPUT_NAME",
    "OUTPUT_NAME",
    "EngineHandle",
    "FFmpegEngine",
    "MediaTranscoder",
    "TranscodeEngine",
    "shared_engine",
]
