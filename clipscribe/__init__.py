"""
Clipscribe - video to transcription upload pipeline.

Takes a local video file and drives it through a three-stage pipeline:
audio extraction (FFmpeg) → upload to the transcription service →
transcription request, reporting each stage as it happens.
"""

__version__ = "0.1.0"
