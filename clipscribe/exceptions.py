"""
clipscribe.exceptions - Custom exception classes.

All Clipscribe-specific exceptions inherit from ClipscribeError.
"""

from __future__ import annotations


class ClipscribeError(Exception):
    """Base exception for all Clipscribe errors."""

    pass


class ConfigError(ClipscribeError):
    """Configuration loading or validation error."""

    pass


class ValidationError(ClipscribeError):
    """Input file or media type validation error."""

    pass


class TranscodeError(ClipscribeError):
    """Audio extraction engine failed to load, decode, or produce output."""

    pass


class SubmissionError(ClipscribeError):
    """Remote service returned a non-success or malformed response."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class PipelineStateError(ClipscribeError):
    """Invalid pipeline state transition."""

    pass


class PipelineBusyError(PipelineStateError):
    """Pipeline already has a run in progress or awaiting reset."""

    pass


class DependencyError(ClipscribeError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
