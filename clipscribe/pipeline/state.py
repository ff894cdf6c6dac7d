"""
clipscribe.pipeline.state - Pipeline status and pure transition function.

    IDLE → CONVERTING → UPLOADING → TRANSCRIBING → SUCCEEDED
                 └──────────┴────────────┴──────→ FAILED

SUCCEEDED and FAILED only leave through RESET, which returns to IDLE.
"""

from __future__ import annotations

from enum import Enum

from clipscribe.exceptions import PipelineStateError


class PipelineStatus(Enum):
    IDLE = "idle"
    CONVERTING = "converting"
    UPLOADING = "uploading"
    TRANSCRIBING = "transcribing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES


class PipelineEvent(Enum):
    START = "start"
    STAGE_SUCCEEDED = "stage_succeeded"
    STAGE_FAILED = "stage_failed"
    RESET = "reset"


TERMINAL_STATUSES = frozenset({PipelineStatus.SUCCEEDED, PipelineStatus.FAILED})
ACTIVE_STATUSES = frozenset(
    {PipelineStatus.CONVERTING, PipelineStatus.UPLOADING, PipelineStatus.TRANSCRIBING}
)

STATUS_MESSAGES: dict[PipelineStatus, str] = {
    PipelineStatus.IDLE: "Upload video",
    PipelineStatus.CONVERTING: "Converting...",
    PipelineStatus.UPLOADING: "Uploading...",
    PipelineStatus.TRANSCRIBING: "Transcribing...",
    PipelineStatus.SUCCEEDED: "Success!",
    PipelineStatus.FAILED: "Failed",
}

_NEXT_STAGE: dict[PipelineStatus, PipelineStatus] = {
    PipelineStatus.CONVERTING: PipelineStatus.UPLOADING,
    PipelineStatus.UPLOADING: PipelineStatus.TRANSCRIBING,
    PipelineStatus.TRANSCRIBING: PipelineStatus.SUCCEEDED,
}


def transition(status: PipelineStatus, event: PipelineEvent) -> PipelineStatus:
    """Compute the status that follows an event.

    Args:
        status: Current pipeline status
        event: Event to apply

    Returns:
        The next status

    Raises:
        PipelineStateError: If the event is not allowed in the current status
    """
    if event is PipelineEvent.START and status is PipelineStatus.IDLE:
        return PipelineStatus.CONVERTING
    if event is PipelineEvent.STAGE_SUCCEEDED and status in _NEXT_STAGE:
        return _NEXT_STAGE[status]
    if event is PipelineEvent.STAGE_FAILED and status.is_active:
        return PipelineStatus.FAILED
    if event is PipelineEvent.RESET and status.is_terminal:
        return PipelineStatus.IDLE

    raise PipelineStateError(f"Cannot apply '{event.value}' while {status.value}")
