"""
clipscribe.pipeline - Upload pipeline state machine and orchestrator.

Sequences extraction → upload → transcription request for one video
at a time, reporting each stage through PipelineStatus.
"""

from __future__ import annotations

from clipscribe.pipeline.orchestrator import PipelineResult, UploadPipeline
from clipscribe.pipeline.state import STATUS_MESSAGES, PipelineEvent, PipelineStatus, transition

__all__ = [
    "STATUS_MESSAGES",
    "PipelineEvent",
    "PipelineResult",
    "PipelineStatus",
    "UploadPipeline",
    "transition",
]
