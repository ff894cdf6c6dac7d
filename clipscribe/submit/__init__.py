"""
clipscribe.submit - Remote transcription service client.

Pipeline Stages 2 and 3: upload the extracted audio as a new video
resource, then request its transcription.
"""

from __future__ import annotations

from clipscribe.submit.client import RemoteSubmissionClient

__all__ = ["RemoteSubmissionClient"]
