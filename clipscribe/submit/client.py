"""
clipscribe.submit.client - HTTP client for the transcription service.

Two one-shot calls, no retries:
- POST /videos                      multipart upload, returns {"video": {"id": ...}}
- POST /videos/{id}/transcription   JSON body {"prompt": ...}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from clipscribe.exceptions import SubmissionError
from clipscribe.media import AudioAsset

logger = logging.getLogger(__name__)


class RemoteSubmissionClient:
    """Async client for the video resource and transcription endpoints."""

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> RemoteSubmissionClient:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this client opened it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise SubmissionError("Client session is not open; use 'async with' first")
        return self._session

    async def create_resource(self, audio: AudioAsset) -> str:
        """Upload audio and create a video resource.

        Args:
            audio: Extracted audio payload

        Returns:
            Identifier of the created resource

        Raises:
            SubmissionError: On transport failure, non-success status, or a
                response without a video id
        """
        url = f"{self.base_url}/videos"
        form = aiohttp.FormData()
        form.add_field("file", audio.data, filename=audio.filename, content_type=audio.media_type)

        logger.debug("POST %s (%d bytes)", url, audio.size)

        try:
            async with self._get_session().post(url, data=form) as response:
                if not 200 <= response.status < 300:
                    body = await response.text()
                    raise SubmissionError(
                        f"Resource creation failed with status {response.status}: {body[:200]}",
                        status=response.status,
                    )
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise SubmissionError(
                        "Resource creation returned a non-JSON body",
                        status=response.status,
                    ) from e
        except SubmissionError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SubmissionError(f"Resource creation request failed: {e}") from e

        return _parse_resource_id(payload)

    async def request_transcription(self, resource_id: str, prompt: str | None = None) -> None:
        """Ask the service to transcribe a previously created resource.

        Args:
            resource_id: Identifier returned by create_resource
            prompt: Optional guidance text, sent as-is; omitted when None

        Raises:
            SubmissionError: On transport failure or non-success status
        """
        url = f"{self.base_url}/videos/{quote(resource_id, safe='')}/transcription"
        body: dict[str, str] = {}
        if prompt is not None:
            body["prompt"] = prompt

        logger.debug("POST %s", url)

        try:
            async with self._get_session().post(url, json=body) as response:
                if not 200 <= response.status < 300:
                    text = await response.text()
                    raise SubmissionError(
                        f"Transcription request failed with status {response.status}: {text[:200]}",
                        status=response.status,
                    )
        except SubmissionError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SubmissionError(f"Transcription request failed: {e}") from e


def _parse_resource_id(payload: Any) -> str:
    """Pull video.id out of a resource creation response."""
    if not isinstance(payload, dict):
        raise SubmissionError("Malformed resource creation response: expected a JSON object")

    video = payload.get("video")
    if not isinstance(video, dict):
        raise SubmissionError("Malformed resource creation response: missing 'video' object")

    resource_id = video.get("id")
    if not isinstance(resource_id, str) or not resource_id:
        raise SubmissionError("Malformed resource creation response: missing 'video.id'")

    return resource_id
