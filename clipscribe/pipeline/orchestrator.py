"""
clipscribe.pipeline.orchestrator - Runs one video through the pipeline.

Each stage awaits its engine or network call before the next one is
issued. Stage failures end the run in FAILED and are handed back in the
PipelineResult rather than raised; nothing already done remotely is
rolled back, so a resource can exist without a transcription request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from clipscribe.exceptions import ClipscribeError, PipelineBusyError, SubmissionError, TranscodeError
from clipscribe.media import AudioAsset, VideoAsset
from clipscribe.pipeline.state import PipelineEvent, PipelineStatus, transition

logger = logging.getLogger(__name__)

StatusCallback = Callable[[PipelineStatus], None]
CompleteCallback = Callable[[str], None]


class AudioExtractor(Protocol):
    async def extract_audio(self, video: VideoAsset) -> AudioAsset: ...


class SubmissionClient(Protocol):
    async def create_resource(self, audio: AudioAsset) -> str: ...

    async def request_transcription(self, resource_id: str, prompt: str | None = None) -> None: ...


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one run: a resource id on success, the stage error otherwise."""

    status: PipelineStatus
    resource_id: str | None = None
    error: ClipscribeError | None = None

    @property
    def ok(self) -> bool:
        return self.status is PipelineStatus.SUCCEEDED

    def unwrap(self) -> str:
        """Return the resource id, or raise the error that stopped the run."""
        if self.error is not None:
            raise self.error
        if self.resource_id is None:
            raise ClipscribeError(f"Pipeline finished without a resource id ({self.status.value})")
        return self.resource_id


class UploadPipeline:
    """Converts, uploads, and requests transcription for one video at a time.

    Args:
        transcoder: Produces an AudioAsset from a VideoAsset
        client: Creates the remote resource and requests its transcription
        on_status: Called with every new status, including the return to IDLE
        on_complete: Called once with the resource id when a run succeeds
    """

    def __init__(
        self,
        transcoder: AudioExtractor,
        client: SubmissionClient,
        on_status: StatusCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ) -> None:
        self.transcoder = transcoder
        self.client = client
        self.on_status = on_status
        self.on_complete = on_complete

        self._status = PipelineStatus.IDLE
        self._history: list[PipelineStatus] = [PipelineStatus.IDLE]
        self._video: VideoAsset | None = None
        self._prompt: str | None = None
        self._resource_id: str | None = None
        self._error: ClipscribeError | None = None
        self._notified = False

    @property
    def status(self) -> PipelineStatus:
        return self._status

    @property
    def history(self) -> list[PipelineStatus]:
        return list(self._history)

    @property
    def resource_id(self) -> str | None:
        return self._resource_id

    @property
    def error(self) -> ClipscribeError | None:
        return self._error

    def _apply(self, event: PipelineEvent) -> None:
        self._status = transition(self._status, event)
        self._history.append(self._status)
        logger.debug("Pipeline %s -> %s", event.value, self._status.value)
        if self.on_status:
            self.on_status(self._status)

    async def start(self, video: VideoAsset | None, prompt: str | None = None) -> PipelineResult | None:
        """Run the pipeline for a video.

        Args:
            video: Video to process; None leaves the pipeline untouched
            prompt: Optional transcription guidance, passed through unchanged

        Returns:
            PipelineResult for the run, or None if no video was given

        Raises:
            PipelineBusyError: If a run is in progress or awaiting reset()
        """
        if video is None:
            logger.debug("start() called without a video; ignoring")
            return None

        if self._status is not PipelineStatus.IDLE:
            raise PipelineBusyError(
                f"Pipeline is {self._status.value}; "
                + ("call reset() first" if self._status.is_terminal else "wait for it to finish")
            )

        self._video = video
        self._prompt = prompt
        self._apply(PipelineEvent.START)

        try:
            audio = await self.transcoder.extract_audio(video)
            self._video = None
            self._apply(PipelineEvent.STAGE_SUCCEEDED)

            resource_id = await self.client.create_resource(audio)
            self._resource_id = resource_id
            self._apply(PipelineEvent.STAGE_SUCCEEDED)

            await self.client.request_transcription(resource_id, self._prompt)
            self._apply(PipelineEvent.STAGE_SUCCEEDED)
        except (TranscodeError, SubmissionError) as e:
            return self._fail(e)
        except Exception:
            if self._status.is_active:
                self._apply(PipelineEvent.STAGE_FAILED)
            raise

        self._notify(resource_id)
        return PipelineResult(status=self._status, resource_id=resource_id)

    def _fail(self, error: ClipscribeError) -> PipelineResult:
        stage = self._status
        self._error = error
        self._apply(PipelineEvent.STAGE_FAILED)

        if self._resource_id is not None:
            logger.warning(
                "Transcription request failed; resource %s exists without a transcription: %s",
                self._resource_id,
                error,
            )
        else:
            logger.warning("Pipeline failed while %s: %s", stage.value, error)

        return PipelineResult(status=self._status, resource_id=self._resource_id, error=error)

    def _notify(self, resource_id: str) -> None:
        if self._notified:
            return
        self._notified = True
        if self.on_complete:
            self.on_complete(resource_id)

    def reset(self) -> None:
        """Return a finished pipeline to IDLE, clearing the previous run.

        Raises:
            PipelineStateError: If a run is still in progress or the pipeline is idle
        """
        self._apply(PipelineEvent.RESET)
        self._history = [PipelineStatus.IDLE]
        self._video = None
        self._prompt = None
        self._resource_id = None
        self._error = None
        self._notified = False
