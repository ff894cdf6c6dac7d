"""Tests for clipscribe.pipeline.orchestrator module."""

from __future__ import annotations

import asyncio

import pytest
from fakes import FakeClient, FakeEngine, FakeTranscoder

from clipscribe.exceptions import PipelineBusyError, PipelineStateError, SubmissionError, TranscodeError
from clipscribe.media import VideoAsset
from clipscribe.pipeline import PipelineResult, PipelineStatus, UploadPipeline
from clipscribe.transcode import EXTRACT_ARGS, EngineHandle, MediaTranscoder

S = PipelineStatus


def make_pipeline(
    transcoder: FakeTranscoder, client: FakeClient
) -> tuple[UploadPipeline, list[PipelineStatus], list[str]]:
    statuses: list[PipelineStatus] = []
    completed: list[str] = []
    pipeline = UploadPipeline(
        transcoder,
        client,
        on_status=statuses.append,
        on_complete=completed.append,
    )
    return pipeline, statuses, completed


class TestSuccessfulRun:
    def test_visits_stages_in_order(
        self, fake_transcoder: FakeTranscoder, fake_client: FakeClient, sample_video: VideoAsset
    ) -> None:
        pipeline, statuses, _ = make_pipeline(fake_transcoder, fake_client)

        result = asyncio.run(pipeline.start(sample_video))

        assert result is not None and result.ok
        assert pipeline.history == [S.IDLE, S.CONVERTING, S.UPLOADING, S.TRANSCRIBING, S.SUCCEEDED]
        assert statuses == [S.CONVERTING, S.UPLOADING, S.TRANSCRIBING, S.SUCCEEDED]

    def test_notifies_resource_id_once(
        self, fake_transcoder: FakeTranscoder, sample_video: VideoAsset
    ) -> None:
        client = FakeClient(resource_id="abc123")
        pipeline, _, completed = make_pipeline(fake_transcoder, client)

        result = asyncio.run(pipeline.start(sample_video))

        assert completed == ["abc123"]
        assert result == PipelineResult(status=S.SUCCEEDED, resource_id="abc123")
        assert result.unwrap() == "abc123"
        assert pipeline.resource_id == "abc123"

    def test_uploads_transcoded_audio(
        self, fake_transcoder: FakeTranscoder, fake_client: FakeClient, sample_video: VideoAsset
    ) -> None:
        pipeline, _, _ = make_pipeline(fake_transcoder, fake_client)
        asyncio.run(pipeline.start(sample_video))

        assert fake_transcoder.calls == [sample_video]
        assert len(fake_client.created) == 1
        assert fake_client.created[0].data == b"mp3:" + sample_video.data[:8]

    @pytest.mark.parametrize("prompt", ["invoice, total", "", None])
    def test_prompt_passed_through(
        self,
        fake_transcoder: FakeTranscoder,
        fake_client: FakeClient,
        sample_video: VideoAsset,
        prompt: str | None,
    ) -> None:
        pipeline, _, _ = make_pipeline(fake_transcoder, fake_client)
        asyncio.run(pipeline.start(sample_video, prompt))

        assert fake_client.transcriptions == [("abc123", prompt)]

    def test_end_to_end_with_engine(self, fake_engine: FakeEngine) -> None:
        video = VideoAsset(data=b"\x00" * (2 * 1024 * 1024), filename="meeting.mp4")
        client = FakeClient(resource_id="srv-42")
        pipeline = UploadPipeline(MediaTranscoder(EngineHandle(fake_engine)), client)

        result = asyncio.run(pipeline.start(video, "invoice, total"))

        assert result is not None and result.resource_id == "srv-42"
        assert fake_engine.calls == [
            ("write", "input.mp4"),
            ("exec", EXTRACT_ARGS),
            ("read", "output.mp3"),
            ("delete", "input.mp4"),
            ("delete", "output.mp3"),
        ]
        assert [audio.data for audio in client.created] == [b"ID3 fake mp3" + video.data]
        assert fake_engine.slots == {}
        assert client.transcriptions == [("srv-42", "invoice, total")]


class TestStartGuards:
    def test_missing_video_is_noop(
        self, fake_transcoder: FakeTranscoder, fake_client: FakeClient
    ) -> None:
        pipeline, statuses, completed = make_pipeline(fake_transcoder, fake_client)

        assert asyncio.run(pipeline.start(None, "prompt")) is None
        assert pipeline.status is S.IDLE
        assert statuses == []
        assert completed == []
        assert fake_transcoder.calls == []
        assert fake_client.created == []

    def test_start_while_running_is_rejected(
        self, fake_client: FakeClient, sample_video: VideoAsset
    ) -> None:
        async def scenario() -> tuple[FakeTranscoder, PipelineResult | None]:
            gate = asyncio.Event()
            transcoder = FakeTranscoder(gate=gate)
            pipeline = UploadPipeline(transcoder, fake_client)

            running = asyncio.create_task(pipeline.start(sample_video))
            while pipeline.status is S.IDLE:
                await asyncio.sleep(0)
            assert pipeline.status is S.CONVERTING

            with pytest.raises(PipelineBusyError):
                await pipeline.start(VideoAsset(data=b"second"))
            assert pipeline.status is S.CONVERTING

            gate.set()
            return transcoder, await running

        transcoder, result = asyncio.run(scenario())

        assert result is not None and result.ok
        assert len(transcoder.calls) == 1
        assert len(fake_client.created) == 1
        assert len(fake_client.transcriptions) == 1

    def test_start_after_terminal_requires_reset(
        self, fake_transcoder: FakeTranscoder, fake_client: FakeClient, sample_video: VideoAsset
    ) -> None:
        pipeline, _, completed = make_pipeline(fake_transcoder, fake_client)
        asyncio.run(pipeline.start(sample_video))

        with pytest.raises(PipelineBusyError, match="reset"):
            asyncio.run(pipeline.start(sample_video))
        assert len(fake_transcoder.calls) == 1
        assert completed == ["abc123"]


class TestFailures:
    def test_transcode_failure_skips_remote_calls(
        self, fake_client: FakeClient, sample_video: VideoAsset, transcode_failure: TranscodeError
    ) -> None:
        transcoder = FakeTranscoder(error=transcode_failure)
        pipeline, statuses, completed = make_pipeline(transcoder, fake_client)

        result = asyncio.run(pipeline.start(sample_video))

        assert result is not None
        assert result.status is S.FAILED
        assert result.error is transcode_failure
        assert result.resource_id is None
        assert statuses == [S.CONVERTING, S.FAILED]
        assert fake_client.created == []
        assert fake_client.transcriptions == []
        assert completed == []

    def test_create_failure_skips_transcription(
        self,
        fake_transcoder: FakeTranscoder,
        sample_video: VideoAsset,
        submission_failure: SubmissionError,
    ) -> None:
        client = FakeClient(create_error=submission_failure)
        pipeline, statuses, completed = make_pipeline(fake_transcoder, client)

        result = asyncio.run(pipeline.start(sample_video))

        assert result is not None and result.status is S.FAILED
        assert statuses == [S.CONVERTING, S.UPLOADING, S.FAILED]
        assert len(client.created) == 1
        assert client.transcriptions == []
        assert completed == []
        assert pipeline.error is submission_failure

    def test_transcription_failure_keeps_resource_id(
        self, fake_transcoder: FakeTranscoder, sample_video: VideoAsset, caplog: pytest.LogCaptureFixture
    ) -> None:
        client = FakeClient(transcribe_error=SubmissionError("status 502", status=502))
        pipeline, statuses, completed = make_pipeline(fake_transcoder, client)

        result = asyncio.run(pipeline.start(sample_video, "keywords"))

        assert result is not None and result.status is S.FAILED
        assert result.resource_id == "abc123"
        assert statuses == [S.CONVERTING, S.UPLOADING, S.TRANSCRIBING, S.FAILED]
        assert completed == []
        assert "exists without a transcription" in caplog.text

    def test_unwrap_raises_stage_error(
        self, fake_client: FakeClient, sample_video: VideoAsset, transcode_failure: TranscodeError
    ) -> None:
        pipeline, _, _ = make_pipeline(FakeTranscoder(error=transcode_failure), fake_client)
        result = asyncio.run(pipeline.start(sample_video))

        assert result is not None
        with pytest.raises(TranscodeError):
            result.unwrap()

    def test_unexpected_error_fails_run_and_propagates(
        self, fake_client: FakeClient, sample_video: VideoAsset
    ) -> None:
        pipeline, statuses, _ = make_pipeline(FakeTranscoder(error=RuntimeError("bug")), fake_client)

        with pytest.raises(RuntimeError):
            asyncio.run(pipeline.start(sample_video))
        assert pipeline.status is S.FAILED
        assert statuses == [S.CONVERTING, S.FAILED]


class TestReset:
    def test_reset_after_success(
        self, fake_transcoder: FakeTranscoder, fake_client: FakeClient, sample_video: VideoAsset
    ) -> None:
        pipeline, statuses, completed = make_pipeline(fake_transcoder, fake_client)
        asyncio.run(pipeline.start(sample_video))

        pipeline.reset()

        assert pipeline.status is S.IDLE
        assert pipeline.history == [S.IDLE]
        assert pipeline.resource_id is None
        assert pipeline.error is None
        assert statuses[-1] is S.IDLE

        fake_client.resource_id = "def456"
        asyncio.run(pipeline.start(sample_video))
        assert completed == ["abc123", "def456"]

    def test_reset_after_failure(
        self, fake_client: FakeClient, sample_video: VideoAsset, transcode_failure: TranscodeError
    ) -> None:
        pipeline, _, _ = make_pipeline(FakeTranscoder(error=transcode_failure), fake_client)
        asyncio.run(pipeline.start(sample_video))

        pipeline.reset()
        assert pipeline.status is S.IDLE
        assert pipeline.error is None

    def test_reset_when_idle_raises(
        self, fake_transcoder: FakeTranscoder, fake_client: FakeClient
    ) -> None:
        pipeline, statuses, _ = make_pipeline(fake_transcoder, fake_client)

        with pytest.raises(PipelineStateError):
            pipeline.reset()
        assert statuses == []

    def test_reset_while_running_raises(self, fake_client: FakeClient, sample_video: VideoAsset) -> None:
        async def scenario() -> None:
            gate = asyncio.Event()
            pipeline = UploadPipeline(FakeTranscoder(gate=gate), fake_client)
            running = asyncio.create_task(pipeline.start(sample_video))
            while pipeline.status is S.IDLE:
                await asyncio.sleep(0)

            with pytest.raises(PipelineStateError):
                pipeline.reset()

            gate.set()
            await running

        asyncio.run(scenario())
