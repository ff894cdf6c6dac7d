"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from fakes import FakeClient, FakeEngine, FakeTranscoder

from clipscribe.exceptions import SubmissionError, TranscodeError
from clipscribe.media import VideoAsset


@pytest.fixture
def sample_video() -> VideoAsset:
    """Return a small fake MP4 payload."""
    return VideoAsset(data=b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64, filename="clip.mp4")


@pytest.fixture
def video_file(tmp_path: Path) -> Path:
    """Write a fake MP4 file to disk."""
    path = tmp_path / "meeting.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64)
    return path


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fake_transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def transcode_failure() -> TranscodeError:
    return TranscodeError("input is not decodable")


@pytest.fixture
def submission_failure() -> SubmissionError:
    return SubmissionError("Resource creation failed with status 500", status=500)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a clipscribe.yaml pointing at a test service."""
    path = tmp_path / "clipscribe.yaml"
    with open(path, "w") as f:
        yaml.dump(
            {
                "api_base_url": "http://api.example.test:8080/",
                "ffmpeg_binary": "ffmpeg",
                "request_timeout": 30,
            },
            f,
        )
    return path
