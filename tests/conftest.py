"""Pytest configuration and shared fixtures."""

import os
import tempfile

# Keep the app's default asset directories out of the working tree
_ASSET_ROOT = tempfile.mkdtemp(prefix="short-video-tests-")
os.environ.setdefault("AUDIO_DIR", os.path.join(_ASSET_ROOT, "audio"))
os.environ.setdefault("VIDEO_DIR", os.path.join(_ASSET_ROOT, "videos"))

import pytest

from core.asset_store import AssetStore
from video.pipeline import JobPipeline
from video.registry import JobRegistry
from video.scenes import SceneProcessor
from stubs import StubFootageProvider, StubSpeechProvider


@pytest.fixture
def store(tmp_path):
    return AssetStore(audio_dir=tmp_path / "audio", video_dir=tmp_path / "videos")


@pytest.fixture
def speech():
    return StubSpeechProvider()


@pytest.fixture
def footage():
    return StubFootageProvider()


@pytest.fixture
def registry():
    return JobRegistry()


@pytest.fixture
def processor(speech, footage, store):
    return SceneProcessor(speech, footage, store)


@pytest.fixture
def pipeline(registry, processor):
    return JobPipeline(registry, processor)
