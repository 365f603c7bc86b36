"""
Tests for the FastAPI application in app.main

The service dependency is overridden with one backed by in-memory
providers and a temporary asset directory.
"""
import time
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app import main
from app.main import app, get_video_service
from core.asset_store import AssetStore
from core.video import VideoService, parse_scenes
from video.pipeline import JobPipeline
from video.registry import JobRegistry
from video.scenes import SceneProcessor
from stubs import StubFootageProvider, StubSpeechProvider


@pytest.fixture
def service(tmp_path):
    store = AssetStore(audio_dir=tmp_path / "audio", video_dir=tmp_path / "videos")
    footage = StubFootageProvider(results={"nothing": []})
    registry = JobRegistry()
    pipeline = JobPipeline(registry, SceneProcessor(StubSpeechProvider(), footage, store))
    return VideoService(registry, pipeline, footage)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_video_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _wait_for_terminal(client, video_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/api/short-video/{video_id}/status").json()
        if body["status"] != "processing":
            return body
        time.sleep(0.02)
    raise AssertionError(f"Job {video_id} did not finish")


def test_root_reports_liveness(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "Live", "pexels": True}


def test_music_tags(client):
    response = client.get("/api/music-tags")

    assert response.status_code == 200
    assert "upbeat" in response.json()
    assert len(response.json()) == 12


def test_create_poll_and_download(client):
    response = client.post(
        "/api/short-video",
        json={"scenes": [{"text": "Hello", "searchTerms": ["ocean"]}, {"text": "World"}]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Video generation started"
    video_id = body["videoId"]

    status = _wait_for_terminal(client, video_id)
    assert status["status"] == "ready"
    assert status["progress"] == 100
    assert status["error"] is None
    assert status["videoName"] == f"{video_id}_scene0.mp4"
    assert len(status["sceneFiles"]) == 2

    download = client.get(f"/api/short-video/{video_id}")
    assert download.status_code == 200
    assert download.headers["content-type"] == "video/mp4"
    assert download.content == b"MP4:https://cdn.test/ocean-hd.mp4"


def test_failed_job_reports_error(client):
    video_id = client.post(
        "/api/short-video", json={"scenes": [{"text": "Hello", "searchTerms": ["nothing"]}]}
    ).json()["videoId"]

    status = _wait_for_terminal(client, video_id)

    assert status["status"] == "failed"
    assert "nothing" in status["error"]
    assert status["videoName"] is None

    download = client.get(f"/api/short-video/{video_id}")
    assert download.status_code == 409
    assert "failed" in download.json()["detail"]


@pytest.mark.parametrize(
    "payload",
    [{}, {"scenes": "nope"}, {"scenes": []}, {"scenes": [{"searchTerms": ["x"]}]}, [1, 2]],
)
def test_create_rejects_invalid_payload(client, payload):
    response = client.post("/api/short-video", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"]


def test_create_without_body(client):
    assert client.post("/api/short-video").status_code == 400


def test_unknown_video(client):
    assert client.get("/api/short-video/does-not-exist/status").status_code == 404
    assert client.get("/api/short-video/does-not-exist").status_code == 404


def test_download_while_processing(client, service):
    # Registered but never started, so it stays processing
    video_id = service.registry.create(parse_scenes([{"text": "Hi"}]))

    response = client.get(f"/api/short-video/{video_id}")

    assert response.status_code == 409
    assert response.json()["detail"] == "Video not ready (status: processing)"


def test_shutdown_stops_pipeline():
    with patch.object(main.pipeline, "shutdown", new=AsyncMock()) as shutdown:
        with TestClient(app):
            shutdown.assert_not_awaited()
        shutdown.assert_awaited_once()
