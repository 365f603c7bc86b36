"""
FastAPI application for the short video service.

Accepts scene scripts, generates a speech clip and downloads stock footage
per scene in the background, and exposes job status polling and the
finished video for download.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from core import config
from core.asset_store import AssetStore
from core.errors import MissingAssetError, NotFoundError, NotReadyError, ValidationError
from core.video import VideoService
from footage.factory import get_footage_provider
from video.pipeline import JobPipeline
from video.registry import JobRegistry
from video.scenes import SceneProcessor
from voice.factory import get_speech_provider

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize providers and storage
store = AssetStore()
footage_provider = get_footage_provider()
speech_provider = get_speech_provider()

registry = JobRegistry()
pipeline = JobPipeline(registry, SceneProcessor(speech_provider, footage_provider, store))
video_service = VideoService(registry, pipeline, footage_provider)


def get_video_service() -> VideoService:
    return video_service


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(
        f"Short video service starting (audio={store.audio_dir}, videos={store.video_dir}, "
        f"pexels={'configured' if footage_provider.is_configured else 'NOT SET'})"
    )
    try:
        yield
    finally:
        await pipeline.shutdown()


app = FastAPI(title="Short Video Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Expose generated assets so automation tools can fetch /videos/<name>
app.mount("/videos", StaticFiles(directory=str(store.video_dir)), name="videos")
app.mount("/audio", StaticFiles(directory=str(store.audio_dir)), name="audio")


@app.get("/")
async def root(service: VideoService = Depends(get_video_service)):
    """Health check: service status and whether the Pexels key is configured."""
    return service.info()


@app.get("/api/music-tags")
async def music_tags(service: VideoService = Depends(get_video_service)):
    """Return the supported mood tags."""
    return service.list_music_tags()


@app.post("/api/short-video")
async def create_short_video(
    payload: Any = Body(None),
    service: VideoService = Depends(get_video_service),
):
    """
    Start a short video job.

    Request format:
    {
        "scenes": [{"text": string, "searchTerms": [string, ...]}, ...],
        "config": object (optional, stored as-is)
    }

    Responds immediately; generation runs in the background and is
    tracked via GET /api/short-video/{video_id}/status.

    Response format:
    {
        "success": true,
        "videoId": string,
        "message": "Video generation started"
    }
    """
    try:
        video_id = service.create_job(payload)
    except ValidationError as e:
        logger.warning(f"Rejected short video request: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "videoId": video_id, "message": "Video generation started"}


@app.get("/api/short-video/{video_id}/status")
async def short_video_status(video_id: str, service: VideoService = Depends(get_video_service)):
    """
    Get the status of a short video job.

    Returns:
    {
        "videoId": string,
        "status": "processing" | "ready" | "failed",
        "progress": int,
        "error": string | null,
        "createdAt": string,
        "updatedAt": string,
        "sceneFiles": [{"audio": string, "video": string}, ...],
        "videoName": string | null
    }
    """
    try:
        job = service.get_status(video_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")
    return job.to_dict()


@app.get("/api/short-video/{video_id}")
async def download_short_video(video_id: str, service: VideoService = Depends(get_video_service)):
    """Download the primary video of a ready job."""
    try:
        path = service.get_artifact(video_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Video not found")
    except NotReadyError as e:
        raise HTTPException(status_code=409, detail=f"Video not ready (status: {e.status})")
    except MissingAssetError:
        raise HTTPException(status_code=404, detail="Video file is missing")

    return FileResponse(path, media_type="video/mp4", filename=path.name)
