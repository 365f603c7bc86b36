"""
Short video service facade.

Transport-agnostic operations used by the HTTP layer: create a job,
poll its status, fetch its artifact, plus the static tag list and
service info.
"""
import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from core import config
from core.errors import MissingAssetError, NotReadyError, ValidationError
from footage.base import FootageProvider
from video.base import Job, JobStatus, SceneRequest
from video.pipeline import JobPipeline
from video.registry import JobRegistry

logger = logging.getLogger(__name__)


def parse_scenes(raw_scenes: Any) -> List[SceneRequest]:
    """
    Validate the scenes of a creation request.

    Raises:
        ValidationError: If scenes is missing, not a list, empty, or
            contains an invalid scene
    """
    if raw_scenes is None:
        raise ValidationError("Scenes must be an array")
    if not isinstance(raw_scenes, list):
        raise ValidationError("Scenes must be an array")
    if not raw_scenes:
        raise ValidationError("Scenes must contain at least one scene")

    scenes = []
    for index, raw in enumerate(raw_scenes):
        if not isinstance(raw, dict):
            raise ValidationError(f"Scene {index} must be an object")
        try:
            scenes.append(SceneRequest.model_validate(raw))
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'scene'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Scene {index} is invalid: {problems}") from e
    return scenes


class VideoService:
    """Wires the registry and the pipeline behind the public operations."""

    def __init__(
        self,
        registry: JobRegistry,
        pipeline: JobPipeline,
        footage: FootageProvider,
        music_tags: Optional[List[str]] = None,
    ):
        self.registry = registry
        self.pipeline = pipeline
        self.footage = footage
        self.music_tags = list(music_tags if music_tags is not None else config.MUSIC_TAGS)

    def create_job(self, payload: Any) -> str:
        """
        Register a video job and start processing it in the background.

        Must be called from a running event loop. Returns as soon as the
        job is registered; the caller polls get_status() for progress.

        Args:
            payload: Request body with "scenes" (list) and optional "config"

        Returns:
            job_id: Identifier of the new job

        Raises:
            ValidationError: If the payload is malformed
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        scenes = parse_scenes(payload.get("scenes"))
        job_id = self.registry.create(scenes, payload.get("config"))
        self.pipeline.start(job_id)
        return job_id

    def get_status(self, job_id: str) -> Job:
        """
        Raises:
            NotFoundError: If the id is unknown
        """
        return self.registry.require(job_id)

    def get_artifact(self, job_id: str) -> Path:
        """
        Return the path of a ready job's primary video.

        Raises:
            NotFoundError: If the id is unknown
            NotReadyError: If the job is not ready
            MissingAssetError: If the file is gone from storage
        """
        job = self.registry.require(job_id)
        if job.status is not JobStatus.READY:
            raise NotReadyError(job_id, job.status.value)

        path = Path(job.primary_video_path)
        if not path.is_file():
            logger.warning(f"Video file missing for job {job_id}: {path}")
            raise MissingAssetError(job_id, str(path))
        return path

    def list_music_tags(self) -> List[str]:
        return list(self.music_tags)

    def info(self) -> dict:
        """Liveness payload: service status and whether footage search has a key."""
        return {"status": "Live", "pexels": self.footage.is_configured}
