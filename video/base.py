from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PROCESSING


class SceneRequest(BaseModel):
    """One scene of a short video script as sent by the caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    text: str = Field(..., description="Narration text, source of the speech clip")
    search_terms: List[str] = Field(
        default_factory=list,
        alias="searchTerms",
        description="Candidate footage search terms, first non-empty one wins",
    )

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Scene text cannot be empty")
        return value

    @field_validator("search_terms", mode="before")
    @classmethod
    def none_means_no_terms(cls, value: Any) -> Any:
        return [] if value is None else value


@dataclass(frozen=True)
class SceneAsset:
    """Files produced for one processed scene."""
    audio_path: str
    video_path: str

    def to_dict(self) -> dict:
        return {"audio": self.audio_path, "video": self.video_path}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Job:
    """
    One short video generation request.

    Jobs are owned by the JobRegistry. Anything handed out by the registry
    is a snapshot; mutate jobs only through JobRegistry.update().
    """
    id: str
    scenes: Tuple[SceneRequest, ...]
    config: Optional[dict] = None
    status: JobStatus = JobStatus.PROCESSING
    progress: int = 0
    error: Optional[str] = None
    scene_assets: List[SceneAsset] = field(default_factory=list)
    primary_video_path: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def video_name(self) -> Optional[str]:
        """File name of the primary video, usable under the /videos mount."""
        if not self.primary_video_path:
            return None
        return Path(self.primary_video_path).name

    def to_dict(self) -> dict:
        """Convert Job to the status payload returned by the API."""
        return {
            "videoId": self.id,
            "status": self.status.value,
            "progress": self.progress,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "sceneFiles": [asset.to_dict() for asset in self.scene_assets],
            "videoName": self.video_name,
        }
