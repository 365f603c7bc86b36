"""
Centralized video job tracking and state management.

The registry is the only state shared between the API and the background
pipeline tasks. Each job has a single writer (the pipeline task that owns
it); any number of readers may poll it. All access goes through one lock
and readers always get a snapshot copy, never the live record.
"""
import copy
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Dict, Iterable, Optional

from core.errors import JobStateError, NotFoundError, ValidationError
from video.base import Job, JobStatus, SceneAsset, SceneRequest

logger = logging.getLogger(__name__)

Mutation = Callable[[Job], None]


def _snapshot(job: Job) -> Job:
    return replace(job, scene_assets=list(job.scene_assets), config=copy.deepcopy(job.config))


def _check_transition(before: Job, after: Job) -> None:
    """Raise JobStateError if going from before to after breaks the job lifecycle."""
    if before.status.is_terminal:
        raise JobStateError(
            f"Job {before.id} is {before.status.value} and can no longer change"
        )
    if after.id != before.id or after.scenes != before.scenes or after.config != before.config:
        raise JobStateError(f"Job {before.id}: id, scenes and config are immutable")
    if after.progress < before.progress:
        raise JobStateError(
            f"Job {before.id}: progress cannot go back from {before.progress} to {after.progress}"
        )
    if after.progress > 100:
        raise JobStateError(f"Job {before.id}: progress {after.progress} is above 100")
    if after.progress == 100 and after.status is not JobStatus.READY:
        raise JobStateError(f"Job {before.id}: progress 100 is reserved for ready jobs")
    if after.status is JobStatus.READY and after.progress != 100:
        raise JobStateError(f"Job {before.id}: ready jobs must report progress 100")
    if after.status is JobStatus.FAILED and not after.error:
        raise JobStateError(f"Job {before.id}: failed jobs must carry an error")
    if after.error and after.status is not JobStatus.FAILED:
        raise JobStateError(f"Job {before.id}: only failed jobs carry an error")
    assets_before = before.scene_assets
    if after.scene_assets[:len(assets_before)] != assets_before:
        raise JobStateError(f"Job {before.id}: scene assets are append-only")
    if len(after.scene_assets) > len(after.scenes):
        raise JobStateError(f"Job {before.id}: more scene assets than scenes")


class JobRegistry:
    """In-memory job table guarded by a lock."""

    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

    def create(self, scenes: Iterable[SceneRequest], config: Optional[dict] = None) -> str:
        """
        Register a new job in the processing state.

        Args:
            scenes: Ordered scene requests, at least one
            config: Opaque caller configuration, stored as a private copy

        Returns:
            job_id: Freshly allocated unique identifier

        Raises:
            ValidationError: If there are no scenes
        """
        scenes = tuple(scenes)
        if not scenes:
            raise ValidationError("A video job needs at least one scene")

        with self._lock:
            job_id = str(uuid.uuid4())
            while job_id in self._jobs:
                job_id = str(uuid.uuid4())
            self._jobs[job_id] = Job(
                id=job_id,
                scenes=scenes,
                config=copy.deepcopy(config),
            )
        logger.info(f"Registered video job {job_id} with {len(scenes)} scene(s)")
        return job_id

    def get(self, job_id: str) -> Optional[Job]:
        """Return a snapshot of the job, or None if the id is unknown."""
        with self._lock:
            job = self._jobs.get(job_id)
            return _snapshot(job) if job else None

    def require(self, job_id: str) -> Job:
        """Return a snapshot of the job, raising NotFoundError if the id is unknown."""
        job = self.get(job_id)
        if job is None:
            raise NotFoundError(job_id)
        return job

    def update(self, job_id: str, mutation: Mutation) -> Job:
        """
        Apply a mutation to a job atomically.

        The mutation runs against a working copy; the copy is committed only
        if it respects the job lifecycle rules.

        Returns:
            Job: Snapshot of the committed state

        Raises:
            NotFoundError: If the id is unknown
            JobStateError: If the mutated job breaks a lifecycle rule
        """
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                raise NotFoundError(job_id)

            working = _snapshot(current)
            mutation(working)
            _check_transition(current, working)

            working.updated_at = datetime.now(timezone.utc)
            self._jobs[job_id] = working
            return _snapshot(working)

    def set_progress(self, job_id: str, progress: int) -> Job:
        def apply(job: Job) -> None:
            job.progress = progress
        return self.update(job_id, apply)

    def add_scene_asset(self, job_id: str, asset: SceneAsset) -> Job:
        def apply(job: Job) -> None:
            job.scene_assets.append(asset)
        return self.update(job_id, apply)

    def mark_ready(self, job_id: str, primary_video_path: str) -> Job:
        """Transition job to ready with its downloadable video."""
        def apply(job: Job) -> None:
            job.status = JobStatus.READY
            job.progress = 100
            job.primary_video_path = primary_video_path
        return self.update(job_id, apply)

    def mark_failed(self, job_id: str, error: str) -> Job:
        """Transition job to failed, keeping the progress it reached."""
        def apply(job: Job) -> None:
            job.status = JobStatus.FAILED
            job.error = error
        return self.update(job_id, apply)
