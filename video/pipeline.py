"""
Background job pipeline.

Each job runs in its own asyncio task, detached from the request that
created it. Jobs run concurrently with each other; the scenes of one job
run strictly one after another. The registry is the only channel back to
readers.
"""
import asyncio
import logging
from typing import Dict, Optional

from video.registry import JobRegistry
from video.scenes import SceneProcessor

logger = logging.getLogger(__name__)

# The last 20% is only claimed once every output file exists
SCENE_PROGRESS_SPAN = 80

SHUTDOWN_ERROR = "Job was interrupted by server shutdown"


def scene_progress(scene_index: int, scene_count: int) -> int:
    """Progress reported before processing scene_index: floor(i / N * 80)."""
    if scene_count <= 0:
        raise ValueError("scene_count must be positive")
    return scene_index * SCENE_PROGRESS_SPAN // scene_count


def _error_message(error: BaseException) -> str:
    message = str(error).strip()
    return message or error.__class__.__name__


class JobPipeline:
    """Runs registered jobs through the scene processor."""

    def __init__(self, registry: JobRegistry, processor: SceneProcessor):
        self.registry = registry
        self.processor = processor
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def active_jobs(self) -> int:
        return len(self._tasks)

    def start(self, job_id: str) -> asyncio.Task:
        """
        Start a job in the background and return immediately.

        Must be called from a running event loop.
        """
        task = asyncio.create_task(self.run(job_id), name=f"video-job-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda _t: self._tasks.pop(job_id, None))
        logger.info(f"Started background pipeline for job {job_id}")
        return task

    async def run(self, job_id: str) -> None:
        """
        Process every scene of a job, then mark it ready or failed.

        Never raises for job failures: errors are recorded on the job.
        """
        job = self.registry.require(job_id)
        scenes = job.scenes
        total = len(scenes)

        try:
            if total == 0:
                raise ValueError("Video job has no scenes")

            for index, scene in enumerate(scenes):
                self.registry.set_progress(job_id, scene_progress(index, total))
                asset = await self.processor.process(scene, job_id, index)
                self.registry.add_scene_asset(job_id, asset)

            primary = self.registry.require(job_id).scene_assets[0].video_path
            self.registry.mark_ready(job_id, primary)
            logger.info(f"Video job {job_id} ready ({total} scene(s))")
        except asyncio.CancelledError:
            logger.warning(f"Video job {job_id} cancelled")
            self.registry.mark_failed(job_id, SHUTDOWN_ERROR)
            raise
        except Exception as e:
            logger.error(f"Video job {job_id} failed: {e}", exc_info=True)
            self.registry.mark_failed(job_id, _error_message(e))

    async def wait(self, job_id: str) -> None:
        """Wait for a job's background task, if it is still running."""
        task: Optional[asyncio.Task] = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel jobs still running; they end up failed."""
        tasks = list(self._tasks.values())
        if not tasks:
            return
        logger.info(f"Cancelling {len(tasks)} running video job(s)")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
