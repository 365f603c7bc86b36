"""
Tests for video.pipeline

Progress reporting, failure handling and shutdown of background jobs.
"""
import asyncio
from pathlib import Path

import pytest

from video.base import JobStatus, SceneRequest
from video.pipeline import SHUTDOWN_ERROR, JobPipeline, scene_progress
from video.registry import JobRegistry
from video.scenes import SceneProcessor
from stubs import GatedSpeechProvider, StubFootageProvider, StubSpeechProvider, wait_until


class RecordingRegistry(JobRegistry):
    """Keeps every committed (status, progress) pair."""

    def __init__(self):
        super().__init__()
        self.history = []

    def update(self, job_id, mutation):
        job = super().update(job_id, mutation)
        self.history.append((job.status, job.progress))
        return job


def _scenes(*texts, terms=None):
    return [SceneRequest(text=t, search_terms=terms) for t in texts]


class TestSceneProgress:

    def test_floor_of_fraction_of_80(self):
        assert [scene_progress(i, 3) for i in range(3)] == [0, 26, 53]
        assert [scene_progress(i, 2) for i in range(2)] == [0, 40]
        assert scene_progress(0, 1) == 0

    def test_never_reaches_80(self):
        assert all(scene_progress(i, 7) < 80 for i in range(7))

    def test_rejects_zero_scenes(self):
        with pytest.raises(ValueError):
            scene_progress(0, 0)


class TestJobPipeline:

    @pytest.mark.asyncio
    async def test_two_scenes_report_0_then_40_then_ready(self, footage, store):
        speech = GatedSpeechProvider()
        registry = JobRegistry()
        pipeline = JobPipeline(registry, SceneProcessor(speech, footage, store))
        job_id = registry.create(_scenes("A", "B", terms=["ocean"]))

        task = pipeline.start(job_id)

        await wait_until(lambda: len(speech.calls) == 1)
        assert registry.get(job_id).progress == 0
        speech.release.release()

        await wait_until(lambda: len(speech.calls) == 2)
        job = registry.get(job_id)
        assert job.progress == 40
        assert job.status == JobStatus.PROCESSING
        assert len(job.scene_assets) == 1
        speech.release.release()

        await task
        job = registry.get(job_id)
        assert job.status == JobStatus.READY
        assert job.progress == 100
        assert job.error is None
        assert len(job.scene_assets) == 2
        assert job.primary_video_path == job.scene_assets[0].video_path
        assert job.video_name == f"{job_id}_scene0.mp4"
        for asset in job.scene_assets:
            assert Path(asset.audio_path).is_file()
            assert Path(asset.video_path).is_file()

    @pytest.mark.asyncio
    async def test_progress_is_monotonic_and_100_only_when_ready(self, processor):
        registry = RecordingRegistry()
        pipeline = JobPipeline(registry, processor)
        job_id = registry.create(_scenes("A", "B", "C", "D", "E"))

        await pipeline.run(job_id)

        progresses = [p for _status, p in registry.history]
        assert progresses == sorted(progresses)
        assert [p for status, p in registry.history if p == 100] == [100]
        assert registry.history[-1] == (JobStatus.READY, 100)
        assert all(p < 100 for status, p in registry.history if status != JobStatus.READY)
        assert {0, 16, 32, 48, 64} <= set(progresses)

    @pytest.mark.asyncio
    async def test_failure_stops_remaining_scenes(self, footage, store):
        speech = StubSpeechProvider(fail_on={"B"})
        registry = JobRegistry()
        pipeline = JobPipeline(registry, SceneProcessor(speech, footage, store))
        job_id = registry.create(_scenes("A", "B", "C", terms=["city"]))

        await pipeline.run(job_id)

        job = registry.get(job_id)
        assert job.status == JobStatus.FAILED
        assert job.error == "Speech synthesis failed for: B"
        assert job.progress == 26
        assert len(job.scene_assets) == 1
        assert job.primary_video_path is None
        assert speech.calls == ["A", "B"]
        assert footage.searches == ["city"]

    @pytest.mark.asyncio
    async def test_empty_search_fails_with_term(self, speech, store):
        footage = StubFootageProvider(results={"unicorn": []})
        registry = JobRegistry()
        pipeline = JobPipeline(registry, SceneProcessor(speech, footage, store))
        job_id = registry.create(_scenes("A", terms=["unicorn"]))

        await pipeline.run(job_id)

        job = registry.get(job_id)
        assert job.status == JobStatus.FAILED
        assert "unicorn" in job.error
        assert job.scene_assets == []

    @pytest.mark.asyncio
    async def test_jobs_run_independently(self, footage, store):
        speech = StubSpeechProvider(fail_on={"bad"})
        registry = JobRegistry()
        pipeline = JobPipeline(registry, SceneProcessor(speech, footage, store))
        good = registry.create(_scenes("good"))
        bad = registry.create(_scenes("bad"))

        pipeline.start(good)
        pipeline.start(bad)
        await pipeline.wait(good)
        await pipeline.wait(bad)

        assert registry.get(good).status == JobStatus.READY
        assert registry.get(bad).status == JobStatus.FAILED
        assert pipeline.active_jobs == 0

    @pytest.mark.asyncio
    async def test_shutdown_marks_running_jobs_failed(self, footage, store):
        speech = GatedSpeechProvider()
        registry = JobRegistry()
        pipeline = JobPipeline(registry, SceneProcessor(speech, footage, store))
        job_id = registry.create(_scenes("A"))

        pipeline.start(job_id)
        await wait_until(lambda: len(speech.calls) == 1)
        assert pipeline.active_jobs == 1

        await pipeline.shutdown()

        job = registry.get(job_id)
        assert job.status == JobStatus.FAILED
        assert job.error == SHUTDOWN_ERROR
        assert pipeline.active_jobs == 0

    @pytest.mark.asyncio
    async def test_start_returns_before_processing(self, pipeline, registry, speech):
        job_id = registry.create(_scenes("A"))

        pipeline.start(job_id)
        assert speech.calls == []
        assert registry.get(job_id).status == JobStatus.PROCESSING

        await pipeline.wait(job_id)
        assert registry.get(job_id).status == JobStatus.READY

    @pytest.mark.asyncio
    async def test_concurrent_creation_yields_unique_ids(self, pipeline, registry):
        async def create():
            job_id = registry.create(_scenes("A"))
            pipeline.start(job_id)
            return job_id

        ids = await asyncio.gather(*(create() for _ in range(25)))
        for job_id in ids:
            await pipeline.wait(job_id)

        assert len(set(ids)) == 25
        assert all(registry.get(i).status == JobStatus.READY for i in ids)
