"""
Scene asset storage.

Audio and video assets live in two directories and are named
{job_id}_scene{index}.{ext}. These files are the only persisted state of
the service; there is no database.
"""
import asyncio
import logging
from pathlib import Path
from typing import AsyncIterator, Optional

from core import config

logger = logging.getLogger(__name__)


def _sanitize_extension(extension: str) -> str:
    """
    Normalize a file extension to lowercase without a leading dot.

    Raises:
        ValueError: If extension is empty or contains path separators
    """
    ext = extension.strip().lstrip(".").lower()
    if not ext:
        raise ValueError("Extension cannot be empty")
    if "/" in ext or "\\" in ext or ".." in ext:
        raise ValueError("Invalid extension: contains path separators")
    return ext


def _sanitize_job_id(job_id: str) -> str:
    if not job_id or "/" in job_id or "\\" in job_id or ".." in job_id:
        raise ValueError(f"Invalid job id for asset path: {job_id!r}")
    return job_id


def asset_filename(job_id: str, scene_index: int, extension: str) -> str:
    """Deterministic asset name, e.g. "<job_id>_scene0.mp4"."""
    if scene_index < 0:
        raise ValueError("Scene index cannot be negative")
    return f"{_sanitize_job_id(job_id)}_scene{scene_index}.{_sanitize_extension(extension)}"


class AssetStore:
    """Resolves asset paths and streams provider output to disk."""

    def __init__(
        self,
        audio_dir: Optional[Path] = None,
        video_dir: Optional[Path] = None,
        audio_extension: str = config.AUDIO_EXTENSION,
        video_extension: str = config.VIDEO_EXTENSION,
    ):
        self.audio_dir = Path(audio_dir) if audio_dir else config.AUDIO_DIR
        self.video_dir = Path(video_dir) if video_dir else config.VIDEO_DIR
        self.audio_extension = _sanitize_extension(audio_extension)
        self.video_extension = _sanitize_extension(video_extension)
        self.ensure_dirs()

    def ensure_dirs(self) -> None:
        self.audio_dir.mkdir(parents=True, exist_ok=True)
        self.video_dir.mkdir(parents=True, exist_ok=True)

    def audio_path(self, job_id: str, scene_index: int) -> Path:
        return self.audio_dir / asset_filename(job_id, scene_index, self.audio_extension)

    def video_path(self, job_id: str, scene_index: int) -> Path:
        return self.video_dir / asset_filename(job_id, scene_index, self.video_extension)

    async def write_stream(self, path: Path, chunks: AsyncIterator[bytes]) -> int:
        """
        Stream chunks into a file.

        The file is closed (and therefore flushed) before this returns.
        Disk writes run in a worker thread so other jobs keep running.

        Args:
            path: Destination file, overwritten if it exists
            chunks: Async byte stream from a provider

        Returns:
            int: Number of bytes written

        Raises:
            OSError: If the file cannot be written
            ProviderError: Whatever the provider stream raises
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        handle = await asyncio.to_thread(open, path, "wb")
        try:
            async for chunk in chunks:
                if not chunk:
                    continue
                await asyncio.to_thread(handle.write, chunk)
                written += len(chunk)
        finally:
            await asyncio.to_thread(handle.close)
            # Provider streams hold an open HTTP response until closed
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()

        logger.info(f"Wrote {written} bytes to {path}")
        return written
