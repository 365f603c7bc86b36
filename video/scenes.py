"""
Scene processing: speech clip + background footage for one scene.
"""
import logging
from typing import Optional, Sequence

from core import config
from core.asset_store import AssetStore
from core.errors import NoResultsError
from footage.base import FootageProvider, select_candidate
from video.base import SceneAsset, SceneRequest
from voice.base import SpeechProvider

logger = logging.getLogger(__name__)


def pick_search_term(search_terms: Optional[Sequence[str]], fallback: str = config.DEFAULT_SEARCH_TERM) -> str:
    """Return the first non-blank search term, or the fallback."""
    for term in search_terms or ():
        if term and term.strip():
            return term.strip()
    return fallback


class SceneProcessor:
    """
    Produces the audio and video assets of a single scene.

    Both files are fully written and closed before process() returns.
    """

    def __init__(
        self,
        speech: SpeechProvider,
        footage: FootageProvider,
        store: AssetStore,
        fallback_term: str = config.DEFAULT_SEARCH_TERM,
        preferred_quality: str = config.PREFERRED_QUALITY,
    ):
        self.speech = speech
        self.footage = footage
        self.store = store
        self.fallback_term = fallback_term
        self.preferred_quality = preferred_quality

    async def process(self, scene: SceneRequest, job_id: str, scene_index: int) -> SceneAsset:
        """
        Generate speech and download footage for a scene.

        Args:
            scene: The scene request
            job_id: Owning job, used to name the files
            scene_index: Position of the scene in the job

        Returns:
            SceneAsset: Paths of the written audio and video files

        Raises:
            SynthesisError, SearchError, FetchError: From the providers
            NoResultsError: If the footage search found nothing
        """
        audio_path = self.store.audio_path(job_id, scene_index)
        logger.info(f"[{job_id}] Scene {scene_index}: generating speech")
        await self.store.write_stream(audio_path, self.speech.synthesize(scene.text))

        search_term = pick_search_term(scene.search_terms, self.fallback_term)
        candidates = await self.footage.search(search_term)
        if not candidates:
            raise NoResultsError(search_term)

        candidate = select_candidate(candidates, self.preferred_quality)
        video_path = self.store.video_path(job_id, scene_index)
        logger.info(
            f"[{job_id}] Scene {scene_index}: downloading '{search_term}' footage "
            f"(quality={candidate.quality})"
        )
        await self.store.write_stream(video_path, self.footage.fetch(candidate.stream_url))

        return SceneAsset(audio_path=str(audio_path), video_path=str(video_path))
