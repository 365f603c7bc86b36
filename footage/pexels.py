"""
Pexels stock footage provider.

Searches the Pexels video API and streams the chosen rendition.
The API key comes from configuration only (PEXELS_API_KEY).
"""
import logging
from typing import Any, AsyncIterator, List, Optional

import httpx

from core import config
from core.errors import FetchError, SearchError
from footage.base import FootageProvider, VideoCandidate

logger = logging.getLogger(__name__)


def _parse_candidates(data: Any) -> List[VideoCandidate]:
    """
    Turn a Pexels search payload into candidates.

    Candidates are the video_files of the first result that has any,
    in the order Pexels lists them.

    Raises:
        SearchError: If the payload does not look like a Pexels response
    """
    if not isinstance(data, dict):
        raise SearchError("Unexpected Pexels response: not a JSON object")

    videos = data.get("videos") or []
    if not isinstance(videos, list):
        raise SearchError("Unexpected Pexels response: 'videos' is not a list")

    for video in videos:
        files = video.get("video_files") if isinstance(video, dict) else None
        if not files:
            continue
        candidates = [
            VideoCandidate(
                quality=f.get("quality"),
                stream_url=f["link"],
                width=f.get("width"),
                height=f.get("height"),
            )
            for f in files
            if isinstance(f, dict) and f.get("link")
        ]
        if candidates:
            return candidates
    return []


class PexelsFootageProvider(FootageProvider):
    """
    Pexels video search provider.

    Without PEXELS_API_KEY every search fails with SearchError; the
    service still starts so the liveness endpoint can report it.
    """

    provider_name = "pexels"

    def __init__(
        self,
        api_key: Optional[str] = config.PEXELS_API_KEY,
        search_url: str = config.PEXELS_SEARCH_URL,
        per_page: int = config.PEXELS_PER_PAGE,
        orientation: str = config.PEXELS_ORIENTATION,
        search_timeout: float = config.SEARCH_TIMEOUT,
        fetch_timeout: float = config.FETCH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.search_url = search_url
        self.per_page = per_page
        self.orientation = orientation
        self.search_timeout = search_timeout
        self.fetch_timeout = fetch_timeout
        self._transport = transport
        if not api_key:
            logger.warning("PEXELS_API_KEY not set - footage search will fail")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, term: str) -> List[VideoCandidate]:
        if not self.api_key:
            raise SearchError("No footage API key configured - set PEXELS_API_KEY")

        logger.info(f"Searching Pexels for: {term}")
        headers = {"Authorization": self.api_key}
        params = {
            "query": term,
            "per_page": self.per_page,
            "orientation": self.orientation,
        }

        try:
            async with httpx.AsyncClient(timeout=self.search_timeout, transport=self._transport) as client:
                response = await client.get(self.search_url, headers=headers, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"Pexels search timed out for '{term}': {e}")
            raise SearchError(f"Footage search timed out for: {term}") from e
        except httpx.HTTPError as e:
            logger.error(f"Pexels search request error for '{term}': {e}")
            raise SearchError(f"Footage search request failed for {term}: {e}") from e

        if response.status_code != 200:
            logger.error(f"Pexels search failed with status {response.status_code}: {response.text[:500]}")
            raise SearchError(
                f"Footage search failed with status {response.status_code} for: {term}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SearchError(f"Footage search returned invalid JSON for: {term}") from e

        candidates = _parse_candidates(data)
        logger.info(f"Pexels returned {len(candidates)} candidate file(s) for '{term}'")
        return candidates

    async def fetch(self, stream_url: str) -> AsyncIterator[bytes]:
        logger.info(f"Downloading video from: {stream_url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.fetch_timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                async with client.stream("GET", stream_url) as response:
                    if response.status_code != 200:
                        logger.error(f"Video download failed with status {response.status_code}: {stream_url}")
                        raise FetchError(
                            f"Video download failed with status {response.status_code}"
                        )
                    async for chunk in response.aiter_bytes():
                        yield chunk
        except httpx.TimeoutException as e:
            logger.error(f"Video download timed out: {stream_url}")
            raise FetchError(f"Video download timed out after {self.fetch_timeout}s") from e
        except httpx.HTTPError as e:
            logger.error(f"Video download error for {stream_url}: {e}")
            raise FetchError(f"Video download failed: {e}") from e
