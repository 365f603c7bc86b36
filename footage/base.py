from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Sequence


@dataclass(frozen=True)
class VideoCandidate:
    """
    One downloadable rendition of a stock video.
    All footage providers return search results in this shape.
    """
    quality: Optional[str]  # provider label, e.g. "hd" | "sd" | "uhd"
    stream_url: str
    width: Optional[int] = None
    height: Optional[int] = None


def select_candidate(candidates: Sequence[VideoCandidate], preferred_quality: str = "hd") -> VideoCandidate:
    """
    Pick the first candidate with the preferred quality label, else the first one.

    Raises:
        ValueError: If candidates is empty
    """
    if not candidates:
        raise ValueError("No candidates to choose from")
    for candidate in candidates:
        if candidate.quality == preferred_quality:
            return candidate
    return candidates[0]


class FootageProvider(ABC):
    """
    Abstract interface for stock footage providers.
    All providers must implement search and fetch.
    """

    provider_name: str = "unknown"

    @property
    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs."""
        return True

    @abstractmethod
    async def search(self, term: str) -> List[VideoCandidate]:
        """
        Search stock footage.

        Args:
            term: Search term

        Returns:
            Ranked candidate renditions; empty when nothing matched

        Raises:
            SearchError: On transport failure or a non-success response
        """
        pass

    @abstractmethod
    def fetch(self, stream_url: str) -> AsyncIterator[bytes]:
        """
        Download one candidate rendition.

        Returns:
            Async iterator over the video bytes

        Raises:
            FetchError: On transport failure or a non-success response,
                raised while iterating
        """
        pass
