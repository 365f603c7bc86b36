from abc import ABC, abstractmethod
from typing import AsyncIterator


class SpeechProvider(ABC):
    """
    Abstract interface for text-to-speech providers.
    All providers must implement synthesize.
    """

    provider_name: str = "unknown"

    @abstractmethod
    def synthesize(self, text: str) -> AsyncIterator[bytes]:
        """
        Synthesize text to speech.

        Args:
            text: Plain text to speak

        Returns:
            Async iterator over the audio bytes. Nothing is requested
            until iteration starts.

        Raises:
            SynthesisError: On transport failure or a non-success response,
                raised while iterating
        """
        pass
