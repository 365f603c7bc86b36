"""
StreamElements text-to-speech provider.

This module provides the interface to the StreamElements speech endpoint.
It is responsible for:
- Requesting speech for a piece of text with a fixed voice
- Streaming the returned MP3 audio back to the caller

This module does NOT handle:
- File storage (handled by core.asset_store)
- Retries or backoff logic
"""
import logging
from typing import AsyncIterator, Optional

import httpx

from core import config
from core.errors import SynthesisError
from voice.base import SpeechProvider

logger = logging.getLogger(__name__)


class StreamElementsSpeechProvider(SpeechProvider):
    """
    Stateless speech provider backed by the StreamElements TTS API.

    Requests are bounded by `timeout` seconds.
    """

    provider_name = "streamelements"

    def __init__(
        self,
        api_url: str = config.TTS_API_URL,
        voice: str = config.TTS_VOICE,
        timeout: float = config.TTS_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.voice = voice
        self.timeout = timeout
        self._transport = transport
        logger.info(f"Initialized StreamElementsSpeechProvider (voice={voice})")

    async def synthesize(self, text: str) -> AsyncIterator[bytes]:
        """
        Stream MP3 speech for text.

        Raises:
            ValueError: If text is empty
            SynthesisError: If the request fails or returns a non-200 status
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        logger.info(f"Generating speech ({len(text)} chars, voice={self.voice})")
        params = {"voice": self.voice, "text": text}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                async with client.stream("GET", self.api_url, params=params) as response:
                    if response.status_code != 200:
                        body = (await response.aread())[:500]
                        logger.error(
                            f"StreamElements TTS failed with status {response.status_code}: {body!r}"
                        )
                        raise SynthesisError(
                            f"Speech synthesis failed with status {response.status_code}"
                        )

                    received = 0
                    async for chunk in response.aiter_bytes():
                        received += len(chunk)
                        yield chunk

                    if received == 0:
                        raise SynthesisError("Speech synthesis returned empty audio")
        except httpx.TimeoutException as e:
            logger.error(f"StreamElements TTS request timed out: {e}")
            raise SynthesisError(f"Speech synthesis timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.error(f"StreamElements TTS request error: {e}")
            raise SynthesisError(f"Speech synthesis request failed: {e}") from e
