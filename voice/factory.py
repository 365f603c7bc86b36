"""
Speech provider factory.

Centralizes provider creation so other TTS services can be added
without touching the pipeline or the API.
"""
import logging

from core import config
from voice.base import SpeechProvider
from voice.streamelements import StreamElementsSpeechProvider

logger = logging.getLogger(__name__)


def get_speech_provider(provider_name: str = config.SPEECH_PROVIDER) -> SpeechProvider:
    """
    Get speech provider based on the SPEECH_PROVIDER setting.

    Defaults to 'streamelements' for unknown names.

    Returns:
        SpeechProvider: The configured speech provider instance
    """
    provider_name = provider_name.lower()

    if provider_name == "streamelements":
        return StreamElementsSpeechProvider()
    logger.warning(f"Unknown speech provider '{provider_name}', defaulting to streamelements")
    return StreamElementsSpeechProvider()
