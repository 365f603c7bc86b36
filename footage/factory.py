"""
Footage provider factory.

Centralizes provider creation so other stock footage services can be
added without modifying the pipeline or the API.
"""
import logging

from core import config
from footage.base import FootageProvider
from footage.pexels import PexelsFootageProvider

logger = logging.getLogger(__name__)


def get_footage_provider(provider_name: str = config.FOOTAGE_PROVIDER) -> FootageProvider:
    """
    Get footage provider based on the FOOTAGE_PROVIDER setting.

    Defaults to 'pexels' for unknown names.

    Returns:
        FootageProvider: The configured footage provider instance
    """
    provider_name = provider_name.lower()

    if provider_name == "pexels":
        return PexelsFootageProvider()
    logger.warning(f"Unknown footage provider '{provider_name}', defaulting to pexels")
    return PexelsFootageProvider()
