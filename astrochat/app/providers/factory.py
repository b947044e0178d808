"""Provider selection from settings."""

from typing import Optional

import httpx

from astrochat.app.core.config import Settings
from astrochat.app.core.logging import get_logger
from astrochat.app.providers.base import BaseProvider
from astrochat.app.providers.gemini import GeminiProvider
from astrochat.app.providers.mock import MockProvider

logger = get_logger(__name__)


def create_provider(
    config: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> BaseProvider:
    """Build the language model provider for this process.

    Falls back to the mock provider when mock mode is on or no Gemini key is
    configured, so local development works without credentials.
    """
    if config.mock_provider:
        logger.info("Using mock language model provider")
        return MockProvider()

    if not config.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set; using mock language model provider")
        return MockProvider()

    logger.info(f"Using Gemini provider (model={config.gemini_model})")
    return GeminiProvider(
        base_url=config.gemini_base_url,
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        http_client=http_client,
        timeout=config.gemini_timeout,
    )
