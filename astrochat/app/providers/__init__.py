"""Language model providers for the AstroChat backend.

This package provides:
- Base provider interface (BaseProvider)
- Google Gemini implementation (GeminiProvider)
- Canned-reply provider for development and tests (MockProvider)
- Provider selection from settings (create_provider)
"""

from astrochat.app.providers.base import BaseProvider
from astrochat.app.providers.factory import create_provider
from astrochat.app.providers.gemini import GeminiProvider
from astrochat.app.providers.mock import MockProvider

__all__ = [
    "BaseProvider",
    "GeminiProvider",
    "MockProvider",
    "create_provider",
]
