from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

import httpx


class BaseProvider(ABC):
    """Base class for language model providers.

    Subclasses can accept an external httpx.AsyncClient for connection pooling,
    or create their own per call if not provided.
    """

    name: str = "base"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0
    ):
        """Initialize the provider.

        Args:
            base_url: The API base URL
            api_key: The API key for authentication
            http_client: Optional shared HTTP client for connection pooling
            timeout: Request timeout in seconds
        """
        self._http_client = http_client
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.headers = self._build_headers()

    @property
    def http_client(self) -> Optional[httpx.AsyncClient]:
        return self._http_client

    def _build_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    @asynccontextmanager
    async def _client_context(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        """Yield the shared client, or a short-lived one closed afterwards."""
        if self._http_client is not None:
            yield self._http_client
            return
        client = httpx.AsyncClient(timeout=self.timeout)
        try:
            yield client
        finally:
            await client.aclose()

    def _get_endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the generated text.

        Single shot: no retries.

        Raises:
            GenerationError: If the request fails or yields no text
        """
        pass

    @abstractmethod
    async def health_check(self, timeout: float = 2.0) -> bool:
        """Check if the provider is reachable.

        Args:
            timeout: Request timeout in seconds (default: 2.0)

        Returns:
            True if the provider is healthy, False otherwise
        """
        pass
