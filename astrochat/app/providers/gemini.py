from typing import Any, Dict, Optional

import httpx

from astrochat.app.core.logging import get_logger
from astrochat.app.exceptions import GenerationError
from astrochat.app.providers.base import BaseProvider

logger = get_logger(__name__)


class GeminiProvider(BaseProvider):
    """Google Gemini `generateContent` provider.

    If http_client is provided, it will be used for all requests (connection reuse).
    If not, a new client is created per request.
    """

    name = "gemini"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = "gemini-1.5-flash",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0
    ):
        """Initialize Gemini provider.

        Args:
            base_url: API base URL, e.g. https://generativelanguage.googleapis.com/v1beta
            api_key: Gemini API key
            model: Model name
            http_client: Optional shared HTTP client
            timeout: Request timeout in seconds
        """
        super().__init__(base_url, api_key, http_client, timeout)
        self.model = model

    def _build_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    @staticmethod
    def build_payload(prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    @staticmethod
    def extract_text(data: Dict[str, Any]) -> str:
        """Concatenate the text parts of the first candidate.

        Raises:
            GenerationError: If the reply was blocked or has no text
        """
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason")
            detail = f"blocked: {reason}" if reason else "no candidates"
            raise GenerationError(f"Gemini returned no reply ({detail})", provider="gemini")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            finish = candidates[0].get("finishReason", "unknown")
            raise GenerationError(
                f"Gemini returned an empty reply (finishReason={finish})", provider="gemini"
            )
        return text

    async def generate(self, prompt: str) -> str:
        """Send the prompt to `models/{model}:generateContent`.

        Raises:
            GenerationError: On HTTP errors, network errors or empty replies
        """
        url = self._get_endpoint_url(f"/models/{self.model}:generateContent")
        try:
            async with self._client_context() as client:
                resp = await client.post(
                    url,
                    headers=self.headers,
                    json=self.build_payload(prompt),
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise GenerationError(
                f"Gemini API error: HTTP {e.response.status_code}", provider=self.name
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise GenerationError(
                f"Gemini request failed: {type(e).__name__}", provider=self.name
            ) from e

        return self.extract_text(data)

    async def health_check(self, timeout: float = 2.0) -> bool:
        """Calls the model metadata endpoint with a short timeout."""
        try:
            url = self._get_endpoint_url(f"/models/{self.model}")
            async with self._client_context() as client:
                resp = await client.get(url, headers=self.headers, timeout=timeout)
                return resp.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"Gemini health check failed: {type(e).__name__}")
            return False
