"""Mock provider for development and testing.

Returns canned readings without calling an external API. Enabled with
ASTROCHAT_MOCK_PROVIDER=true, or automatically when no Gemini key is set.
"""

import asyncio
import random
from typing import Any, Optional

from astrochat.app.exceptions import GenerationError
from astrochat.app.providers.base import BaseProvider


class MockProvider(BaseProvider):
    """Mock provider that returns a reading in the expected marker format.

    Args:
        min_delay: Minimum simulated latency in seconds
        max_delay: Maximum simulated latency in seconds
        failure_rate: Probability of raising GenerationError (0-1)
    """

    name = "mock"

    def __init__(
        self,
        base_url: str = "http://mock.provider",
        api_key: str = "mock-key",
        http_client: Optional[Any] = None,
        timeout: float = 60.0,
        min_delay: float = 0.0,
        max_delay: float = 0.0,
        failure_rate: float = 0.0,
    ):
        super().__init__(base_url, api_key, http_client, timeout)
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.failure_rate = failure_rate
        self.prompts: list[str] = []

    def _generate_content(self, prompt: str) -> str:
        name = "friend"
        marker = 'Start with "Namaste '
        if marker in prompt:
            name = prompt.split(marker, 1)[1].split(" ji!", 1)[0] or name
        return (
            f"Namaste {name} ji! Your lagna shows a steady, thoughtful nature.\n\n"
            "<green>Career growth is strong between 2025 and 2026.</green> "
            "Jupiter supports new responsibilities.\n\n"
            "<red>Expect some delays in property matters during 2025.</red> "
            "Saturn asks for patience.\n\n"
            "Overall, <green>the coming years favour steady progress.</green>"
        )

    async def generate(self, prompt: str) -> str:
        delay = random.uniform(self.min_delay, self.max_delay)
        if delay:
            await asyncio.sleep(delay)

        if self.failure_rate and random.random() < self.failure_rate:
            raise GenerationError("Simulated provider failure", provider=self.name)

        self.prompts.append(prompt)
        return self._generate_content(prompt)

    async def health_check(self, timeout: float = 2.0) -> bool:
        return True
