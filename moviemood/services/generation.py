"""
Gemini text-generation adapter.
Wraps an explicitly constructed google-genai client.
"""
import logging
from typing import Optional

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


class GeminiTextGenerator:
    """TextGenerator backed by the Gemini API."""

    def __init__(self, client: genai.Client, model: str) -> None:
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    @classmethod
    def from_api_key(
        cls,
        api_key: str,
        model: str,
        timeout_ms: Optional[int] = None,
    ) -> "GeminiTextGenerator":
        """Create a client for the given key and model."""
        http_options = types.HttpOptions(timeout=timeout_ms) if timeout_ms else None
        client = genai.Client(api_key=api_key, http_options=http_options)
        logger.info(f"Gemini client created: model={model}")
        return cls(client=client, model=model)

    async def generate(self, prompt: str) -> str:
        """Send one generate_content call; SDK errors propagate."""
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=prompt,
        )
        # No text when every candidate was blocked or empty
        return response.text or ""
