"""
Gemini text-generation client.

Thin wrapper over the ``generateContent`` REST endpoint: one prompt in, the
first candidate's text out. It raises on every failure (transport, HTTP
status, malformed body) and leaves the fallback decision to the caller.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings

logger = logging.getLogger(__name__)


class LLMTool:
    """Gemini client bound to one Settings object and one HTTP client."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.settings = settings
        self.client = client

    @property
    def endpoint(self) -> str:
        base = self.settings.gemini_base_url.rstrip("/")
        return f"{base}/models/{self.settings.gemini_model}:generateContent"

    async def generate(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        default: str = "",
    ) -> str:
        """Generate text for a single user prompt.

        Returns ``default`` when Gemini answers 200 without any candidate text.
        """
        if temperature is None:
            temperature = self.settings.gemini_temperature

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature},
        }

        try:
            response = await self.client.post(
                self.endpoint,
                params={"key": self.settings.gemini_api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.settings.gemini_timeout,
            )
        except httpx.TimeoutException:
            raise RuntimeError(f"Gemini request timed out after {self.settings.gemini_timeout}s")
        except httpx.HTTPError as e:
            raise RuntimeError(f"Gemini connection failed ({type(e).__name__}): {e}")

        if not response.is_success:
            raise RuntimeError(f"Gemini API {response.status_code}: {response.text[:500]}")

        text = self._candidate_text(response.json())
        if text is None:
            logger.info("Gemini: no candidate text, using default")
            return default

        logger.info(f"Gemini: Got {len(text)} chars response")
        return text

    @staticmethod
    def _candidate_text(data: Dict[str, Any]) -> Optional[str]:
        """``candidates[0].content.parts[0].text`` or None if any step is missing."""
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        return text or None
