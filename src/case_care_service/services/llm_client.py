"""
Generative model client abstraction.

The service talks to exactly one external text-generation provider. Callers
receive an explicitly constructed handle (no module-level SDK client), so
tests substitute a fake by implementing ``GenerativeModelClient``.

Every provider failure surfaces as ``UpstreamServiceError``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from google import genai
from google.genai import types

from case_care_service.config import Settings
from case_care_service.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class GenerativeModelClient(ABC):
    """Minimal surface the service needs from a generative model."""

    @abstractmethod
    async def generate_json(self, prompt: str) -> str:
        """Send a text prompt in JSON mode and return the raw response text."""

    @abstractmethod
    async def transcribe(self, instruction: str, audio: bytes, mime_type: str) -> str:
        """Send audio bytes with an instruction and return the response text."""


class GeminiClient(GenerativeModelClient):
    """google-genai backed client using the async API."""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key
        self.model = model or DEFAULT_GEMINI_MODEL
        self.base_url = base_url
        self._client: Optional[genai.Client] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
        )

    def _get_client(self) -> genai.Client:
        if self._client is None:
            http_options = None
            if self.base_url:
                http_options = types.HttpOptions(base_url=self.base_url)
            try:
                self._client = genai.Client(api_key=self.api_key, http_options=http_options)
            except Exception as e:
                raise UpstreamServiceError(f"Could not configure Gemini client: {e}") from e
        return self._client

    async def generate_json(self, prompt: str) -> str:
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[types.Content(role="user", parts=[types.Part.from_text(text=prompt)])],
                config=types.GenerateContentConfig(response_mime_type="application/json"),
            )
        except Exception as e:
            logger.error(f"Gemini generation call failed: {e}")
            raise UpstreamServiceError(f"Generation request failed: {e}") from e

        return response.text or ""

    async def transcribe(self, instruction: str, audio: bytes, mime_type: str) -> str:
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Content(
                        role="user",
                        parts=[
                            types.Part.from_text(text=instruction),
                            types.Part.from_bytes(data=audio, mime_type=mime_type),
                        ],
                    )
                ],
            )
        except Exception as e:
            logger.error(f"Gemini transcription call failed: {e}")
            raise UpstreamServiceError(f"Transcription request failed: {e}") from e

        return response.text or ""
