"""Audio transcription through the generative model."""

import logging
from typing import Optional

from case_care_service.exceptions import ValidationError
from case_care_service.services.llm_client import GenerativeModelClient

logger = logging.getLogger(__name__)

TRANSCRIPTION_INSTRUCTION = "Transcribe this audio exactly. Do not add any commentary."
MAX_AUDIO_BYTES = 10 * 1024 * 1024


class TranscriptionService:
    """Stateless audio-to-text conversion; touches no case."""

    def __init__(self, model_client: GenerativeModelClient, max_bytes: int = MAX_AUDIO_BYTES):
        self.model_client = model_client
        self.max_bytes = max_bytes

    def validate(self, audio: Optional[bytes], mime_type: Optional[str]) -> None:
        """Reject uploads before any external call is made.

        Raises:
            ValidationError: Missing/empty file, oversized file, or non-audio MIME type
        """
        if not audio:
            raise ValidationError("No file uploaded", field="file")
        if len(audio) > self.max_bytes:
            raise ValidationError(
                f"File too large: {len(audio)} bytes exceeds the {self.max_bytes} byte limit",
                field="file",
            )
        if not mime_type or not mime_type.lower().startswith("audio/"):
            raise ValidationError(
                f"Unsupported file type {mime_type or 'unknown'}; expected audio/*",
                field="file",
            )

    async def transcribe(self, audio: Optional[bytes], mime_type: Optional[str]) -> str:
        """Return the transcript text (possibly empty).

        Raises:
            ValidationError: If the upload is rejected
            UpstreamServiceError: If the model call fails
        """
        self.validate(audio, mime_type)
        text = await self.model_client.transcribe(TRANSCRIPTION_INSTRUCTION, audio, mime_type) or ""
        logger.info(f"Transcribed {len(audio)} bytes of {mime_type} into {len(text)} characters")
        return text
