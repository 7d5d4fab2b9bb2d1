"""Audio transcription route."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from case_care_service.api.dependencies import get_transcription_service
from case_care_service.exceptions import UpstreamServiceError
from case_care_service.models import ErrorResponse, TranscriptionResponse
from case_care_service.services import TranscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["transcription"])


@router.post(
    "/transcribe",
    response_model=TranscriptionResponse,
    summary="Transcribe an audio file",
    description="""
Transcribes an uploaded audio file to text. Stateless: no case is touched.

**Request**: `multipart/form-data` with a `file` field; MIME type must start
with `audio/`, size at most 10 MB.

**Response Example**:
```json
{"text": "I have had a headache for three days."}
```
    """,
    responses={
        200: {"description": "Transcript returned (may be empty)"},
        400: {"model": ErrorResponse, "description": "No file, wrong type, or too large"},
        500: {"model": ErrorResponse, "description": "Transcription failed"},
    },
)
async def transcribe_audio(
    file: Optional[UploadFile] = File(None),
    transcription_service: TranscriptionService = Depends(get_transcription_service),
):
    """Transcribe uploaded audio."""
    audio = None
    mime_type = None
    if file is not None:
        mime_type = file.content_type
        # One byte past the limit is enough to know the upload is too large
        audio = await file.read(transcription_service.max_bytes + 1)

    try:
        text = await transcription_service.transcribe(audio, mime_type)
    except UpstreamServiceError as e:
        logger.error(f"Transcription error: {e}")
        raise UpstreamServiceError("Failed to transcribe audio") from e

    return TranscriptionResponse(text=text)
