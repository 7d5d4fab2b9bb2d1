"""Unit tests for the transcription service."""

import asyncio

import pytest

from case_care_service.exceptions import UpstreamServiceError, ValidationError
from case_care_service.services import TranscriptionService
from case_care_service.services.transcription import TRANSCRIPTION_INSTRUCTION
from conftest import FakeModelClient


@pytest.mark.unit
class TestTranscriptionService:
    def test_transcribes_audio(self):
        client = FakeModelClient(transcript="hello there")
        service = TranscriptionService(client)

        text = asyncio.run(service.transcribe(b"RIFF....WAVE", "audio/wav"))

        assert text == "hello there"
        assert client.transcriptions == [(TRANSCRIPTION_INSTRUCTION, b"RIFF....WAVE", "audio/wav")]

    def test_mime_type_with_parameters_is_accepted(self):
        client = FakeModelClient(transcript="hola")
        service = TranscriptionService(client)

        assert asyncio.run(service.transcribe(b"\x1a\x45", "audio/webm;codecs=opus")) == "hola"

    def test_empty_model_output_is_not_an_error(self):
        client = FakeModelClient(transcript=None)
        service = TranscriptionService(client)

        assert asyncio.run(service.transcribe(b"data", "audio/mpeg")) == ""

    def test_non_audio_rejected_without_calling_model(self):
        client = FakeModelClient()
        service = TranscriptionService(client)

        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(service.transcribe(b"plain text", "text/plain"))

        assert exc_info.value.field == "file"
        assert client.transcriptions == []

    @pytest.mark.parametrize("audio", [None, b""])
    def test_missing_file_rejected(self, audio):
        client = FakeModelClient()
        service = TranscriptionService(client)

        with pytest.raises(ValidationError, match="No file uploaded"):
            asyncio.run(service.transcribe(audio, "audio/wav"))
        assert client.transcriptions == []

    def test_oversized_file_rejected(self):
        client = FakeModelClient()
        service = TranscriptionService(client, max_bytes=4)

        with pytest.raises(ValidationError, match="too large"):
            asyncio.run(service.transcribe(b"12345", "audio/wav"))
        assert client.transcriptions == []

    def test_file_at_limit_accepted(self):
        client = FakeModelClient(transcript="ok")
        service = TranscriptionService(client, max_bytes=4)

        assert asyncio.run(service.transcribe(b"1234", "audio/wav")) == "ok"

    def test_model_failure_propagates(self):
        client = FakeModelClient(error=UpstreamServiceError("quota exceeded"))
        service = TranscriptionService(client)

        with pytest.raises(UpstreamServiceError):
            asyncio.run(service.transcribe(b"data", "audio/wav"))
