"""Shared test fixtures."""

import json
from contextlib import nullcontext
from typing import List, Optional, Tuple

import pytest

from case_care_service.core import CaseAnalysisOrchestrator
from case_care_service.infrastructure.persistence import InMemoryCaseRepository
from case_care_service.services import GenerativeModelClient, InsightGenerator

VALID_INSIGHT_JSON = json.dumps(
    {
        "summary": "45-year-old with exertional chest pressure relieved by rest.",
        "blindSpots": ["Anchoring on a normal resting ECG", "Premature closure"],
        "questions": [
            "Does the pain radiate to the jaw?",
            "Any family history of early coronary disease?",
            "Any shortness of breath on exertion?",
        ],
        "originalLanguage": "English",
    }
)


class FakeModelClient(GenerativeModelClient):
    """Records every call and answers with canned text or raises ``error``."""

    def __init__(
        self,
        response: Optional[str] = VALID_INSIGHT_JSON,
        transcript: Optional[str] = "I feel hot and tired",
        error: Optional[Exception] = None,
    ):
        self.response = response
        self.transcript = transcript
        self.error = error
        self.prompts: List[str] = []
        self.transcriptions: List[Tuple[str, bytes, str]] = []

    async def generate_json(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response

    async def transcribe(self, instruction: str, audio: bytes, mime_type: str) -> str:
        self.transcriptions.append((instruction, audio, mime_type))
        if self.error is not None:
            raise self.error
        return self.transcript


@pytest.fixture
def repository() -> InMemoryCaseRepository:
    return InMemoryCaseRepository()


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


def make_orchestrator(repository, model_client, max_concurrent: int = 4) -> CaseAnalysisOrchestrator:
    return CaseAnalysisOrchestrator(
        generator=InsightGenerator(model_client),
        repository_scope=lambda: nullcontext(repository),
        max_concurrent=max_concurrent,
    )


@pytest.fixture
def orchestrator(repository, model_client) -> CaseAnalysisOrchestrator:
    return make_orchestrator(repository, model_client)
