"""External model services: insight generation and transcription."""

from .insight_generator import (
    InsightGenerator,
    build_analysis_prompt,
    parse_insight_response,
)
from .llm_client import GeminiClient, GenerativeModelClient
from .transcription import TranscriptionService

__all__ = [
    "GeminiClient",
    "GenerativeModelClient",
    "InsightGenerator",
    "TranscriptionService",
    "build_analysis_prompt",
    "parse_insight_response",
]
