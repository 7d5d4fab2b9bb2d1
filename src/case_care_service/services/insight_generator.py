"""Clinical insight generation.

One case in, one structured insight out, through a single JSON-mode call to
the generative model. Missing keys in the model's answer are tolerated and
map to empty fields; text that is not a JSON object is an analysis failure.
"""

import json
import logging
from typing import Any, List, Optional

from case_care_service.exceptions import UpstreamServiceError
from case_care_service.models.case import Case, InsightDraft
from case_care_service.services.llm_client import GenerativeModelClient

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT_TEMPLATE = """\
You are a specialized medical reasoning agent "Case -> Care".
Analyze the following patient case data.

Patient: {patient_name}, Age: {patient_age}
Clinical Notes: {clinical_notes}
Patient Voice Transcript: {transcript}

Your task:
1. Synthesize a brief clinical summary.
2. Identify diagnostic blind spots or potential biases (e.g., anchoring bias, premature closure).
3. Generate 3-5 clear, relevant follow-up questions for the clinician to ask the patient or check.
4. Detect the primary language of the transcript.

Return the output as valid JSON with this structure:
{{
  "summary": "...",
  "blindSpots": ["..."],
  "questions": ["..."],
  "originalLanguage": "..."
}}
"""


def build_analysis_prompt(
    patient_name: str,
    patient_age: Optional[int] = None,
    clinical_notes: Optional[str] = None,
    transcript: Optional[str] = None,
) -> str:
    """Fill the analysis prompt; absent fields read as Unknown/None."""
    return ANALYSIS_PROMPT_TEMPLATE.format(
        patient_name=patient_name,
        patient_age=patient_age if patient_age is not None else "Unknown",
        clinical_notes=clinical_notes or "None",
        transcript=transcript or "None",
    )


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _as_text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float))]


def parse_insight_response(raw: Optional[str]) -> InsightDraft:
    """Map the model's JSON answer onto an InsightDraft.

    An empty answer counts as ``{}``.

    Raises:
        UpstreamServiceError: If the text is not valid JSON or not an object
    """
    text = (raw or "").strip() or "{}"
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise UpstreamServiceError(f"Model returned invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise UpstreamServiceError(
            f"Model returned JSON {type(payload).__name__}, expected an object"
        )

    return InsightDraft(
        summary=_as_text(payload.get("summary")),
        blind_spots=_as_text_list(payload.get("blindSpots")),
        questions=_as_text_list(payload.get("questions")),
        original_language=_as_text(payload.get("originalLanguage")),
    )


class InsightGenerator:
    """Turns a case into an insight through the injected model client."""

    def __init__(self, model_client: GenerativeModelClient):
        self.model_client = model_client

    async def generate(self, case: Case) -> InsightDraft:
        """Run one analysis call for ``case``.

        Raises:
            UpstreamServiceError: If the call fails or the answer is unusable
        """
        prompt = build_analysis_prompt(
            patient_name=case.patient_name,
            patient_age=case.patient_age,
            clinical_notes=case.clinical_notes,
            transcript=case.transcript,
        )
        raw = await self.model_client.generate_json(prompt)
        draft = parse_insight_response(raw)

        logger.debug(
            f"Insight for case {case.id}: {len(draft.blind_spots)} blind spots, "
            f"{len(draft.questions)} questions"
        )
        return draft
