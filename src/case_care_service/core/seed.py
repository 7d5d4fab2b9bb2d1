"""Demonstration data for an empty store."""

import logging
from typing import Optional

from case_care_service.infrastructure.persistence import CaseRepository
from case_care_service.models import Case, NewCase

logger = logging.getLogger(__name__)

DEMO_CASE = NewCase(
    title="Chest Pain - 45M",
    patient_name="John Doe",
    patient_age=45,
    clinical_notes="Patient complains of chest tightness. ECG normal.",
    transcript=(
        "I've been feeling this pressure in my chest when I walk up stairs. "
        "It goes away when I rest. Also my left arm feels a bit heavy."
    ),
)


async def seed_demo_case(repository: CaseRepository) -> Optional[Case]:
    """Create the demonstration case if no case exists yet.

    Returns:
        The created case, or None when the store already had data
    """
    if await repository.list_cases():
        return None

    case = await repository.create_case(DEMO_CASE)
    logger.info(f"Seeded demonstration case {case.id}")
    return case
