"""Unit tests for the demonstration case and its startup task."""

import asyncio

import pytest

from case_care_service.core import DEMO_CASE, seed_demo_case
from case_care_service.main import app, shutdown
from case_care_service.models import CaseStatus, NewCase


@pytest.mark.unit
class TestSeedDemoCase:
    """Demo data is only written to an empty store"""

    def test_seeds_empty_repository(self, repository):
        case = asyncio.run(seed_demo_case(repository))

        assert case is not None
        assert case.title == "Chest Pain - 45M"
        assert case.patient_name == "John Doe"
        assert case.patient_age == 45
        assert case.status is CaseStatus.PENDING

        stored = asyncio.run(repository.list_cases())
        assert [c.id for c in stored] == [case.id]
        assert stored[0].transcript == DEMO_CASE.transcript

    def test_skips_non_empty_repository(self, repository):
        existing = asyncio.run(
            repository.create_case(NewCase(title="Fever", patient_name="Jane Roe"))
        )

        assert asyncio.run(seed_demo_case(repository)) is None
        assert [c.id for c in asyncio.run(repository.list_cases())] == [existing.id]

    def test_seeds_only_once(self, repository):
        first = asyncio.run(seed_demo_case(repository))
        second = asyncio.run(seed_demo_case(repository))

        assert first is not None
        assert second is None
        assert len(asyncio.run(repository.list_cases())) == 1


@pytest.mark.unit
class TestShutdown:
    """Shutdown does not leave the demo analysis pending"""

    def test_cancels_running_seed_analysis(self):
        async def scenario():
            task = asyncio.create_task(asyncio.sleep(3600))
            app.state.seed_analysis_task = task
            await asyncio.sleep(0)
            await shutdown()
            return task

        try:
            task = asyncio.run(scenario())
        finally:
            app.state.seed_analysis_task = None

        assert task.cancelled()

    def test_finished_seed_analysis_is_left_alone(self):
        async def scenario():
            task = asyncio.create_task(asyncio.sleep(0, result=CaseStatus.COMPLETED))
            await task
            app.state.seed_analysis_task = task
            await shutdown()
            return task

        try:
            task = asyncio.run(scenario())
        finally:
            app.state.seed_analysis_task = None

        assert task.result() is CaseStatus.COMPLETED

    def test_without_seed_task(self):
        asyncio.run(shutdown())

        assert app.state.seed_analysis_task is None
