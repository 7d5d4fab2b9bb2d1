"""Unit tests for the polling client against a mocked transport."""

import asyncio

import httpx
import pytest

from case_care_service.client import AnalysisTimeoutError, CaseCareClient


def _case(status, insight=None):
    return {"id": 1, "title": "Fever", "patientName": "Jane Roe", "status": status, "insight": insight}


@pytest.mark.unit
class TestWaitForAnalysis:
    def test_polls_until_terminal(self):
        statuses = iter(["pending", "analyzing", "analyzing", "completed"])
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            status = next(statuses)
            insight = {"summary": "ok"} if status == "completed" else None
            return httpx.Response(200, json=_case(status, insight))

        async def scenario():
            async with CaseCareClient("http://test", transport=httpx.MockTransport(handler)) as client:
                return await client.wait_for_analysis(1, interval=0)

        final = asyncio.run(scenario())

        assert final["status"] == "completed"
        assert final["insight"] == {"summary": "ok"}
        assert seen == ["/api/cases/1"] * 4

    def test_stops_on_failed(self):
        def handler(request):
            return httpx.Response(200, json=_case("failed"))

        async def scenario():
            async with CaseCareClient("http://test", transport=httpx.MockTransport(handler)) as client:
                return await client.wait_for_analysis(1, interval=0)

        assert asyncio.run(scenario())["status"] == "failed"

    def test_timeout(self):
        def handler(request):
            return httpx.Response(200, json=_case("analyzing"))

        async def scenario():
            async with CaseCareClient("http://test", transport=httpx.MockTransport(handler)) as client:
                return await client.wait_for_analysis(1, interval=0.05, timeout=0)

        with pytest.raises(AnalysisTimeoutError) as exc_info:
            asyncio.run(scenario())
        assert exc_info.value.last_status == "analyzing"

    def test_missing_case_raises(self):
        def handler(request):
            return httpx.Response(404, json={"message": "Case 1 not found"})

        async def scenario():
            async with CaseCareClient("http://test", transport=httpx.MockTransport(handler)) as client:
                return await client.wait_for_analysis(1, interval=0)

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(scenario())


@pytest.mark.unit
class TestClientRequests:
    def test_create_and_transcribe(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path == "/api/transcribe":
                return httpx.Response(200, json={"text": "hello"})
            return httpx.Response(201, json=_case("pending"))

        async def scenario():
            async with CaseCareClient("http://test", transport=httpx.MockTransport(handler)) as client:
                created = await client.create_case({"title": "Fever", "patientName": "Jane Roe"})
                text = await client.transcribe(b"audio-bytes", "audio/wav")
                return created, text

        created, text = asyncio.run(scenario())

        assert created["status"] == "pending"
        assert text == "hello"
        assert requests[0].method == "POST"
        assert requests[0].url.path == "/api/cases"
        assert b"audio/wav" in requests[1].content
