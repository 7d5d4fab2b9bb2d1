"""Async HTTP client for the case API, including the polling loop.

Usage::

    async with CaseCareClient("http://localhost:8004") as client:
        case = await client.create_case({"title": "Fever", "patientName": "Jane Roe"})
        final = await client.wait_for_analysis(case["id"])
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
TERMINAL_STATUSES = frozenset({"completed", "failed"})


class AnalysisTimeoutError(Exception):
    """The case did not reach a terminal status before the deadline."""

    def __init__(self, case_id: int, last_status: Optional[str]):
        super().__init__(f"Case {case_id} still {last_status!r} after timeout")
        self.case_id = case_id
        self.last_status = last_status


class CaseCareClient:
    """Thin wrapper over ``httpx.AsyncClient``; non-2xx responses raise ``httpx.HTTPStatusError``."""

    def __init__(
        self,
        base_url: str = "http://localhost:8004",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "CaseCareClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_cases(self) -> List[Dict[str, Any]]:
        response = await self._client.get("/api/cases")
        response.raise_for_status()
        return response.json()

    async def get_case(self, case_id: int) -> Dict[str, Any]:
        response = await self._client.get(f"/api/cases/{case_id}")
        response.raise_for_status()
        return response.json()

    async def create_case(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.post("/api/cases", json=payload)
        response.raise_for_status()
        return response.json()

    async def delete_case(self, case_id: int) -> None:
        response = await self._client.delete(f"/api/cases/{case_id}")
        response.raise_for_status()

    async def transcribe(self, audio: bytes, mime_type: str, filename: str = "recording") -> str:
        response = await self._client.post(
            "/api/transcribe",
            files={"file": (filename, audio, mime_type)},
        )
        response.raise_for_status()
        return response.json()["text"]

    async def wait_for_analysis(
        self,
        case_id: int,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Poll a case until its status is ``completed`` or ``failed``.

        Args:
            case_id: Case to watch
            interval: Seconds between reads
            timeout: Give up after this many seconds (None waits indefinitely)

        Returns:
            The case as last read, with its insight if analysis completed

        Raises:
            AnalysisTimeoutError: If ``timeout`` elapses first
            httpx.HTTPStatusError: If a read fails (e.g. the case was deleted)
        """
        deadline = time.monotonic() + timeout if timeout is not None else None

        while True:
            case = await self.get_case(case_id)
            status = case.get("status")
            if status in TERMINAL_STATUSES:
                return case

            if deadline is not None and time.monotonic() + interval > deadline:
                raise AnalysisTimeoutError(case_id, status)

            logger.debug(f"Case {case_id} is {status}; next poll in {interval}s")
            await asyncio.sleep(interval)
