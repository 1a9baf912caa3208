"""Async HTTP client for the quiz API."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class QuizApiError(Exception):
    pass


class QuizApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    async def fetch_questions(self, limit: int = 1) -> List[Dict]:
        try:
            res = await self._client.get("/questions", params={"limit": limit})
        except httpx.HTTPError as e:
            logger.warning(f"Fetching questions failed: {e}")
            raise QuizApiError("Failed to fetch questions") from e
        if res.is_error:
            logger.warning(f"Fetching questions returned {res.status_code}")
            raise QuizApiError("Failed to fetch questions")
        return res.json()

    async def submit_answer(
        self,
        question_id: int,
        selected_option_id: int,
        elapsed_ms: Optional[int] = None,
    ) -> Dict:
        body: Dict = {"questionId": question_id, "selectedOptionId": selected_option_id}
        if elapsed_ms is not None:
            body["elapsedMs"] = elapsed_ms
        try:
            res = await self._client.post("/answers", json=body)
        except httpx.HTTPError as e:
            logger.warning(f"Submitting answer failed: {e}")
            raise QuizApiError("Failed to submit answer") from e
        if res.is_error:
            logger.warning(f"Submitting answer returned {res.status_code}")
            raise QuizApiError("Failed to submit answer")
        return res.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
