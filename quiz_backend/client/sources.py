"""
Question sources for the quiz session.

The source is chosen once, when the session is built: the live backend or a
static fixture that needs no server at all.
"""
from __future__ import annotations

import copy
from typing import Dict, Optional, Protocol

from quiz_backend.client.api_client import QuizApiClient
from quiz_backend.config import Settings

MOCK_QUESTION: Dict = {
    "id": 999,
    "stem": "（Mock）下面哪个是 HTTP 状态码 200 的含义？",
    "options": [
        {"id": 1, "text": "成功"},
        {"id": 2, "text": "未找到"},
    ],
    "explanation": "200 表示请求成功",
}


class QuestionSource(Protocol):
    async def next_question(self) -> Optional[Dict]:
        ...

    async def submit(self, question: Dict, option_id: int) -> Dict:
        """Returns {"correct", "correctOptionId", "explanation"}."""
        ...


class LiveQuestionSource:
    def __init__(self, api: QuizApiClient):
        self._api = api

    async def next_question(self) -> Optional[Dict]:
        questions = await self._api.fetch_questions(1)
        return questions[0] if questions else None

    async def submit(self, question: Dict, option_id: int) -> Dict:
        return await self._api.submit_answer(question["id"], option_id)


class MockQuestionSource:
    """
    One canned question. The second listed option counts as correct; this
    stand-in rule is not tied to any stored correctness flag.
    """

    async def next_question(self) -> Optional[Dict]:
        return copy.deepcopy(MOCK_QUESTION)

    async def submit(self, question: Dict, option_id: int) -> Dict:
        options = question["options"]
        second = options[1] if len(options) > 1 else None
        correct = second is not None and option_id == second["id"]
        correct_option = next((o for o in options if o["text"] == "成功"), None)
        return {
            "correct": correct,
            "correctOptionId": correct_option["id"] if correct_option else None,
            "explanation": question.get("explanation"),
        }


def make_question_source(settings: Settings, api: Optional[QuizApiClient] = None) -> QuestionSource:
    if settings.mock_mode:
        return MockQuestionSource()
    return LiveQuestionSource(api or QuizApiClient(settings.api_base))
