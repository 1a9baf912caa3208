from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from quiz_backend.infrastructure.db.models.question_model import QuestionModel
from quiz_backend.infrastructure.repositories.attempt_repository import AttemptRepository
from quiz_backend.infrastructure.repositories.question_repository import QuestionRepository

logger = logging.getLogger(__name__)


def coerce_limit(raw: Any, maximum: Optional[int] = None) -> int:
    """Any missing, non-numeric or non-positive limit means one question."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return 1
    if value < 1:
        return 1
    if maximum is not None and value > maximum:
        return maximum
    return value


def to_public_view(question: QuestionModel) -> Dict:
    return {
        "id": question.id,
        "stem": question.stem,
        "explanation": question.explanation,
        "tags": question.tags,
        "options": [{"id": o.id, "text": o.text} for o in question.options],
    }


class CheckStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"


@dataclass(frozen=True)
class AnswerCheck:
    status: CheckStatus
    correct: bool = False
    correct_option_id: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is CheckStatus.OK


class QuestionService:
    """
    Serves random questions and checks submitted answers.
    Stateless: every call is answered from the database alone.
    """

    def __init__(
        self,
        question_repo: QuestionRepository,
        attempt_repo: Optional[AttemptRepository] = None,
        *,
        verify_option_ownership: bool = False,
        max_limit: Optional[int] = None,
    ):
        self._questions = question_repo
        self._attempts = attempt_repo
        self._verify_ownership = verify_option_ownership
        self._max_limit = max_limit

    def get_random_questions(self, limit: Any = 1) -> List[Dict]:
        count = coerce_limit(limit, self._max_limit)
        questions = self._questions.get_random(count)
        return [to_public_view(q) for q in questions]

    def check_answer(self, question_id: int, selected_option_id: int) -> AnswerCheck:
        option = self._questions.get_option(selected_option_id)
        if option is None:
            return AnswerCheck(
                status=CheckStatus.NOT_FOUND,
                detail=f"Option {selected_option_id} not found",
            )

        if self._verify_ownership and option.question_id != question_id:
            logger.warning(
                f"Option {selected_option_id} belongs to question {option.question_id}, not {question_id}"
            )
            return AnswerCheck(
                status=CheckStatus.INVALID_INPUT,
                detail=f"Option {selected_option_id} does not belong to question {question_id}",
            )

        correct_option = self._questions.get_correct_option(question_id)
        return AnswerCheck(
            status=CheckStatus.OK,
            correct=bool(option.is_correct),
            correct_option_id=correct_option.id if correct_option else None,
        )

    def find_question_by_id(self, question_id: int) -> Optional[QuestionModel]:
        return self._questions.get_by_id(question_id)

    def record_attempt(
        self,
        question_id: int,
        selected_option_id: int,
        correct: bool,
        elapsed_ms: Optional[int] = None,
    ) -> None:
        if self._attempts is None:
            return
        self._attempts.record(question_id, selected_option_id, correct, elapsed_ms)
