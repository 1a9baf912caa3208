from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from quiz_backend.application.quiz.question_service import QuestionService
from quiz_backend.presentation.api.errors import raise_for_check
from quiz_backend.presentation.dependencies import get_question_service
from quiz_backend.presentation.schemas.answer_schema import AnswerSubmission, CheckResult
from quiz_backend.presentation.schemas.question_schema import QuestionPublicOut
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/questions", tags=["Questions"])


@router.get("", response_model=List[QuestionPublicOut])
def list_random_questions(
    limit: Optional[str] = Query(default=None),
    service: QuestionService = Depends(get_question_service),
):
    # limit stays a raw string: invalid values fall back to one question instead of a 422
    try:
        questions = service.get_random_questions(limit)
        logger.info(f"Serving {len(questions)} random questions (limit={limit})")
        return questions
    except Exception as e:
        logger.error(f"Error fetching random questions: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post("/check", response_model=CheckResult)
def check_answer(
    payload: AnswerSubmission,
    service: QuestionService = Depends(get_question_service),
):
    try:
        check = service.check_answer(payload.question_id, payload.selected_option_id)
    except Exception as e:
        logger.error(f"Error checking answer for question {payload.question_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Server Error")

    raise_for_check(check)
    return CheckResult(correct=check.correct, correct_option_id=check.correct_option_id)
