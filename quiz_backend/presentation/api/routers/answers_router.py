from fastapi import APIRouter, Depends, HTTPException
from quiz_backend.application.quiz.question_service import QuestionService
from quiz_backend.presentation.api.errors import raise_for_check
from quiz_backend.presentation.dependencies import get_question_service
from quiz_backend.presentation.schemas.answer_schema import AnswerSubmission, AnswerResult
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/answers", tags=["Answers"])


@router.post("", response_model=AnswerResult)
def submit_answer(
    payload: AnswerSubmission,
    service: QuestionService = Depends(get_question_service),
):
    logger.info(
        f"Answer submitted for question {payload.question_id} with option {payload.selected_option_id}"
    )
    question = None
    try:
        check = service.check_answer(payload.question_id, payload.selected_option_id)
        if check.ok:
            question = service.find_question_by_id(payload.question_id)
            service.record_attempt(
                payload.question_id,
                payload.selected_option_id,
                check.correct,
                payload.elapsed_ms,
            )
    except Exception as e:
        logger.error(f"Error submitting answer for question {payload.question_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Server Error")

    raise_for_check(check)
    logger.info(f"Question {payload.question_id} answered. Correct: {check.correct}")
    return AnswerResult(
        correct=check.correct,
        correct_option_id=check.correct_option_id,
        explanation=question.explanation if question else None,
    )
