from fastapi import HTTPException, status

from quiz_backend.application.quiz.question_service import AnswerCheck, CheckStatus

_STATUS_CODES = {
    CheckStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CheckStatus.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
}


def raise_for_check(check: AnswerCheck) -> None:
    if check.ok:
        return
    raise HTTPException(status_code=_STATUS_CODES[check.status], detail=check.detail)
