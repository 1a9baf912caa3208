import hmac
import logging
from typing import Iterator, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from quiz_backend.application.quiz.question_service import QuestionService
from quiz_backend.config import Settings
from quiz_backend.infrastructure.repositories.attempt_repository import AttemptRepository
from quiz_backend.infrastructure.repositories.question_repository import QuestionRepository

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_question_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> QuestionService:
    return QuestionService(
        QuestionRepository(db),
        AttemptRepository(db) if settings.record_attempts else None,
        verify_option_ownership=settings.verify_option_ownership,
        max_limit=settings.max_question_limit,
    )


def validate_reset_request(settings: Settings, provided_secret: Optional[str]) -> None:
    """
    Guard for the test reset endpoint. Checks run in order:
    endpoint enabled, secret configured, secret matches, database is a test database.
    """
    if not settings.enable_test_endpoint:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Test endpoint disabled (ENABLE_TEST_ENDPOINT not set)",
        )

    secret = settings.test_reset_secret
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Test reset secret not configured on server",
        )

    if not provided_secret or not hmac.compare_digest(provided_secret.encode(), secret.encode()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing reset secret",
        )

    if "test" not in settings.effective_database_name.lower():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Refuse to reset non-test database (database name must include 'test')",
        )


def reset_guard(
    x_reset_secret: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    try:
        validate_reset_request(settings, x_reset_secret)
    except HTTPException as e:
        logger.warning(f"Test reset rejected ({e.status_code}): {e.detail}")
        raise
