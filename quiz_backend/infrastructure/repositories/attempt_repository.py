from typing import Optional
import logging
from sqlalchemy.orm import Session
from ..db.models.attempt_model import AnswerAttemptModel

logger = logging.getLogger(__name__)


class AttemptRepository:
    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        question_id: int,
        selected_option_id: int,
        correct: bool,
        elapsed_ms: Optional[int] = None,
    ) -> AnswerAttemptModel:
        try:
            attempt = AnswerAttemptModel(
                question_id=question_id,
                selected_option_id=selected_option_id,
                correct=correct,
                elapsed_ms=elapsed_ms,
            )
            self.db.add(attempt)
            self.db.commit()
            self.db.refresh(attempt)
            logger.debug(f"Recorded attempt {attempt.id} for question {question_id}")
            return attempt
        except Exception as e:
            logger.error(f"Database error recording attempt for question {question_id}: {e}", exc_info=True)
            self.db.rollback()
            raise

    def count(self) -> int:
        return self.db.query(AnswerAttemptModel).count()
