from typing import Dict, List, Optional, Tuple
import logging
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from ..db.models.question_model import QuestionModel, OptionModel
from ..db.models.attempt_model import AnswerAttemptModel
from quiz_backend.presentation.schemas.question_schema import QuestionCreate

logger = logging.getLogger(__name__)

_RAND_DIALECTS = ("mysql", "mariadb")


def validate_question(data: QuestionCreate) -> None:
    """Reject questions that could not be answered unambiguously."""
    if not data.stem or not data.stem.strip():
        raise ValueError("Question stem must not be empty")
    if len(data.options) < 2:
        raise ValueError(f"Question '{data.stem}' must have at least 2 options")
    if sum(o.is_correct for o in data.options) != 1:
        raise ValueError(f"Question '{data.stem}' must have exactly 1 correct option")


class QuestionRepository:
    def __init__(self, db: Session):
        self.db = db

    def _random_order(self):
        dialect = self.db.get_bind().dialect.name
        return func.rand() if dialect in _RAND_DIALECTS else func.random()

    def get_random(self, limit: int) -> List[QuestionModel]:
        """
        Random sample scored over the whole table by the engine (ORDER BY RAND()).
        Not seeded, not reproducible.
        """
        logger.debug(f"Fetching {limit} random questions")
        questions = (
            self.db.query(QuestionModel)
            .options(selectinload(QuestionModel.options))
            .order_by(self._random_order())
            .limit(limit)
            .all()
        )
        logger.info(f"Fetched {len(questions)} random questions (requested {limit})")
        return questions

    def get_by_id(self, question_id: int) -> Optional[QuestionModel]:
        logger.debug(f"Fetching question by id={question_id}")
        question = (
            self.db.query(QuestionModel)
            .options(selectinload(QuestionModel.options))
            .filter(QuestionModel.id == question_id)
            .first()
        )
        if not question:
            logger.warning(f"Question not found: id={question_id}")
        return question

    def get_option(self, option_id: int) -> Optional[OptionModel]:
        option = self.db.query(OptionModel).filter(OptionModel.id == option_id).first()
        if not option:
            logger.warning(f"Option not found: id={option_id}")
        return option

    def get_correct_option(self, question_id: int) -> Optional[OptionModel]:
        # First match wins if the data ever holds more than one flagged option
        return (
            self.db.query(OptionModel)
            .filter(OptionModel.question_id == question_id, OptionModel.is_correct.is_(True))
            .order_by(OptionModel.id)
            .first()
        )

    def find_by_stem(self, stem: str) -> Optional[QuestionModel]:
        return self.db.query(QuestionModel).filter(QuestionModel.stem == stem).first()

    def list_all(self) -> List[QuestionModel]:
        return self.db.query(QuestionModel).order_by(QuestionModel.id).all()

    def count(self) -> int:
        return self.db.query(QuestionModel).count()

    def create_question(self, data: QuestionCreate) -> QuestionModel:
        try:
            validate_question(data)
            question = QuestionModel(
                stem=data.stem,
                explanation=data.explanation,
                tags=data.tags,
            )
            self.db.add(question)
            self.db.flush()  # get question.id

            for o in data.options:
                self.db.add(OptionModel(text=o.text, is_correct=o.is_correct, question_id=question.id))

            self.db.commit()
            self.db.refresh(question)
            logger.info(f"Created question {question.id} with {len(data.options)} options")
            return question
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Database error creating question '{data.stem}': {e}", exc_info=True)
            self.db.rollback()
            raise

    def upsert_question(self, data: QuestionCreate) -> Tuple[QuestionModel, bool]:
        """
        Insert a question, or replace explanation, tags and options of the
        question that already has the same stem. Returns (question, created).
        """
        validate_question(data)
        existing = self.find_by_stem(data.stem)
        if existing is None:
            return self.create_question(data), True

        try:
            self.db.query(OptionModel).filter(OptionModel.question_id == existing.id).delete(
                synchronize_session=False
            )
            existing.explanation = data.explanation
            existing.tags = data.tags
            for o in data.options:
                self.db.add(OptionModel(text=o.text, is_correct=o.is_correct, question_id=existing.id))
            self.db.commit()
            self.db.refresh(existing)
            logger.info(f"Updated question {existing.id} ('{data.stem}')")
            return existing, False
        except Exception as e:
            logger.error(f"Database error updating question '{data.stem}': {e}", exc_info=True)
            self.db.rollback()
            raise

    def delete_all(self) -> Dict[str, int]:
        """Delete attempts, then options, then questions."""
        try:
            attempts = self.db.query(AnswerAttemptModel).delete(synchronize_session=False)
            options = self.db.query(OptionModel).delete(synchronize_session=False)
            questions = self.db.query(QuestionModel).delete(synchronize_session=False)
            self.db.commit()
            self.db.expire_all()
            logger.info(f"Deleted {attempts} attempts, {options} options, {questions} questions")
            return {"attempts": attempts, "options": options, "questions": questions}
        except Exception as e:
            logger.error(f"Database error wiping questions: {e}", exc_info=True)
            self.db.rollback()
            raise
