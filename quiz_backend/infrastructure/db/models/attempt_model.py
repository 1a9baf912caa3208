from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..base import Base

class AnswerAttemptModel(Base):
    __tablename__ = "answer_attempts"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    selected_option_id = Column(Integer, ForeignKey("options.id", ondelete="CASCADE"), nullable=False)
    correct = Column(Boolean, nullable=False)  # Computed at time of attempt
    elapsed_ms = Column(Integer, nullable=True)
    attempted_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    question = relationship("QuestionModel")
    selected_option = relationship("OptionModel")
