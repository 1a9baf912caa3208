from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Boolean, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..base import Base

class QuestionModel(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    stem = Column(String(500), nullable=False)
    explanation = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)  # list of tag strings
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    options = relationship(
        "OptionModel",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="OptionModel.id",
    )

class OptionModel(Base):
    __tablename__ = "options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(String(500), nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)

    # Relationships
    question = relationship("QuestionModel", back_populates="options")
