from pydantic import BaseModel, Field
from typing import Optional

class AnswerSubmission(BaseModel):
    question_id: int = Field(alias="questionId")
    selected_option_id: int = Field(alias="selectedOptionId")
    elapsed_ms: Optional[int] = Field(default=None, alias="elapsedMs")

    class Config:
        populate_by_name = True

class CheckResult(BaseModel):
    correct: bool
    correct_option_id: Optional[int] = Field(default=None, alias="correctOptionId")

    class Config:
        populate_by_name = True

class AnswerResult(CheckResult):
    explanation: Optional[str] = None
