# question_schema.py
from pydantic import BaseModel, Field
from typing import List, Optional

class OptionCreate(BaseModel):
    text: str
    is_correct: bool = Field(default=False, alias="isCorrect")

    class Config:
        populate_by_name = True

class QuestionCreate(BaseModel):
    stem: str
    explanation: Optional[str] = None
    tags: Optional[List[str]] = None
    options: List[OptionCreate]

class OptionPublicOut(BaseModel):
    id: int
    text: str

    class Config:
        from_attributes = True

class QuestionPublicOut(BaseModel):
    id: int
    stem: str
    explanation: Optional[str] = None
    tags: Optional[List[str]] = None
    options: List[OptionPublicOut]  # No correctness flag: clients must not see the answer

    class Config:
        from_attributes = True

class QuestionSummaryOut(BaseModel):
    id: int
    stem: str

    class Config:
        from_attributes = True
