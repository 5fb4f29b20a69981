from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

class CandidateSummaryDTO(BaseModel):
    """
    One row of the interviewer dashboard.
    """
    id: str
    name: str
    email: str
    score: int
    status: str
    finalized_at: datetime

class CandidateListDTO(BaseModel):
    candidates: List[CandidateSummaryDTO]
    total_count: int

class QuestionReviewDTO(BaseModel):
    """
    An interviewer question grouped with the answer that followed it.
    """
    question_id: int
    difficulty: str
    time_limit_seconds: int
    question: str
    score: Optional[int] = None
    rationale: Optional[str] = None
    answer: Optional[str] = Field(None, description="None if the question was never answered")
    time_spent: Optional[int] = None

class CandidateDetailDTO(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    status: str
    score: int
    summary: str
    questions: List[QuestionReviewDTO]
