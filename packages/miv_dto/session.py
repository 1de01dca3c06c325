from typing import List, Optional
from pydantic import BaseModel, Field

class QuestionDTO(BaseModel):
    """
    Data Transfer Object for Interview Questions.
    The reference solution is never part of it.
    """
    id: str
    sequence_number: int
    prompt: str
    difficulty: str
    time_limit_seconds: int
    is_placeholder: bool
    answer: Optional[str] = None
    score: Optional[int] = None
    feedback: Optional[str] = None
    time_spent: int = 0
    submitted: bool = False

class SessionResponseDTO(BaseModel):
    """
    Data Transfer Object for an Interview Session snapshot.
    """
    session_id: str
    stage: str
    current_index: int
    total_questions: int
    time_remaining: int = Field(..., description="Seconds left on the current question")
    is_paused: bool
    is_complete: bool
    progress_percentage: float
    current_question: Optional[QuestionDTO] = None
    questions: List[QuestionDTO] = Field(default_factory=list)
    record_id: Optional[str] = None
    error: Optional[str] = None

class OnboardingResultDTO(BaseModel):
    session_id: str
    candidate_id: str
