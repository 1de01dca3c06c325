from datetime import datetime
from typing import List
from pydantic import BaseModel, Field

from packages.miv_session.dto import CandidateProfile, Question


class InterviewRecord(BaseModel):
    """
    Completed interview as kept by the interview record store.
    """
    interview_id: str = Field(..., description="Unique identifier for the interview")
    status: str = Field(default="COMPLETED")
    score: float = Field(..., description="Average score over answered questions")
    completed_at: datetime = Field(..., description="When the interview was saved")
    candidate: CandidateProfile
    questions: List[Question]


class InterviewRecordMetadata(BaseModel):
    """
    Metadata for a stored interview.
    Used for the recruiter dashboard without loading every question.
    """
    interview_id: str = Field(..., description="Unique identifier for the interview")
    timestamp: datetime = Field(..., description="When the interview was saved")
    candidate_name: str
    candidate_email: str
    score: float = Field(..., description="Average score")
    answered_count: int
    total_questions: int
    status: str = Field(default="COMPLETED")
    file_path: str = Field(..., description="Relative path to the storage file")
