from typing import List
from pydantic import BaseModel, Field

from packages.miv_history.dto import InterviewRecordMetadata
from packages.miv_session.dto import CandidateProfile, Question

# --- Request Schemas ---

class CandidateCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = ""
    skills: List[str] = Field(default_factory=list)

class AnswerSubmitRequest(BaseModel):
    text: str = ""

class TickRequest(BaseModel):
    draft: str = Field(default="", description="Current draft, submitted if the clock runs out")

class InterviewSubmitRequest(BaseModel):
    questions: List[Question]
    candidate: CandidateProfile

# --- Response Schemas ---

class SolutionResponse(BaseModel):
    question_id: str
    solution: str

class InterviewSubmitResponse(BaseModel):
    interview_id: str

class DashboardResponse(BaseModel):
    total_interviews: int
    average_score: float
    interviews: List[InterviewRecordMetadata] = Field(default_factory=list)
