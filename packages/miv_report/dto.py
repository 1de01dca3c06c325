from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field

from packages.miv_session.policy import Difficulty


class ResultSummary(BaseModel):
    """
    Derived statistics over a question list.
    Shared by the in-session results view and the report payload.
    """
    total_questions: int = Field(..., description="Number of slots")
    answered_count: int = Field(..., description="Questions with a non-blank answer")
    average_score: float = Field(..., description="Mean score over answered questions, 0 if none")
    total_time_spent: int = Field(..., description="Seconds, all questions")
    average_score_by_difficulty: Dict[Difficulty, float] = Field(default_factory=dict)


class FinalRecommendation(str, Enum):
    HIRE = "HIRE"
    MAYBE = "MAYBE"
    NO_HIRE = "NO_HIRE"


class QuestionAnalysis(BaseModel):
    questionNumber: int
    difficulty: Difficulty
    score: int = 0
    feedback: str = ""
    timeSpent: int = 0
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)


class EvaluationReport(BaseModel):
    """
    Report Service reply.
    Field names follow the JSON contract given to the model.
    """
    overallScore: int = Field(..., ge=0, le=100)
    summary: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    questionAnalysis: List[QuestionAnalysis] = Field(default_factory=list)
    finalRecommendation: FinalRecommendation
    nextSteps: List[str] = Field(default_factory=list)
    is_fallback: bool = False
