import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from packages.miv_core.errors import QuestionFrozenError
from .policy import Difficulty, difficulty_for_slot

PLACEHOLDER_PREFIX = "q_placeholder_"


class CandidateProfile(BaseModel):
    """
    Candidate submitted at onboarding.
    Immutable for the rest of the session.
    """
    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: f"candidate_{uuid.uuid4().hex}")
    name: str
    email: str
    phone: str = ""
    skills: List[str] = Field(default_factory=list, description="Ordered skill tags")


class Question(BaseModel):
    """
    One question slot of the interview.
    placeholder -> provisioned -> submitted (frozen).
    """
    id: str
    prompt: str
    difficulty: Difficulty
    answer: Optional[str] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)
    feedback: Optional[str] = None
    reference_solution: Optional[str] = None
    time_spent: int = Field(default=0, ge=0, description="Seconds spent answering")
    submitted_at: Optional[int] = Field(default=None, description="Epoch millis")

    @classmethod
    def placeholder(cls, index: int) -> "Question":
        return cls(
            id=f"{PLACEHOLDER_PREFIX}{index}",
            prompt=f"Question {index + 1}",
            difficulty=difficulty_for_slot(index),
        )

    @property
    def is_placeholder(self) -> bool:
        return self.id.startswith(PLACEHOLDER_PREFIX)

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None

    @property
    def is_answered(self) -> bool:
        return bool(self.answer and self.answer.strip())

    def record_submission(
        self,
        answer: str,
        score: int,
        feedback: str,
        time_spent: int,
        submitted_at: int
    ) -> None:
        """Set the submission fields once. Afterwards the question is frozen."""
        if self.is_submitted:
            raise QuestionFrozenError(self.id)
        self.answer = answer
        self.score = score
        self.feedback = feedback
        self.time_spent = max(0, time_spent)
        self.submitted_at = submitted_at


class InterviewState(BaseModel):
    """
    Durable state of one interview.
    Owned by the session store, mutated only by the session engine.
    """
    id: str
    questions: List[Question]
    current_index: int = Field(default=0, ge=0)
    timer_ends_at: int = Field(default=0, description="Deadline in epoch millis, 0 = not running")
    is_paused: bool = False
    paused_time_left: Optional[int] = Field(default=None, description="Seconds left when paused")
    is_complete: bool = False
    record_id: Optional[str] = None
    created_at: int
    updated_at: int

    @classmethod
    def new(cls, total_questions: int, now_ms: int) -> "InterviewState":
        return cls(
            id=f"interview_{now_ms}",
            questions=[Question.placeholder(i) for i in range(total_questions)],
            current_index=0,
            timer_ends_at=0,
            created_at=now_ms,
            updated_at=now_ms,
        )

    @property
    def current_question(self) -> Question:
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index + 1 >= len(self.questions)

    def ensure_slots(self, total_questions: int) -> bool:
        """Pad with placeholders up to `total_questions`. True if anything was added."""
        added = False
        for i in range(len(self.questions), total_questions):
            self.questions.append(Question.placeholder(i))
            added = True
        return added

    def touch(self, now_ms: int) -> None:
        self.updated_at = now_ms
