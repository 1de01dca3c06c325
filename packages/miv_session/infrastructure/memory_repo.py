from typing import Dict, List, Optional
from packages.miv_session.dto import CandidateProfile, InterviewState, Question
from packages.miv_session.repository import SessionStore

class MemorySessionStore(SessionStore):
    """
    In-Memory implementation of SessionStore.
    Used for local development and testing.
    Records are copied on the way in and out so callers cannot mutate the store.
    """
    def __init__(self):
        self._candidates: Dict[str, CandidateProfile] = {}
        self._state: Optional[InterviewState] = None
        self._questions: Dict[str, Question] = {}

    def get_candidate(self) -> Optional[CandidateProfile]:
        if not self._candidates:
            return None
        return list(self._candidates.values())[-1]

    def save_candidate(self, candidate: CandidateProfile) -> None:
        self._candidates.pop(candidate.id, None)
        self._candidates[candidate.id] = candidate

    def get_interview_state(self) -> Optional[InterviewState]:
        if self._state is None:
            return None
        return self._state.model_copy(deep=True)

    def save_interview_state(self, state: InterviewState) -> None:
        self._state = state.model_copy(deep=True)

    def save_question(self, question: Question) -> None:
        self._questions[question.id] = question.model_copy(deep=True)

    def get_all_questions(self) -> List[Question]:
        return [q.model_copy(deep=True) for q in self._questions.values()]

    def clear_all(self) -> None:
        self._candidates.clear()
        self._state = None
        self._questions.clear()
