from abc import ABC, abstractmethod
from typing import List, Optional
from .dto import CandidateProfile, InterviewState, Question

class SessionStore(ABC):
    """
    Interface for the durable per-session store.
    Three logical tables keyed by record id: candidates, interview state
    (singleton, last write wins) and question snapshots.
    Implementations raise StorageUnavailableError on I/O failure.
    """
    @abstractmethod
    def get_candidate(self) -> Optional[CandidateProfile]:
        pass

    @abstractmethod
    def save_candidate(self, candidate: CandidateProfile) -> None:
        pass

    @abstractmethod
    def get_interview_state(self) -> Optional[InterviewState]:
        pass

    @abstractmethod
    def save_interview_state(self, state: InterviewState) -> None:
        pass

    @abstractmethod
    def save_question(self, question: Question) -> None:
        """Upsert a question snapshot."""
        pass

    @abstractmethod
    def get_all_questions(self) -> List[Question]:
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """Drop every table. Called once the interview is reported."""
        pass
