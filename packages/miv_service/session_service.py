import uuid
from collections import OrderedDict
from typing import Callable, List, Optional

from packages.miv_core.errors import (
    InterviewAlreadyTakenError,
    NotOnboardedError,
    QuestionNotFoundError,
)
from packages.miv_core.logging import get_logger
from packages.miv_dto.session import SessionResponseDTO, OnboardingResultDTO
from packages.miv_history.repository import InterviewRecordRepository
from packages.miv_providers.question import QuestionGenerator
from packages.miv_providers.report import ReportGenerator
from packages.miv_providers.scoring import AnswerScorer
from packages.miv_report.aggregator import summarize
from packages.miv_report.dto import EvaluationReport, ResultSummary
from packages.miv_service.mapper import SessionMapper
from packages.miv_session.dto import CandidateProfile
from packages.miv_session.engine import InterviewSessionEngine, DEFAULT_TOTAL_QUESTIONS
from packages.miv_session.provisioning import QuestionProvisioner
from packages.miv_session.repository import SessionStore
from packages.miv_session.timer import Clock

logger = get_logger("miv_service.session")

SessionStoreFactory = Callable[[str], SessionStore]

DEFAULT_MAX_OPEN_SESSIONS = 200


class SessionService:
    """
    Application Service for interview sessions.
    Responsible for:
    1. Onboarding (candidate profile into a fresh session store)
    2. Engine lifecycle (one engine per session id, created and torn down here)
    3. Orchestrating Engine calls and mapping to DTOs
    """
    def __init__(
        self,
        store_factory: SessionStoreFactory,
        record_repo: InterviewRecordRepository,
        question_generator: QuestionGenerator,
        scorer: AnswerScorer,
        report_generator: ReportGenerator,
        total_questions: int = DEFAULT_TOTAL_QUESTIONS,
        clock: Optional[Clock] = None,
        max_open_sessions: int = DEFAULT_MAX_OPEN_SESSIONS
    ):
        self.store_factory = store_factory
        self.record_repo = record_repo
        self.provisioner = QuestionProvisioner(question_generator)
        self.scorer = scorer
        self.report_generator = report_generator
        self.total_questions = total_questions
        self.clock = clock or Clock()
        self.max_open_sessions = max(1, max_open_sessions)
        # Least recently used first
        self._engines: "OrderedDict[str, InterviewSessionEngine]" = OrderedDict()

    # --- Onboarding ---

    def onboard(self, name: str, email: str, phone: str = "", skills: Optional[List[str]] = None) -> OnboardingResultDTO:
        """
        Create a session for a new candidate.
        A candidate whose email already has an interview record cannot start another.
        """
        if self.record_repo.find_by_email(email):
            logger.warning(f"Onboarding refused, interview already taken: {email}")
            raise InterviewAlreadyTakenError(email)

        candidate = CandidateProfile(name=name, email=email, phone=phone, skills=list(skills or []))
        session_id = f"sess_{uuid.uuid4().hex}"
        self.store_factory(session_id).save_candidate(candidate)
        logger.info(f"Onboarded {candidate.id} into session {session_id}")
        return OnboardingResultDTO(session_id=session_id, candidate_id=candidate.id)

    def get_candidate(self, session_id: str) -> CandidateProfile:
        engine = self._engines.get(session_id)
        if engine and engine.candidate:
            return engine.candidate
        candidate = self.store_factory(session_id).get_candidate()
        if candidate is None:
            raise NotOnboardedError(details={"session_id": session_id})
        return candidate

    # --- Engine lifecycle ---

    def _evict_if_full(self) -> None:
        """
        Drop engines until there is room for one more.
        Reported interviews go first, then the least recently used idle engine.
        Engines with a call in flight are never dropped.
        """
        while len(self._engines) >= self.max_open_sessions:
            idle = [sid for sid, e in self._engines.items() if not e.busy]
            if not idle:
                logger.warning(f"All {len(self._engines)} open sessions are busy, registry over capacity")
                return
            reported = [sid for sid in idle if self._engines[sid].state and self._engines[sid].state.record_id]
            victim = (reported or idle)[0]
            logger.info(f"Evicting session {victim} from the engine registry")
            self.close_session(victim)

    def _get_engine(self, session_id: str) -> InterviewSessionEngine:
        engine = self._engines.get(session_id)
        if engine is not None:
            self._engines.move_to_end(session_id)
        else:
            self._evict_if_full()
            engine = InterviewSessionEngine(
                session_id=session_id,
                store=self.store_factory(session_id),
                provisioner=self.provisioner,
                scorer=self.scorer,
                record_repo=self.record_repo,
                total_questions=self.total_questions,
                clock=self.clock,
            )
            self._engines[session_id] = engine
        return engine

    async def _ready_engine(self, session_id: str) -> InterviewSessionEngine:
        engine = self._get_engine(session_id)
        if engine.state is None:
            await engine.initialize()
        return engine

    async def open_session(self, session_id: str) -> SessionResponseDTO:
        """(Re)load the session from its store, e.g. after a page reload."""
        engine = self._get_engine(session_id)
        await engine.initialize()
        return SessionMapper.to_dto(engine)

    def close_session(self, session_id: str) -> None:
        engine = self._engines.pop(session_id, None)
        if engine is not None:
            engine.teardown()

    # --- Commands ---

    async def get_session(self, session_id: str) -> SessionResponseDTO:
        engine = await self._ready_engine(session_id)
        return SessionMapper.to_dto(engine)

    async def submit_answer(self, session_id: str, text: str) -> SessionResponseDTO:
        engine = await self._ready_engine(session_id)
        await engine.submit_answer(text)
        return SessionMapper.to_dto(engine)

    async def tick(self, session_id: str, draft: str = "") -> SessionResponseDTO:
        engine = await self._ready_engine(session_id)
        await engine.tick(draft)
        return SessionMapper.to_dto(engine)

    async def advance(self, session_id: str) -> SessionResponseDTO:
        engine = await self._ready_engine(session_id)
        await engine.advance()
        return SessionMapper.to_dto(engine)

    async def toggle_pause(self, session_id: str) -> SessionResponseDTO:
        engine = await self._ready_engine(session_id)
        engine.pause_toggle()
        return SessionMapper.to_dto(engine)

    async def submit_record(self, session_id: str) -> SessionResponseDTO:
        engine = await self._ready_engine(session_id)
        await engine.submit_record()
        return SessionMapper.to_dto(engine)

    # --- Results ---

    async def get_summary(self, session_id: str) -> ResultSummary:
        engine = await self._ready_engine(session_id)
        return summarize(engine.state.questions)

    async def get_solution(self, session_id: str, question_id: str) -> str:
        """Reference solution of a question, available once the question was submitted."""
        engine = await self._ready_engine(session_id)
        question = next((q for q in engine.state.questions if q.id == question_id), None)
        if question is None:
            raise QuestionNotFoundError(details={"question_id": question_id})
        if not question.is_submitted or not question.reference_solution:
            raise QuestionNotFoundError(
                message="Solution not available for this question.",
                details={"question_id": question_id}
            )
        return question.reference_solution

    async def generate_report(self, session_id: str) -> EvaluationReport:
        engine = await self._ready_engine(session_id)
        return await self.report_generator.generate(engine.state.questions, engine.candidate)
