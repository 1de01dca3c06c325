from typing import Optional

from packages.miv_core.errors import (
    GenerationFailedError,
    NotOnboardedError,
    RecordSubmissionError,
    ScoringFailedError,
)
from packages.miv_core.logging import get_logger
from packages.miv_history.repository import InterviewRecordRepository
from packages.miv_providers.scoring import AnswerScorer
from .dto import CandidateProfile, InterviewState, Question
from .policy import TIME_UP_FEEDBACK, allotted_seconds
from .provisioning import QuestionProvisioner
from .repository import SessionStore
from .state import SessionStage, SessionEvent
from .timer import Clock, CountdownTimer, TimerEvent

# Logger setup
logger = get_logger("miv.session")

DEFAULT_TOTAL_QUESTIONS = 6


class InterviewSessionEngine:
    """
    Core Logic for one Interview Session.
    Owns question progression, the answer clock, submission and completion.

    The engine is the explicit session handle: the caller creates it with the
    session's store, calls initialize(), routes events to it and finally calls
    teardown(). Every transition is written to the store before it returns, so
    a fresh engine on the same store resumes where the last one stopped.
    """
    def __init__(
        self,
        session_id: str,
        store: SessionStore,
        provisioner: QuestionProvisioner,
        scorer: AnswerScorer,
        record_repo: InterviewRecordRepository,
        total_questions: int = DEFAULT_TOTAL_QUESTIONS,
        clock: Optional[Clock] = None
    ):
        self.session_id = session_id
        self.store = store
        self.provisioner = provisioner
        self.scorer = scorer
        self.record_repo = record_repo
        self.total_questions = total_questions
        self.clock = clock or Clock()
        self.timer = CountdownTimer(self.clock)

        self.stage = SessionStage.LOADING
        self.state: Optional[InterviewState] = None
        self.candidate: Optional[CandidateProfile] = None
        self.last_error: Optional[str] = None
        self._provisioning = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def current_question(self) -> Optional[Question]:
        if self.state is None:
            return None
        return self.state.current_question

    @property
    def busy(self) -> bool:
        """A scoring or generation call is in flight."""
        return self.stage == SessionStage.SUBMITTING or self._provisioning

    def time_remaining(self) -> int:
        return self.timer.remaining()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def initialize(self) -> SessionStage:
        """
        Load candidate and interview state, then reconcile the clock.
        Raises NotOnboardedError when no candidate profile exists.
        """
        if self.busy:
            # The in-flight call owns the state; a reload must not replace it
            logger.info(f"Session {self.session_id}: reload while a call is in flight, keeping current state")
            return self.stage
        if self.state is not None and self.state.is_complete:
            # Store is cleared once the record is filed; results live in memory only
            self.timer.hold(0)
            self.stage = SessionStage.COMPLETE
            return self.stage

        candidate = self.store.get_candidate()
        if candidate is None:
            logger.warning(f"Session {self.session_id} has no candidate profile")
            raise NotOnboardedError(details={"session_id": self.session_id})
        self.candidate = candidate
        self.stage = SessionStage.LOADING
        self.last_error = None

        state = self.store.get_interview_state()
        if state is None:
            state = InterviewState.new(self.total_questions, self.clock.now_ms())
            self.state = state
            self._commit_state()
            logger.info(f"Created interview {state.id} for session {self.session_id}")
        else:
            self.state = state
            if state.ensure_slots(self.total_questions):
                self._commit_state()

        if state.is_complete:
            self.timer.hold(0)
            self.stage = SessionStage.COMPLETE
            return self.stage

        question = state.current_question
        if question.is_submitted:
            self._enter_review(question)
            return self.stage

        if question.is_placeholder:
            await self._provision(state.current_index)
            return self.stage

        if state.is_paused:
            self.timer.hold(self._paused_time_left(question))
            self.stage = SessionStage.AWAITING_ANSWER
            return self.stage

        if state.timer_ends_at == 0:
            # Provisioned but the clock never started
            self._arm(question)
            self._commit_state()
            self.stage = SessionStage.AWAITING_ANSWER
            return self.stage

        self.stage = SessionStage.AWAITING_ANSWER
        if self.timer.restore(state.timer_ends_at) == TimerEvent.TIME_EXPIRED:
            logger.info(f"Deadline elapsed while session {self.session_id} was away")
            self._expire_current()
        return self.stage

    async def submit_answer(self, text: str) -> bool:
        """
        Submit the answer for the current question.
        Returns False when the call was a no-op.
        Raises ScoringFailedError when the scoring service fails; the answer can be resubmitted.
        """
        if self.stage == SessionStage.SUBMITTING:
            logger.warning(f"Session {self.session_id}: submission already in flight, ignoring")
            return False
        if self.stage != SessionStage.AWAITING_ANSWER:
            logger.warning(f"Session {self.session_id}: cannot submit in stage {self.stage.value}")
            return False

        remaining = self.timer.remaining()
        answer = text or ""
        if not answer.strip():
            if remaining > 0:
                return False
            self._expire_current()
            return True

        question = self.state.current_question
        self.stage = SessionStage.SUBMITTING
        self.last_error = None
        try:
            evaluation = await self.scorer.score_answer(question.prompt, answer)
        except ScoringFailedError as e:
            self.stage = SessionStage.AWAITING_ANSWER
            self.last_error = e.message
            logger.error(f"Session {self.session_id}: scoring failed for {question.id}: {e}")
            raise
        except Exception as e:
            self.stage = SessionStage.AWAITING_ANSWER
            self.last_error = ScoringFailedError().message
            logger.exception(f"Session {self.session_id}: scoring failed for {question.id}")
            raise ScoringFailedError(details={"reason": str(e)}) from e

        current = self.state.current_question if self.state is not None else None
        if current is not question or current.is_submitted:
            logger.warning(f"Session {self.session_id}: state changed while scoring {question.id}, result dropped")
            if self.stage == SessionStage.SUBMITTING:
                self.stage = SessionStage.AWAITING_ANSWER
            return False

        question.record_submission(
            answer=answer,
            score=evaluation.score,
            feedback=evaluation.feedback,
            time_spent=allotted_seconds(question.difficulty) - remaining,
            submitted_at=self.clock.now_ms(),
        )
        self._stop_clock()
        self._commit_state()
        self.store.save_question(question)
        self._enter_review(question)
        logger.info(
            f"Event: {SessionEvent.ANSWER_SUBMITTED.value} session={self.session_id} "
            f"question={question.id} score={question.score} time_spent={question.time_spent}"
        )
        return True

    async def tick(self, draft: str = "") -> Optional[TimerEvent]:
        """
        Once-per-second clock update from the client.
        On expiry the current draft is submitted (blank draft -> auto-fail).
        """
        if self.stage != SessionStage.AWAITING_ANSWER or self.state.is_paused:
            return None
        event = self.timer.tick()
        if event == TimerEvent.TIME_EXPIRED:
            logger.info(f"Event: {SessionEvent.TIME_EXPIRED.value} session={self.session_id}")
            await self.submit_answer(draft)
        return event

    async def advance(self) -> bool:
        """
        Move to the next question, or complete the interview on the last one.
        No-op unless the current question was submitted or expired.
        """
        if self.stage != SessionStage.REVIEWING or not self.state.current_question.is_submitted:
            logger.warning(f"Session {self.session_id}: cannot advance, current question not processed")
            return False

        state = self.state
        if state.is_last_question:
            state.is_complete = True
            self.timer.hold(0)
            self._commit_state()
            self.stage = SessionStage.COMPLETE
            logger.info(f"Event: {SessionEvent.SESSION_COMPLETED.value} session={self.session_id}")
            await self.submit_record()
            return True

        state.current_index += 1
        next_question = state.current_question
        logger.info(
            f"Event: {SessionEvent.QUESTION_ADVANCED.value} session={self.session_id} index={state.current_index}"
        )
        if next_question.is_placeholder:
            self._commit_state()
            await self._provision(state.current_index)
        else:
            self._arm(next_question)
            self._commit_state()
            self.stage = SessionStage.AWAITING_ANSWER
        return True

    def pause_toggle(self) -> bool:
        """
        Pause or resume the answer clock. Returns the new paused flag.
        Pausing stops the deadline; resuming arms now + remaining.
        """
        if self.stage != SessionStage.AWAITING_ANSWER:
            logger.warning(f"Session {self.session_id}: cannot pause in stage {self.stage.value}")
            return bool(self.state and self.state.is_paused)

        state = self.state
        if not state.is_paused:
            remaining = self.timer.remaining()
            state.paused_time_left = remaining
            state.timer_ends_at = 0
            state.is_paused = True
            self.timer.hold(remaining)
            event = SessionEvent.TIMER_PAUSED
        else:
            remaining = self._paused_time_left(state.current_question)
            state.timer_ends_at = self.timer.start(remaining)
            state.paused_time_left = None
            state.is_paused = False
            event = SessionEvent.TIMER_RESUMED
        self._commit_state()
        logger.info(f"Event: {event.value} session={self.session_id} remaining={remaining}")
        return state.is_paused

    async def submit_record(self) -> Optional[str]:
        """
        Report the completed interview to the record store once and clear the session store.
        Safe to call again after a failure; returns the existing id when already reported.
        """
        state = self.state
        if state is None or not state.is_complete:
            logger.warning(f"Session {self.session_id}: interview not complete, nothing to report")
            return None
        if state.record_id:
            return state.record_id

        try:
            record_id = self.record_repo.save_interview(state.questions, self.candidate)
        except Exception as e:
            self.last_error = RecordSubmissionError().message
            logger.exception(f"Session {self.session_id}: failed to report interview")
            raise RecordSubmissionError(details={"session_id": self.session_id, "reason": str(e)}) from e

        state.record_id = record_id
        self.store.clear_all()
        logger.info(f"Event: {SessionEvent.RECORD_SUBMITTED.value} session={self.session_id} record={record_id}")
        return record_id

    def teardown(self) -> None:
        """Release the session handle. The store is left as is."""
        self.timer.hold(0)
        self.state = None
        self.candidate = None
        self.stage = SessionStage.LOADING
        logger.info(f"Session {self.session_id} torn down")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _provision(self, index: int) -> None:
        self.stage = SessionStage.LOADING
        slot = self.state.questions[index]
        self._provisioning = True
        try:
            question = await self.provisioner.provision(slot.difficulty, self.candidate.skills)
        except GenerationFailedError as e:
            self.last_error = e.message
            logger.error(f"Session {self.session_id}: provisioning slot {index} failed: {e}")
            raise
        finally:
            self._provisioning = False

        if self.state is None:
            logger.warning(f"Session {self.session_id}: torn down while provisioning slot {index}")
            return

        self.state.questions[index] = question
        self.state.current_index = index
        self._arm(question)
        self._commit_state()
        self.store.save_question(question)
        self.stage = SessionStage.AWAITING_ANSWER
        logger.info(
            f"Event: {SessionEvent.QUESTION_PROVISIONED.value} session={self.session_id} "
            f"index={index} difficulty={question.difficulty.value}"
        )

    def _expire_current(self) -> None:
        """Auto-fail path: record a zero score for the unanswered question."""
        question = self.state.current_question
        question.record_submission(
            answer="",
            score=0,
            feedback=TIME_UP_FEEDBACK,
            time_spent=allotted_seconds(question.difficulty),
            submitted_at=self.clock.now_ms(),
        )
        self._stop_clock()
        self._commit_state()
        self.store.save_question(question)
        self._enter_review(question)
        logger.info(f"Session {self.session_id}: question {question.id} auto-failed on timeout")

    def _arm(self, question: Question) -> None:
        self.state.timer_ends_at = self.timer.start(allotted_seconds(question.difficulty))
        self.state.is_paused = False
        self.state.paused_time_left = None

    def _stop_clock(self) -> None:
        self.state.is_paused = True
        self.state.timer_ends_at = 0
        self.state.paused_time_left = None

    def _enter_review(self, question: Question) -> None:
        self.timer.hold(max(0, allotted_seconds(question.difficulty) - question.time_spent))
        self.stage = SessionStage.REVIEWING

    def _paused_time_left(self, question: Question) -> int:
        if self.state.paused_time_left is not None:
            return self.state.paused_time_left
        return allotted_seconds(question.difficulty)

    def _commit_state(self) -> None:
        """Save state to the session store."""
        self.state.touch(self.clock.now_ms())
        self.store.save_interview_state(self.state)
