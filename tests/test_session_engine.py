import asyncio
import os
import shutil
import sys
import tempfile
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from packages.miv_core.errors import GenerationFailedError, NotOnboardedError, ScoringFailedError, RecordSubmissionError
from packages.miv_providers.llm.mock import MockLLMProvider
from packages.miv_providers.mock_question import MockQuestionGenerator
from packages.miv_providers.mock_scoring import MockAnswerScorer
from packages.miv_providers.scoring import LLMAnswerScorer, FALLBACK_FEEDBACK
from packages.miv_session.dto import InterviewState, Question
from packages.miv_session.engine import InterviewSessionEngine
from packages.miv_session.infrastructure.file_repo import JsonFileSessionStore
from packages.miv_session.infrastructure.memory_repo import MemorySessionStore
from packages.miv_session.policy import Difficulty, TIME_UP_FEEDBACK
from packages.miv_session.provisioning import QuestionProvisioner
from packages.miv_session.state import SessionStage
from packages.miv_session.timer import TimerEvent
from tests.fakes import FakeClock, RecordingRecordRepository, make_candidate


class EngineTestBase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.store = MemorySessionStore()
        self.store.save_candidate(make_candidate())
        self.generator = MockQuestionGenerator()
        self.scorer = MockAnswerScorer(fixed_score=85)
        self.records = RecordingRecordRepository()

    def make_engine(self, store=None, scorer=None, generator=None, total_questions=6) -> InterviewSessionEngine:
        return InterviewSessionEngine(
            session_id="sess_test",
            store=store or self.store,
            provisioner=QuestionProvisioner(generator or self.generator),
            scorer=scorer or self.scorer,
            record_repo=self.records,
            total_questions=total_questions,
            clock=self.clock,
        )

    def seed_medium_question(self):
        """Interview whose first slot holds a provisioned MEDIUM question with no clock yet."""
        state = InterviewState.new(6, self.clock.now_ms())
        state.questions[0] = Question(id="q_medium", prompt="Explain event loops.", difficulty=Difficulty.MEDIUM)
        self.store.save_interview_state(state)


class TestInitialize(EngineTestBase):

    async def test_fresh_session_provisions_first_question(self):
        engine = self.make_engine()
        stage = await engine.initialize()

        self.assertEqual(stage, SessionStage.AWAITING_ANSWER)
        self.assertEqual(len(engine.state.questions), 6)
        current = engine.current_question
        self.assertFalse(current.is_placeholder)
        self.assertEqual(current.difficulty, Difficulty.EASY)
        self.assertEqual(engine.time_remaining(), 20)
        self.assertEqual(engine.state.timer_ends_at, self.clock.now_ms() + 20_000)
        self.assertEqual(self.generator.requests, [{"skills": ["Python", "FastAPI"], "difficulty": "EASY"}])

        # Persisted before returning
        saved = self.store.get_interview_state()
        self.assertEqual(saved.questions[0].id, current.id)
        self.assertEqual(saved.timer_ends_at, engine.state.timer_ends_at)

    async def test_not_onboarded(self):
        engine = self.make_engine(store=MemorySessionStore())
        with self.assertRaises(NotOnboardedError):
            await engine.initialize()
        self.assertIsNone(engine.state)

    async def test_generation_failure_keeps_placeholder(self):
        engine = self.make_engine(generator=MockQuestionGenerator(should_fail=True))
        with self.assertRaises(GenerationFailedError):
            await engine.initialize()

        self.assertEqual(engine.stage, SessionStage.LOADING)
        self.assertIsNotNone(engine.last_error)
        self.assertTrue(self.store.get_interview_state().questions[0].is_placeholder)

    async def test_short_state_is_padded_with_placeholders(self):
        state = InterviewState.new(3, self.clock.now_ms())
        self.store.save_interview_state(state)

        engine = self.make_engine()
        await engine.initialize()

        self.assertEqual(len(engine.state.questions), 6)
        self.assertEqual(engine.state.questions[5].difficulty, Difficulty.HARD)
        self.assertTrue(engine.state.questions[5].is_placeholder)

    async def test_scenario_a_deadline_passed_while_away(self):
        first = self.make_engine()
        await first.initialize()
        question_id = first.current_question.id

        self.clock.advance(25)
        second = self.make_engine()
        stage = await second.initialize()

        self.assertEqual(stage, SessionStage.REVIEWING)
        question = second.current_question
        self.assertEqual(question.id, question_id)
        self.assertEqual(question.score, 0)
        self.assertEqual(question.answer, "")
        self.assertEqual(question.feedback, TIME_UP_FEEDBACK)
        self.assertEqual(question.time_spent, 20)
        self.assertEqual(self.scorer.requests, [])

    async def test_reload_keeps_absolute_deadline(self):
        first = self.make_engine()
        await first.initialize()
        self.clock.advance(7)

        second = self.make_engine()
        await second.initialize()

        self.assertEqual(second.stage, SessionStage.AWAITING_ANSWER)
        self.assertEqual(second.time_remaining(), 13)
        self.assertEqual(len(self.generator.requests), 1)

    async def test_reload_after_submission_enters_review(self):
        first = self.make_engine()
        await first.initialize()
        self.clock.advance(4)
        await first.submit_answer("A closure captures variables.")

        second = self.make_engine()
        stage = await second.initialize()

        self.assertEqual(stage, SessionStage.REVIEWING)
        self.assertEqual(second.current_question.score, 85)
        self.assertEqual(second.time_remaining(), 16)

    async def test_provisioned_question_without_clock_is_armed(self):
        self.seed_medium_question()
        engine = self.make_engine()
        await engine.initialize()

        self.assertEqual(engine.stage, SessionStage.AWAITING_ANSWER)
        self.assertEqual(engine.time_remaining(), 60)
        self.assertEqual(self.store.get_interview_state().timer_ends_at, self.clock.now_ms() + 60_000)


class TestSubmitAnswer(EngineTestBase):

    async def test_scenario_b_time_spent_from_remaining(self):
        self.seed_medium_question()
        engine = self.make_engine()
        await engine.initialize()
        self.clock.advance(15)
        self.assertEqual(engine.time_remaining(), 45)

        accepted = await engine.submit_answer("My answer")

        self.assertTrue(accepted)
        question = engine.current_question
        self.assertEqual(question.time_spent, 15)
        self.assertEqual(question.answer, "My answer")
        self.assertEqual(question.score, 85)
        self.assertEqual(question.submitted_at, self.clock.now_ms())
        self.assertEqual(engine.stage, SessionStage.REVIEWING)

        saved = self.store.get_interview_state()
        self.assertEqual(saved.timer_ends_at, 0)
        self.assertTrue(saved.is_paused)
        self.assertEqual([q.id for q in self.store.get_all_questions()], ["q_medium"])

    async def test_scenario_d_unparsable_score_uses_fallback(self):
        scorer = LLMAnswerScorer(MockLLMProvider(replies=["I think this answer is quite good!"]))
        engine = self.make_engine(scorer=scorer)
        await engine.initialize()

        await engine.submit_answer("Closures capture their environment.")

        self.assertEqual(engine.stage, SessionStage.REVIEWING)
        self.assertEqual(engine.current_question.score, 70)
        self.assertEqual(engine.current_question.feedback, FALLBACK_FEEDBACK)

    async def test_blank_answer_with_time_left_is_ignored(self):
        engine = self.make_engine()
        await engine.initialize()

        self.assertFalse(await engine.submit_answer("   "))
        self.assertEqual(engine.stage, SessionStage.AWAITING_ANSWER)
        self.assertFalse(engine.current_question.is_submitted)

    async def test_scoring_failure_allows_retry(self):
        failing = MockAnswerScorer(should_fail=True)
        engine = self.make_engine(scorer=failing)
        await engine.initialize()

        with self.assertRaises(ScoringFailedError):
            await engine.submit_answer("First try")
        self.assertEqual(engine.stage, SessionStage.AWAITING_ANSWER)
        self.assertEqual(engine.last_error, "Failed to evaluate answer.")
        self.assertFalse(engine.current_question.is_submitted)

        failing.should_fail = False
        failing.fixed_score = 60
        self.assertTrue(await engine.submit_answer("Second try"))
        self.assertEqual(engine.current_question.score, 60)
        self.assertIsNone(engine.last_error)

    async def test_unexpected_scorer_error_is_wrapped(self):
        scorer = LLMAnswerScorer(MockLLMProvider(replies=[RuntimeError("connection reset")]))
        engine = self.make_engine(scorer=scorer)
        await engine.initialize()

        with self.assertRaises(ScoringFailedError):
            await engine.submit_answer("Answer")
        self.assertEqual(engine.stage, SessionStage.AWAITING_ANSWER)

    async def test_second_submit_while_scoring_is_noop(self):
        scorer = MockAnswerScorer(fixed_score=90, latency=0.05)
        engine = self.make_engine(scorer=scorer)
        await engine.initialize()

        results = await asyncio.gather(
            engine.submit_answer("first"),
            engine.submit_answer("second"),
        )

        self.assertEqual(results, [True, False])
        self.assertEqual(len(scorer.requests), 1)
        self.assertEqual(engine.current_question.answer, "first")

    async def test_reload_while_scoring_keeps_state(self):
        scorer = MockAnswerScorer(fixed_score=90, latency=0.05)
        engine = self.make_engine(scorer=scorer)
        await engine.initialize()

        submitted, stage = await asyncio.gather(engine.submit_answer("first"), engine.initialize())

        self.assertTrue(submitted)
        self.assertEqual(stage, SessionStage.SUBMITTING)
        self.assertEqual(engine.stage, SessionStage.REVIEWING)
        self.assertEqual(engine.current_question.answer, "first")
        self.assertTrue(self.store.get_interview_state().current_question.is_submitted)

    async def test_submit_after_review_is_noop(self):
        engine = self.make_engine()
        await engine.initialize()
        await engine.submit_answer("answer")

        self.assertFalse(await engine.submit_answer("another"))
        self.assertEqual(engine.current_question.answer, "answer")
        self.assertEqual(len(self.scorer.requests), 1)


class TestTick(EngineTestBase):

    async def test_remaining_never_increases(self):
        engine = self.make_engine()
        await engine.initialize()

        seen = []
        for _ in range(25):
            await engine.tick()
            seen.append(engine.time_remaining())
            self.clock.advance(1)

        self.assertTrue(all(r >= 0 for r in seen))
        self.assertEqual(seen, sorted(seen, reverse=True))

    async def test_expiry_with_blank_draft_auto_fails(self):
        engine = self.make_engine()
        await engine.initialize()
        self.clock.advance(20)

        event = await engine.tick("")

        self.assertEqual(event, TimerEvent.TIME_EXPIRED)
        self.assertEqual(engine.stage, SessionStage.REVIEWING)
        self.assertEqual(engine.current_question.score, 0)
        self.assertEqual(engine.current_question.feedback, TIME_UP_FEEDBACK)
        self.assertEqual(self.scorer.requests, [])

    async def test_expiry_submits_draft(self):
        engine = self.make_engine()
        await engine.initialize()
        self.clock.advance(21)

        await engine.tick("half finished thought")

        question = engine.current_question
        self.assertEqual(question.answer, "half finished thought")
        self.assertEqual(question.score, 85)
        self.assertEqual(question.time_spent, 20)

    async def test_tick_while_paused_does_nothing(self):
        engine = self.make_engine()
        await engine.initialize()
        engine.pause_toggle()
        self.clock.advance(60)

        self.assertIsNone(await engine.tick())
        self.assertEqual(engine.stage, SessionStage.AWAITING_ANSWER)


class TestAdvance(EngineTestBase):

    async def test_advance_without_submission_is_noop(self):
        engine = self.make_engine()
        await engine.initialize()

        self.assertFalse(await engine.advance())
        self.assertEqual(engine.state.current_index, 0)
        self.assertEqual(engine.stage, SessionStage.AWAITING_ANSWER)

    async def test_advance_provisions_next_slot(self):
        engine = self.make_engine()
        await engine.initialize()
        await engine.submit_answer("answer one")

        self.assertTrue(await engine.advance())

        self.assertEqual(engine.state.current_index, 1)
        self.assertEqual(engine.stage, SessionStage.AWAITING_ANSWER)
        self.assertFalse(engine.current_question.is_placeholder)
        self.assertEqual(engine.time_remaining(), 20)
        self.assertEqual(self.store.get_interview_state().current_index, 1)

    async def test_scenario_c_last_question_completes_once(self):
        engine = self.make_engine()
        await engine.initialize()

        for i in range(6):
            await engine.submit_answer(f"answer {i}")
            await engine.advance()

        self.assertEqual(engine.stage, SessionStage.COMPLETE)
        self.assertTrue(engine.state.is_complete)
        self.assertEqual(len(self.records.saved), 1)
        self.assertEqual(len(self.records.saved[0]), 6)
        self.assertIsNotNone(engine.state.record_id)
        self.assertEqual(
            [q.difficulty for q in engine.state.questions],
            [Difficulty.EASY, Difficulty.EASY, Difficulty.MEDIUM, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.HARD],
        )

        # Reported once; the session store is cleared afterwards
        self.assertFalse(await engine.advance())
        self.assertEqual(len(self.records.saved), 1)
        self.assertIsNone(self.store.get_interview_state())
        self.assertIsNone(self.store.get_candidate())

    async def test_reload_after_completion_stays_complete(self):
        engine = self.make_engine(total_questions=1)
        await engine.initialize()
        await engine.submit_answer("only answer")
        await engine.advance()
        record_id = engine.state.record_id

        self.assertEqual(await engine.initialize(), SessionStage.COMPLETE)
        self.assertTrue(engine.state.is_complete)
        self.assertEqual(engine.state.record_id, record_id)
        self.assertEqual(engine.time_remaining(), 0)
        self.assertEqual(len(self.records.saved), 1)

    async def test_record_failure_can_be_retried(self):
        self.records.fail = True
        engine = self.make_engine(total_questions=1)
        await engine.initialize()
        await engine.submit_answer("only answer")

        with self.assertRaises(RecordSubmissionError):
            await engine.advance()
        self.assertEqual(engine.stage, SessionStage.COMPLETE)
        self.assertIsNone(engine.state.record_id)
        self.assertTrue(self.store.get_interview_state().is_complete)

        self.records.fail = False
        record_id = await engine.submit_record()
        self.assertIsNotNone(record_id)
        self.assertEqual(await engine.submit_record(), record_id)
        self.assertEqual(len(self.records.saved), 1)


class TestPause(EngineTestBase):

    async def test_scenario_e_pause_round_trip(self):
        engine = self.make_engine()
        await engine.initialize()
        self.clock.advance(5)
        before = engine.time_remaining()

        self.assertTrue(engine.pause_toggle())
        self.assertEqual(self.store.get_interview_state().timer_ends_at, 0)
        self.assertEqual(self.store.get_interview_state().paused_time_left, before)

        self.clock.advance(30)
        self.assertEqual(engine.time_remaining(), before)

        self.assertFalse(engine.pause_toggle())
        self.assertEqual(engine.time_remaining(), before)
        saved = self.store.get_interview_state()
        self.assertFalse(saved.is_paused)
        self.assertEqual(saved.timer_ends_at, self.clock.now_ms() + before * 1000)

    async def test_paused_session_survives_reload(self):
        first = self.make_engine()
        await first.initialize()
        self.clock.advance(8)
        first.pause_toggle()
        self.clock.advance(120)

        second = self.make_engine()
        await second.initialize()

        self.assertEqual(second.stage, SessionStage.AWAITING_ANSWER)
        self.assertTrue(second.state.is_paused)
        self.assertEqual(second.time_remaining(), 12)
        self.assertFalse(second.pause_toggle())
        self.assertEqual(second.time_remaining(), 12)

    async def test_pause_outside_answering_is_ignored(self):
        engine = self.make_engine()
        await engine.initialize()
        await engine.submit_answer("answer")
        paused = engine.state.is_paused

        self.assertEqual(engine.pause_toggle(), paused)
        self.assertEqual(engine.stage, SessionStage.REVIEWING)


class TestPersistenceRoundTrip(EngineTestBase):

    def setUp(self):
        super().setUp()
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    async def test_file_store_reload_matches(self):
        store = JsonFileSessionStore(self.tmp_dir)
        store.save_candidate(make_candidate())

        first = self.make_engine(store=store)
        await first.initialize()
        self.clock.advance(3)
        await first.submit_answer("Generators yield values lazily.")
        await first.advance()
        expected = first.state.model_dump()

        second = self.make_engine(store=JsonFileSessionStore(self.tmp_dir))
        await second.initialize()

        self.assertEqual(second.state.model_dump(), expected)
        self.assertEqual(second.stage, SessionStage.AWAITING_ANSWER)
        self.assertEqual(second.candidate.email, "jane@example.com")
        self.assertEqual(second.candidate.skills, ["Python", "FastAPI"])

    async def test_teardown_releases_handle(self):
        engine = self.make_engine()
        await engine.initialize()
        engine.teardown()

        self.assertIsNone(engine.state)
        self.assertEqual(engine.stage, SessionStage.LOADING)
        self.assertIsNotNone(self.store.get_interview_state())


if __name__ == '__main__':
    unittest.main()
