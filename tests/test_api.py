import os
import sys
import unittest

from fastapi.testclient import TestClient

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from MIV.main import app
from MIV.api.dependencies import get_session_service, get_record_repository
from packages.miv_history.repository import MemoryInterviewRecordRepository
from packages.miv_providers.llm.mock import MockLLMProvider
from packages.miv_providers.mock_question import MockQuestionGenerator
from packages.miv_providers.mock_scoring import MockAnswerScorer
from packages.miv_providers.report import ReportGenerator
from packages.miv_service.session_service import SessionService
from packages.miv_session.infrastructure.memory_repo import MemorySessionStore


class TestInterviewAPI(unittest.TestCase):

    def setUp(self):
        self.stores = {}
        self.records = MemoryInterviewRecordRepository()
        self.service = SessionService(
            store_factory=lambda session_id: self.stores.setdefault(session_id, MemorySessionStore()),
            record_repo=self.records,
            question_generator=MockQuestionGenerator(),
            scorer=MockAnswerScorer(fixed_score=80),
            report_generator=ReportGenerator(MockLLMProvider()),
            total_questions=2,
        )
        app.dependency_overrides[get_session_service] = lambda: self.service
        app.dependency_overrides[get_record_repository] = lambda: self.records
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def onboard(self, email="jane@example.com"):
        response = self.client.post("/api/v1/candidates", json={
            "name": "Jane Doe",
            "email": email,
            "skills": ["python"],
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["session_id"]

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_onboarding_and_candidate_lookup(self):
        session_id = self.onboard()

        response = self.client.get(f"/api/v1/candidates/{session_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["email"], "jane@example.com")

    def test_session_without_candidate_is_not_onboarded(self):
        response = self.client.post("/api/v1/sessions/sess_unknown/initialize")

        self.assertEqual(response.status_code, 409)
        body = response.json()
        self.assertEqual(body["error"]["code"], "SESSION_NOT_ONBOARDED")
        self.assertIn("timestamp", body)

    def test_answer_and_solution(self):
        session_id = self.onboard()

        session = self.client.post(f"/api/v1/sessions/{session_id}/initialize").json()
        self.assertEqual(session["stage"], "AWAITING_ANSWER")
        self.assertEqual(session["time_remaining"], 20)
        question = session["current_question"]
        self.assertNotIn("reference_solution", question)

        # Not submitted yet
        response = self.client.get(f"/api/v1/sessions/{session_id}/questions/{question['id']}/solution")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "QUESTION_NOT_FOUND")

        response = self.client.post(f"/api/v1/sessions/{session_id}/answers", json={"text": "Use a list comprehension."})
        self.assertEqual(response.status_code, 200)
        session = response.json()
        self.assertEqual(session["stage"], "REVIEWING")
        self.assertTrue(session["current_question"]["submitted"])
        self.assertEqual(session["current_question"]["score"], 80)

        response = self.client.get(f"/api/v1/sessions/{session_id}/questions/{question['id']}/solution")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["solution"], "Reference solution 1 for python.")

    def test_pause_and_tick(self):
        session_id = self.onboard()
        self.client.post(f"/api/v1/sessions/{session_id}/initialize")

        session = self.client.post(f"/api/v1/sessions/{session_id}/pause").json()
        self.assertTrue(session["is_paused"])

        session = self.client.post(f"/api/v1/sessions/{session_id}/tick", json={"draft": ""}).json()
        self.assertEqual(session["stage"], "AWAITING_ANSWER")

        session = self.client.post(f"/api/v1/sessions/{session_id}/pause").json()
        self.assertFalse(session["is_paused"])

    def test_full_interview_flow(self):
        session_id = self.onboard()
        self.client.post(f"/api/v1/sessions/{session_id}/initialize")

        # Advancing before answering is ignored
        session = self.client.post(f"/api/v1/sessions/{session_id}/advance").json()
        self.assertEqual(session["current_index"], 0)

        for i in range(2):
            self.client.post(f"/api/v1/sessions/{session_id}/answers", json={"text": f"answer {i}"})
            session = self.client.post(f"/api/v1/sessions/{session_id}/advance").json()

        self.assertEqual(session["stage"], "COMPLETE")
        self.assertTrue(session["is_complete"])
        record_id = session["record_id"]
        self.assertIsNotNone(record_id)

        summary = self.client.get(f"/api/v1/sessions/{session_id}/summary").json()
        self.assertEqual(summary["answered_count"], 2)
        self.assertEqual(summary["average_score"], 80.0)

        report = self.client.post(f"/api/v1/reports/{session_id}").json()
        self.assertTrue(report["is_fallback"])
        self.assertEqual(report["finalRecommendation"], "HIRE")

        record = self.client.get(f"/api/v1/interviews/{record_id}")
        self.assertEqual(record.status_code, 200)
        self.assertEqual(len(record.json()["questions"]), 2)

        by_email = self.client.get("/api/v1/interviews/by-email", params={"email": "JANE@example.com"})
        self.assertEqual(by_email.json()["interview_id"], record_id)

        dashboard = self.client.get("/api/v1/dashboard").json()
        self.assertEqual(dashboard["total_interviews"], 1)
        self.assertEqual(dashboard["average_score"], 80.0)

        # One interview per email
        response = self.client.post("/api/v1/candidates", json={"name": "Jane", "email": "jane@example.com"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "INTERVIEW_ALREADY_TAKEN")

        response = self.client.delete(f"/api/v1/sessions/{session_id}")
        self.assertEqual(response.status_code, 204)

    def test_submit_and_lookup_interview_record(self):
        candidate = {"name": "Sam Lee", "email": "sam@example.com", "skills": ["go"]}
        questions = [{
            "id": "q_1",
            "prompt": "What is a goroutine?",
            "difficulty": "EASY",
            "answer": "A lightweight thread.",
            "score": 75,
            "feedback": "Good",
            "time_spent": 9,
            "submitted_at": 1,
        }]

        response = self.client.post("/api/v1/interviews", json={"questions": questions, "candidate": candidate})
        self.assertEqual(response.status_code, 201)
        interview_id = response.json()["interview_id"]

        record = self.client.get(f"/api/v1/interviews/{interview_id}").json()
        self.assertEqual(record["score"], 75.0)
        self.assertEqual(self.client.get("/api/v1/interviews/not-there").status_code, 404)
        self.assertEqual(
            self.client.get("/api/v1/interviews/by-email", params={"email": "nobody@example.com"}).status_code,
            404,
        )


if __name__ == '__main__':
    unittest.main()
