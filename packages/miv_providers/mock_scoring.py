import asyncio
from typing import List, Tuple

from packages.miv_core.errors import ScoringFailedError
from .scoring import AnswerScorer, AnswerEvaluation

class MockAnswerScorer(AnswerScorer):
    """
    Mock scorer. Scores by answer length unless a fixed score is given.
    """
    def __init__(self, fixed_score: int = None, should_fail: bool = False, latency: float = 0.0):
        self.fixed_score = fixed_score
        self.should_fail = should_fail
        self.latency = latency
        self.requests: List[Tuple[str, str]] = []

    async def score_answer(self, question: str, answer: str) -> AnswerEvaluation:
        self.requests.append((question, answer))
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        if self.should_fail:
            raise ScoringFailedError(details={"reason": "Mock Failure: Intentional Error"})

        score = self.fixed_score if self.fixed_score is not None else min(100, 40 + len(answer.split()) * 5)
        return AnswerEvaluation(score=score, feedback=f"Mock feedback ({score}/100).")
