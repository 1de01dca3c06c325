import asyncio
import time
from typing import List

from .question import QuestionGenerator, QuestionGenerationResult

class MockQuestionGenerator(QuestionGenerator):
    """
    Mock implementation for local runs and tests.
    Simulates latency and failure scenarios.
    """
    def __init__(self, should_fail: bool = False, latency: float = 0.0):
        self.should_fail = should_fail
        self.latency = latency
        self.requests: List[dict] = []

    async def generate_question(self, skills: List[str], difficulty: str) -> QuestionGenerationResult:
        self.requests.append({"skills": list(skills), "difficulty": difficulty})
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        if self.should_fail:
            return QuestionGenerationResult("", None, "", {}, False, "Mock Failure: Intentional Error")

        topic = skills[0] if skills else "web development"
        number = len(self.requests)
        return QuestionGenerationResult(
            content=f"[{difficulty}] Question {number}: explain a core concept of {topic}.",
            difficulty=difficulty,
            solution=f"Reference solution {number} for {topic}.",
            metadata={
                "model": "mock-generator",
                "timestamp": time.time(),
                "origin_type": "GENERATED"
            },
            success=True
        )
