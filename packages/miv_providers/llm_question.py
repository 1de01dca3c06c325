import time
from typing import List

from pydantic import BaseModel

from packages.miv_core.logging import get_logger
from packages.miv_core.parsing import parse_json_response
from packages.miv_providers.llm.base import ILLMProvider
from .question import QuestionGenerator, QuestionGenerationResult

logger = get_logger("miv_providers.question")

FALLBACK_QUESTION = (
    "Explain the difference between controlled and uncontrolled components in React, "
    "and provide an example of each."
)
FALLBACK_DIFFICULTY = "MEDIUM"
FALLBACK_SOLUTION = (
    "Controlled components: Form elements whose values are controlled by React state. "
    "Example: An input field with its value tied to `useState`. "
    "Uncontrolled components: Form elements whose values are managed by the DOM itself. "
    "Example: An input field using a `useRef` to get its value."
)


class GeneratedQuestionPayload(BaseModel):
    question: str
    difficulty: str
    solution: str = ""


def build_question_prompt(skills: List[str], difficulty: str) -> str:
    skills_text = f"focused on: {', '.join(skills)}" if skills else "general full-stack development"
    difficulty_text = f"with {difficulty} difficulty" if difficulty else "with varying difficulty levels"
    return f"""
Generate 1 technical interview question for a full-stack developer {skills_text} {difficulty_text}.

Provide a JSON response in this exact format:
{{
  "question": "The actual interview question text",
  "difficulty": "EASY|MEDIUM|HARD",
  "solution": "A detailed, concise, and effective solution/explanation for the question"
}}

Return a single question object.
Make sure the question is practical, relevant, and tests real-world development skills.
Ensure the question can be answered within the time limits: Easy (20s), Medium (60s), Hard (120s).
"""


class LLMQuestionGenerator(QuestionGenerator):
    """
    Question Generation Service backed by an LLM provider.
    Request failures come back as success=False.
    Unparsable replies are replaced by a fixed fallback question.
    """
    def __init__(self, llm: ILLMProvider):
        self.llm = llm

    async def generate_question(self, skills: List[str], difficulty: str) -> QuestionGenerationResult:
        prompt = build_question_prompt(skills, difficulty)
        try:
            reply = await self.llm.ask(prompt)
        except Exception as e:
            logger.error(f"Error generating question: {e}")
            return QuestionGenerationResult("", None, "", {}, False, f"Question request failed: {e}")

        parsed = parse_json_response(reply, GeneratedQuestionPayload)
        if not parsed.ok:
            logger.warning(f"Error parsing AI response, using fallback question: {parsed.error}")
            return QuestionGenerationResult(
                content=FALLBACK_QUESTION,
                difficulty=FALLBACK_DIFFICULTY,
                solution=FALLBACK_SOLUTION,
                metadata={"origin_type": "FALLBACK", "parse_error": parsed.error, "timestamp": time.time()},
                success=True
            )

        payload = parsed.value
        return QuestionGenerationResult(
            content=payload.question,
            difficulty=payload.difficulty,
            solution=payload.solution,
            metadata={"origin_type": "GENERATED", "timestamp": time.time()},
            success=True
        )
