from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from packages.miv_core.errors import ScoringFailedError
from packages.miv_core.logging import get_logger
from packages.miv_core.parsing import parse_json_response
from packages.miv_providers.llm.base import ILLMProvider

logger = get_logger("miv_providers.scoring")

DEFAULT_FALLBACK_SCORE = 70
FALLBACK_FEEDBACK = (
    "Your answer was recorded, but the automatic evaluation could not be read. "
    "A default score was assigned; compare your answer with the reference solution."
)


class AnswerEvaluation(BaseModel):
    """Scoring service reply."""
    score: int = Field(..., ge=0, le=100)
    feedback: str
    is_fallback: bool = False


class AnswerScorer(ABC):
    @abstractmethod
    async def score_answer(self, question: str, answer: str) -> AnswerEvaluation:
        """
        Score one answer.
        Raises ScoringFailedError when the service cannot be reached.
        Unparsable replies are not errors: they produce the fallback evaluation.
        """
        pass


def build_scoring_prompt(question: str, answer: str) -> str:
    return f"""
You are an expert technical interview evaluator.
Your task is to assess the candidate's answer to a given question.
Evaluate the answer based on correctness, clarity, and completeness.
Point out any inaccuracies and suggest improvements.

Here is the interview question:
"{question}"

Here is the candidate's answer:
"{answer}"

Respond with JSON only, in this exact format:
{{
  "score": <integer from 0 to 100>,
  "feedback": "Constructive feedback for the candidate"
}}
"""


class LLMAnswerScorer(AnswerScorer):
    """
    Scoring Service backed by an LLM provider.
    """
    def __init__(self, llm: ILLMProvider, fallback_score: int = DEFAULT_FALLBACK_SCORE):
        self.llm = llm
        self.fallback_score = fallback_score

    async def score_answer(self, question: str, answer: str) -> AnswerEvaluation:
        prompt = build_scoring_prompt(question, answer)
        try:
            reply = await self.llm.ask(prompt)
        except Exception as e:
            logger.error(f"Error in scoring request: {e}")
            raise ScoringFailedError(details={"reason": str(e)}) from e

        parsed = parse_json_response(reply, AnswerEvaluation)
        if not parsed.ok:
            logger.warning(f"Unparsable evaluation, using fallback score: {parsed.error}")
            return AnswerEvaluation(score=self.fallback_score, feedback=FALLBACK_FEEDBACK, is_fallback=True)
        return parsed.value
