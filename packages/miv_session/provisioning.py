import uuid
from typing import List

from packages.miv_core.errors import GenerationFailedError
from packages.miv_core.logging import get_logger
from packages.miv_providers.question import QuestionGenerator
from .dto import Question
from .policy import Difficulty, parse_difficulty

logger = get_logger("miv_session.provisioning")


class QuestionProvisioner:
    """
    Fills a placeholder slot with a generated question.
    Never fabricates a question: generator failure raises GenerationFailedError.
    """
    def __init__(self, generator: QuestionGenerator):
        self.generator = generator

    async def provision(self, difficulty: Difficulty, skills: List[str]) -> Question:
        result = await self.generator.generate_question(list(skills), difficulty.value)
        if not result.success:
            logger.error(f"Question generation failed ({difficulty.value}): {result.error}")
            raise GenerationFailedError(details={"difficulty": difficulty.value, "reason": result.error})

        # Generator may relabel difficulty; unknown labels keep the slot's difficulty
        resolved = parse_difficulty(result.difficulty) or difficulty
        return Question(
            id=f"q_{uuid.uuid4().hex}",
            prompt=result.content,
            difficulty=resolved,
            reference_solution=result.solution or None,
        )
