from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List

class QuestionGenerationResult:
    def __init__(
        self,
        content: str,
        difficulty: Optional[str],
        solution: str,
        metadata: Dict[str, Any],
        success: bool,
        error: Optional[str] = None
    ):
        self.content = content
        self.difficulty = difficulty
        self.solution = solution
        self.metadata = metadata
        self.success = success
        self.error = error

class QuestionGenerator(ABC):
    @abstractmethod
    async def generate_question(self, skills: List[str], difficulty: str) -> QuestionGenerationResult:
        """
        Generate one question for the given skills and difficulty.
        Must return success=False on failure, never raise exception.
        """
        pass
