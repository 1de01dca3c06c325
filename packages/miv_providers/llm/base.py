from abc import ABC, abstractmethod
from typing import Optional, List
from packages.miv_core.dto import LLMMessageDTO, LLMResponseDTO

class ILLMProvider(ABC):
    """
    Text generation backend shared by question generation, scoring and reports.
    """
    @abstractmethod
    async def chat(self, messages: List[LLMMessageDTO], system_prompt: Optional[str] = None) -> LLMResponseDTO:
        """
        Send a conversation and return the model reply.
        Transport and provider errors propagate; callers map them to their own MIVBaseError.
        """
        pass

    async def ask(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Single-turn helper: one user prompt in, reply text out."""
        response = await self.chat([LLMMessageDTO.user(prompt)], system_prompt=system_prompt)
        return response.content
