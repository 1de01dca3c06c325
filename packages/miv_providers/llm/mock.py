import asyncio
from typing import Optional, List, Union
from packages.miv_providers.llm.base import ILLMProvider
from packages.miv_core.dto import LLMMessageDTO, LLMResponseDTO

class MockLLMProvider(ILLMProvider):
    """
    Scripted LLM for local runs and tests.
    Each call pops the next scripted reply; an Exception in the script is raised instead.
    When the script is exhausted the default reply is returned.
    """
    def __init__(
        self,
        replies: Optional[List[Union[str, Exception]]] = None,
        default_reply: str = "This is a mock LLM response based on the input.",
        latency_ms: int = 0
    ):
        self.replies = list(replies or [])
        self.default_reply = default_reply
        self.latency_ms = latency_ms
        self.calls: List[List[LLMMessageDTO]] = []

    async def chat(self, messages: List[LLMMessageDTO], system_prompt: Optional[str] = None) -> LLMResponseDTO:
        self.calls.append(list(messages))
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000.0)

        reply = self.replies.pop(0) if self.replies else self.default_reply
        if isinstance(reply, Exception):
            raise reply

        return LLMResponseDTO(
            content=reply,
            token_usage={"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
            finish_reason="stop"
        )
