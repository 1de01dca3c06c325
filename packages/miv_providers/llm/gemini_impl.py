import warnings
from typing import Optional, List

import google.generativeai as genai

from packages.miv_core.dto import LLMMessageDTO, LLMResponseDTO
from packages.miv_core.logging import get_logger
from packages.miv_providers.llm.base import ILLMProvider

# Suppress Google GenAI FutureWarnings
warnings.filterwarnings("ignore", category=FutureWarning, module="google.generativeai")
warnings.filterwarnings("ignore", category=FutureWarning, module="google.api_core")

logger = get_logger("miv_providers.llm.gemini")


class GeminiLLMProvider(ILLMProvider):
    """
    Gemini backed LLM provider (google-generativeai).
    """
    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash"):
        if not api_key:
            logger.error("GEMINI_API_KEY is missing. Please set it in .env file.")
        genai.configure(api_key=api_key)
        self.model_name = model_name

    def _get_model(self, system_prompt: Optional[str]) -> genai.GenerativeModel:
        if system_prompt:
            return genai.GenerativeModel(self.model_name, system_instruction=system_prompt)
        return genai.GenerativeModel(self.model_name)

    async def chat(self, messages: List[LLMMessageDTO], system_prompt: Optional[str] = None) -> LLMResponseDTO:
        model = self._get_model(system_prompt)
        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [m.content]}
            for m in messages
            if m.role != "system"
        ]

        response = await model.generate_content_async(contents)

        usage = None
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = {
                "prompt_tokens": int(getattr(metadata, "prompt_token_count", 0) or 0),
                "completion_tokens": int(getattr(metadata, "candidates_token_count", 0) or 0),
                "total_tokens": int(getattr(metadata, "total_token_count", 0) or 0),
            }

        finish_reason = None
        if getattr(response, "candidates", None):
            finish_reason = str(response.candidates[0].finish_reason)

        return LLMResponseDTO(content=response.text, token_usage=usage, finish_reason=finish_reason)
