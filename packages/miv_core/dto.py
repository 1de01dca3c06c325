from typing import Literal

from pydantic import BaseModel, ConfigDict


class BaseDTO(BaseModel):
    """Common model settings for MIV transfer objects."""
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True
    )


class LLMMessageDTO(BaseDTO):
    role: Literal["system", "user", "assistant"]
    content: str

    @classmethod
    def user(cls, content: str) -> "LLMMessageDTO":
        return cls(role="user", content=content)


class LLMResponseDTO(BaseDTO):
    content: str
    token_usage: dict[str, int] | None = None
    finish_reason: str | None = None
