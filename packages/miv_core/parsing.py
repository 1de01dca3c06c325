"""
Best-effort parsing of free-text generative AI replies.

Models tend to wrap JSON in markdown fences or surround it with prose.
`parse_json_response` never raises: the caller gets a `ParseResult` and
decides which fallback value applies.
"""
import json
import re
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


@dataclass
class ParseResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None


def clean_json_string(json_str: str) -> str:
    """
    Cleans markdown code blocks from JSON string.
    Falls back to the outermost {...} span when the reply has surrounding prose.
    """
    text = (json_str or "").strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()

    if not text.startswith("{") and not text.startswith("["):
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            return text[start:end + 1]
    return text


def parse_json_response(text: str, model: Type[T]) -> ParseResult[T]:
    """Parse `text` into `model`, reporting failures instead of raising."""
    cleaned = clean_json_string(text)
    if not cleaned:
        return ParseResult(error="empty response")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return ParseResult(error=f"invalid json: {e.msg}")

    # A single-question request sometimes comes back as a one element list
    if isinstance(data, list) and len(data) == 1:
        data = data[0]

    try:
        return ParseResult(value=model.model_validate(data))
    except ValidationError as e:
        return ParseResult(error=f"unexpected shape: {e.error_count()} validation error(s)")
