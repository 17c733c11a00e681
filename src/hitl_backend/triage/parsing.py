"""Best-effort JSON decoding of model output with explicit fallbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Either a decoded value or the reason decoding failed."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok else default  # type: ignore[return-value]


def extract_json_object(text: str) -> str | None:
    """Return the span from the first ``{`` to the last ``}``, if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]


def parse_json_model(text: str, model: type[M], *, extract: bool = True) -> ParseResult[M]:
    """Decode ``text`` into ``model`` without raising.

    Models often wrap JSON in prose or code fences, so by default only the
    outermost ``{...}`` span is decoded.
    """
    candidate = extract_json_object(text) if extract else text.strip()
    if not candidate:
        return ParseResult(error="no JSON object found")
    try:
        return ParseResult(value=model.model_validate_json(candidate))
    except ValidationError as exc:
        return ParseResult(error=str(exc))
