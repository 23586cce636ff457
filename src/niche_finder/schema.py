"""Response parsing: JSON text -> validated dict, against a pydantic model.

Response shapes are pydantic models (see prompts.py). Each provider adapter
passes the model on in its own wire form:
  - Gemini:  the model class itself as response_schema
  - OpenAI:  json_schema(model) appended to the system prompt

Usage:
    class Score(BaseModel):
        name: str
        score: int

    parse_response('{"name": "x", "score": 7}', Score)
    # Ok(value={"name": "x", "score": 7})
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from niche_finder.errors import InvalidResponseFormat

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass(frozen=True)
class Ok:
    value: Any


@dataclass(frozen=True)
class ParseError:
    raw: str
    cause: str


def json_schema(model: type[BaseModel]) -> dict:
    return model.model_json_schema()


def _strip_fence(text: str) -> str:
    text = text.strip()
    m = _FENCE_RE.match(text)
    return m.group(1) if m else text


def _describe(e: ValidationError) -> str:
    """First few validation errors as 'niches.1.score: Field required'."""
    out = []
    for err in e.errors()[:3]:
        loc = ".".join(str(p) for p in err["loc"])
        out.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(out)


def parse_response(
    raw: str | None, schema: type[BaseModel] | None = None
) -> Ok | ParseError:
    """Parse a provider's JSON text and validate it against schema."""
    if not raw or not raw.strip():
        return ParseError(raw or "", "empty response")
    text = _strip_fence(raw)
    if schema is None:
        try:
            return Ok(json.loads(text))
        except json.JSONDecodeError as e:
            return ParseError(raw, str(e))
    try:
        model = schema.model_validate_json(text)
    except ValidationError as e:
        return ParseError(raw, _describe(e))
    return Ok(model.model_dump())


def decode(text: str | None, schema: type[BaseModel] | None):
    """Adapter helper: text passes through; JSON must validate or it raises.

    Raises InvalidResponseFormat so a bad response fails over like any other
    per-key error.
    """
    if schema is None:
        return text or ""
    parsed = parse_response(text, schema)
    if isinstance(parsed, ParseError):
        raise InvalidResponseFormat(parsed)
    return parsed.value
