"""Gemini provider via native google.genai SDK.

Structured requests use Gemini's native response_schema. History turns keep
their roles ("user"/"model") and their parts, including inline file data:
    {"role": "user", "parts": [{"text": "..."},
                               {"inline_data": {"mime_type": "image/png",
                                                "data": "<base64>"}}]}
"""

import base64
import logging

from niche_finder import schema as _schema
from niche_finder._cache import cache_key, response_cache
from niche_finder.keys import mask

log = logging.getLogger(__name__)

VALIDATION_MODEL = "gemini-2.5-flash"


def create_client(api_key: str):
    import google.genai as genai

    return genai.Client(api_key=api_key)


def model_id(model: str) -> str:
    """'gemini/gemini-2.5-pro' -> 'gemini-2.5-pro'"""
    return model.removeprefix("gemini/")


def _role(role: str) -> str:
    return "model" if role in ("model", "assistant") else "user"


def to_contents(history, prompt: str = "") -> list:
    """Chat history (+ optional trailing user prompt) -> list[types.Content]."""
    import google.genai.types as types

    contents = []
    for msg in history:
        parts = []
        for p in msg.get("parts", []):
            inline = p.get("inline_data")
            if inline:
                parts.append(
                    types.Part.from_bytes(
                        data=base64.b64decode(inline["data"]),
                        mime_type=inline["mime_type"],
                    )
                )
            else:
                parts.append(types.Part.from_text(text=p.get("text") or ""))
        contents.append(types.Content(role=_role(msg["role"]), parts=parts))
    if prompt:
        contents.append(
            types.Content(role="user", parts=[types.Part.from_text(text=prompt)])
        )
    return contents


def _cache_key(request) -> str:
    return cache_key(
        model_id(request.model),
        {
            "system": request.system or None,
            "history": list(request.history),
            "prompt": request.prompt,
            "schema": (
                _schema.json_schema(request.schema)
                if request.schema is not None
                else None
            ),
        },
    )


def cached(request):
    """Stored result for request, or None on a miss or when caching is off."""
    if not request.cache:
        return None
    text = response_cache.get(_cache_key(request))
    if text is None:
        return None
    return _schema.decode(text, request.schema)


async def call(api_key: str, request):
    """Returns (result, usage: dict).

    result is the validated JSON dict for schema requests, else the response
    text. Successful responses are stored for cached().
    """
    import google.genai.types as types

    config = types.GenerateContentConfig(
        system_instruction=request.system or None,
        **(
            {
                "response_mime_type": "application/json",
                "response_schema": request.schema,
            }
            if request.schema is not None
            else {}
        ),
    )

    client = create_client(api_key)
    try:
        response = await client.aio.models.generate_content(
            model=model_id(request.model),
            contents=to_contents(request.history, request.prompt),
            config=config,
        )
    finally:
        await client.aio.aclose()

    text = response.text or ""
    result = _schema.decode(text, request.schema)

    usage = {}
    meta = getattr(response, "usage_metadata", None)
    if meta:
        usage["input_tokens"] = meta.prompt_token_count or 0
        usage["output_tokens"] = meta.candidates_token_count or 0

    if request.cache and text:
        response_cache.set(_cache_key(request), text)
    return result, usage


async def validate(api_key: str) -> bool:
    """Cheapest authenticated call. Never raises."""
    if not api_key or not api_key.strip():
        return False
    try:
        client = create_client(api_key)
        try:
            response = await client.aio.models.generate_content(
                model=VALIDATION_MODEL, contents="Hello"
            )
        finally:
            await client.aio.aclose()
        return bool(response.text)
    except Exception as e:
        log.info("Gemini key %s failed validation: %s", mask(api_key), e)
        return False
