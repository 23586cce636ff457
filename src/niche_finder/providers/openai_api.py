"""OpenAI provider via direct SDK with HTTP/2.

Chat completions have no native schema enforcement here, so structured
requests use response_format={"type": "json_object"} and append the JSON
Schema to the system message. History is flattened to text: inline file
parts are dropped and "model" turns become "assistant".
"""

import json
import logging

import httpx

from niche_finder import schema as _schema
from niche_finder._cache import cache_key, response_cache
from niche_finder.keys import mask

log = logging.getLogger(__name__)

_SCHEMA_INSTRUCTION = (
    "ALWAYS respond with a JSON object that strictly adheres to the following "
    "schema. Do not include any text, markdown, or explanation outside of the "
    "single JSON object. JSON Schema:\n"
)


def create_client(api_key: str, max_retries: int = 0):
    from openai import AsyncOpenAI

    return AsyncOpenAI(
        api_key=api_key,
        http_client=httpx.AsyncClient(http2=True),
        max_retries=max_retries,
    )


def model_id(model: str) -> str:
    """'openai/gpt-4.1-mini' -> 'gpt-4.1-mini', 'gpt-4.1-mini' -> 'gpt-4.1-mini'"""
    return model.removeprefix("openai/")


def schema_instruction(schema) -> str:
    return _SCHEMA_INSTRUCTION + json.dumps(_schema.json_schema(schema), indent=2)


def to_messages(history, system: str = "", prompt: str = "") -> list[dict]:
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    for msg in history:
        text = "\n".join(p["text"] for p in msg.get("parts", []) if p.get("text"))
        if not text.strip():
            continue
        role = "assistant" if msg["role"] in ("model", "assistant") else "user"
        messages.append({"role": role, "content": text})
    if prompt:
        messages.append({"role": "user", "content": prompt})
    return messages


def _prepare(request) -> tuple[list[dict], dict]:
    system = request.system
    kwargs = {}
    if request.schema is not None:
        instruction = schema_instruction(request.schema)
        system = f"{system}\n\n{instruction}" if system else instruction
        kwargs["response_format"] = {"type": "json_object"}
    return to_messages(request.history, system, request.prompt), kwargs


def _cache_key(request, messages, kwargs) -> str:
    return cache_key(model_id(request.model), {"messages": messages, **kwargs})


def cached(request):
    """Stored result for request, or None on a miss or when caching is off."""
    if not request.cache:
        return None
    messages, kwargs = _prepare(request)
    text = response_cache.get(_cache_key(request, messages, kwargs))
    if text is None:
        return None
    return _schema.decode(text, request.schema)


async def call(api_key: str, request, max_retries: int = 0):
    """Returns (result, usage: dict).

    result is the validated JSON dict for schema requests, else the response
    text. Successful responses are stored for cached().
    """
    messages, kwargs = _prepare(request)

    async with create_client(api_key, max_retries) as client:
        response = await client.chat.completions.create(
            model=model_id(request.model), messages=messages, **kwargs
        )

    text = ""
    if response.choices:
        text = response.choices[0].message.content or ""
    result = _schema.decode(text, request.schema)

    usage = {}
    if response.usage:
        usage["input_tokens"] = response.usage.prompt_tokens or 0
        usage["output_tokens"] = response.usage.completion_tokens or 0

    if request.cache and text:
        response_cache.set(_cache_key(request, messages, kwargs), text)
    return result, usage


async def validate(api_key: str) -> bool:
    """List models with the key. Never raises."""
    if not api_key or not api_key.strip():
        return False
    try:
        async with create_client(api_key) as client:
            await client.models.list()
        return True
    except Exception as e:
        log.info("OpenAI key %s failed validation: %s", mask(api_key), e)
        return False
