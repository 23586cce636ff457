"""Provider capability: one validate() / execute_request() pair per LLM vendor.

The provider is picked once per request from the model name:
  - Gemini:  gemini-*, gemini/*
  - OpenAI:  gpt-*, o1*, o3*, o4*, chatgpt-*, openai/*
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import BaseModel

from niche_finder.providers import gemini, openai_api

_OPENAI_PREFIXES = ("gpt-", "o1", "o3", "o4", "chatgpt-")


def _is_gemini(model: str) -> bool:
    return model.startswith("gemini")


def _is_openai(model: str) -> bool:
    m = model.removeprefix("openai/")
    return any(m.startswith(p) for p in _OPENAI_PREFIXES)


def provider_name(model: str) -> str:
    if _is_gemini(model):
        return "gemini"
    if _is_openai(model):
        return "openai"
    raise ValueError(f"Unsupported model: {model!r}")


@dataclass(frozen=True)
class Request:
    """One provider-agnostic request, consumed by exactly one failover run.

    history holds chat turns: {"role": "user"|"model", "parts": [...]}.
    schema is a pydantic model class; None requests plain text.
    """

    model: str
    prompt: str = ""
    system: str = ""
    schema: type[BaseModel] | None = None
    history: tuple = ()
    cache: bool = True

    def __post_init__(self):
        object.__setattr__(self, "history", tuple(self.history))

    @property
    def provider(self) -> str:
        return provider_name(self.model)


class Provider(ABC):
    name: str

    @abstractmethod
    async def validate(self, api_key: str) -> bool:
        """True if the key works. Never raises."""

    @abstractmethod
    async def execute_request(self, api_key: str, request: Request):
        """Returns (result, usage). Raises on any failure."""

    @abstractmethod
    def cached(self, request: Request):
        """Previously stored result for request, or None. Touches no key."""


class GeminiProvider(Provider):
    name = "gemini"

    async def validate(self, api_key: str) -> bool:
        return await gemini.validate(api_key)

    async def execute_request(self, api_key: str, request: Request):
        return await gemini.call(api_key, request)

    def cached(self, request: Request):
        return gemini.cached(request)


class OpenAIProvider(Provider):
    name = "openai"

    def __init__(self, max_retries: int = 0):
        self.max_retries = max_retries

    async def validate(self, api_key: str) -> bool:
        return await openai_api.validate(api_key)

    async def execute_request(self, api_key: str, request: Request):
        return await openai_api.call(api_key, request, max_retries=self.max_retries)

    def cached(self, request: Request):
        return openai_api.cached(request)


def get(name: str, max_retries: int = 0) -> Provider:
    if name == "gemini":
        return GeminiProvider()
    if name == "openai":
        return OpenAIProvider(max_retries=max_retries)
    raise ValueError(f"Unknown provider: {name!r}")


def for_model(model: str, max_retries: int = 0) -> Provider:
    return get(provider_name(model), max_retries=max_retries)
