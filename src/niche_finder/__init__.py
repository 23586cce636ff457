"""YouTube niche discovery over Gemini or OpenAI with multi-key failover.

Per-provider routing, chosen once per request from the model name:
  - Gemini (gemini-*):            native google.genai SDK, native response_schema
  - OpenAI (gpt-*, o1*, etc.):    direct SDK with HTTP/2, json_object + schema text

Usage:
    from niche_finder import NicheFinder
    finder = NicheFinder("gemini-2.5-pro")
    finder.set_keys("gemini", ["key1", "key2"])   # validates both concurrently
    result = finder.analyze_niche("home cooking", "United States", count=5)
    # {"niches": [{"niche_name": {"original": ..., "translated": ...}, ...}]}
    finder.keyrings["gemini"].active_index
    # 0 or 1, whichever key served the request

    finder = NicheFinder("gpt-4.1-mini", store=DiskKeyStore())
    finder.set_keys("openai", keys_from_env("openai"))

Notes:
  - Keys are always tried first to last; a failing key is marked invalid and
    the next one is tried. Invalid keys are still tried on later calls.
  - Only check_keys() marks keys valid. Tasks refuse to run until at least
    one key of the selected provider is valid.
  - JSON responses are cached on disk (NICHE_FINDER_CACHE_DIR); pass
    cache=False to NicheFinder to disable.
"""

from niche_finder.errors import (
    FailoverError,
    InvalidResponseFormat,
    NicheFinderError,
    NoUsableKeyError,
)
from niche_finder.failover import FailoverResult, execute
from niche_finder.finder import NicheFinder
from niche_finder.keys import (
    DiskKeyStore,
    KeyRing,
    KeyStatus,
    MemoryKeyStore,
    keys_from_env,
)
from niche_finder.providers import Request, for_model
from niche_finder.schema import Ok, ParseError, parse_response

__all__ = [
    "DiskKeyStore",
    "FailoverError",
    "FailoverResult",
    "InvalidResponseFormat",
    "KeyRing",
    "KeyStatus",
    "MemoryKeyStore",
    "NicheFinder",
    "NicheFinderError",
    "NoUsableKeyError",
    "Ok",
    "ParseError",
    "Request",
    "execute",
    "for_model",
    "keys_from_env",
    "parse_response",
]
