"""NicheFinder: provider dispatch, key failover, and the niche-finding tasks."""

import asyncio
import base64
import logging

from niche_finder import failover, prompts, providers
from niche_finder.errors import FailoverError, NoUsableKeyError
from niche_finder.keys import PROVIDERS, KeyRing, KeyStore, MemoryKeyStore
from niche_finder.providers import Request

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-pro"

# Gemini tasks run on fixed models; OpenAI tasks use the selected model.
GEMINI_TASK_MODELS = {
    "analysis": "gemini-2.5-pro",
    "keyword": "gemini-2.5-pro",
    "video_ideas": "gemini-2.5-flash",
    "develop_ideas": "gemini-2.5-pro",
    "content_plan": "gemini-2.5-pro",
    "channel_plan": "gemini-2.5-pro",
    "training": "gemini-2.5-flash",
}


def _run_async(coro):
    try:
        return asyncio.run(coro)
    except RuntimeError:
        import nest_asyncio

        nest_asyncio.apply()
        loop = asyncio.get_event_loop()
        return loop.run_until_complete(coro)


class NicheFinder:
    """Niche discovery over Gemini or OpenAI with multi-key failover.

    Keeps one KeyRing per provider. Every task:
      1. picks the provider once from the model name,
      2. tries that provider's keys in order (failover.execute),
      3. marks each failing key invalid in its ring,
      4. records the succeeding key as the provider's active key.

    Token counts are cumulative across calls.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        store: KeyStore | None = None,
        language: str = "Vietnamese",
        max_retries: int = 0,
        max_concurrent: int = 16,
        cache: bool = True,
    ):
        providers.provider_name(model)  # fail fast on unsupported models
        self.model = model
        self.language = language
        self.max_retries = max_retries
        self.max_concurrent = max_concurrent
        self.cache = cache
        self.store = store if store is not None else MemoryKeyStore()
        self.keyrings = {name: KeyRing(name, self.store) for name in PROVIDERS}
        self.training_history: list[dict] = []
        self.total_input_tokens = 0
        self.total_output_tokens = 0

    @property
    def provider(self) -> str:
        return providers.provider_name(self.model)

    # --- Key management ---

    def set_keys(self, provider: str, keys: list[str], check: bool = True):
        """Replace a provider's pool. Returns the statuses after checking."""
        ring = self.keyrings[provider]
        ring.set_keys(keys)
        if check:
            self.check_keys(provider)
        return ring.statuses

    def delete_key(self, provider: str, index: int):
        self.keyrings[provider].delete(index)

    async def acheck_keys(self, provider: str | None = None):
        """Validate every key of one provider (or both) concurrently."""
        names = [provider] if provider else list(PROVIDERS)
        sem = asyncio.Semaphore(self.max_concurrent)

        async def check(p: providers.Provider, key: str) -> bool:
            async with sem:
                return await p.validate(key)

        for name in names:
            ring = self.keyrings[name]
            keys = ring.keys
            if not keys:
                continue
            p = providers.get(name, max_retries=self.max_retries)
            ring.mark_checking()
            results = await asyncio.gather(*[check(p, k) for k in keys])
            ring.apply_validation(list(results))
            log.info("%s keys: %d/%d valid", name, sum(results), len(results))
        return {name: self.keyrings[name].statuses for name in names}

    def check_keys(self, provider: str | None = None):
        return _run_async(self.acheck_keys(provider))

    # --- Execution ---

    def _model_for(self, task: str) -> str:
        if self.provider == "gemini":
            return GEMINI_TASK_MODELS[task]
        return self.model

    def _request(self, task: str, prompt: str = "", system: str = "", schema=None):
        return Request(
            model=self._model_for(task),
            prompt=prompt,
            system=system,
            schema=schema,
            history=tuple(self.training_history),
            cache=self.cache,
        )

    async def run(self, request: Request):
        """Run one request with failover across the provider's keys."""
        p = providers.for_model(request.model, max_retries=self.max_retries)
        ring = self.keyrings[p.name]
        if not ring.has_valid():
            raise NoUsableKeyError(p.name)

        hit = p.cached(request)
        if hit is not None:
            log.info("%s response served from cache", p.name)
            return hit

        try:
            out = await failover.execute(
                ring.keys,
                lambda key: p.execute_request(key, request),
                ring.mark_invalid,
            )
        except FailoverError:
            for r in self.keyrings.values():
                r.clear_active()
            raise

        for name, r in self.keyrings.items():
            if name == p.name:
                r.set_active(out.successful_index)
            else:
                r.clear_active()

        result, usage = out.result
        self.total_input_tokens += usage.get("input_tokens", 0)
        self.total_output_tokens += usage.get("output_tokens", 0)
        if usage:
            log.info(
                "%s key #%d: %d in | %d out",
                p.name,
                out.successful_index,
                usage.get("input_tokens", 0),
                usage.get("output_tokens", 0),
            )
        return result

    # --- Tasks ---

    async def aanalyze_niche(
        self,
        idea: str,
        market: str,
        count: int = 10,
        avoid=(),
        filters: dict | None = None,
    ) -> dict:
        """Generate `count` sub-niches of an idea -> {"niches": [...]}."""
        if not idea.strip():
            raise ValueError("Niche idea must not be empty")
        if not market.strip():
            raise ValueError("Target market must not be empty")
        return await self.run(
            self._request(
                "analysis",
                prompts.analysis_prompt(idea, market),
                prompts.analysis_system(count, avoid, filters, self.language),
                prompts.NicheAnalysis,
            )
        )

    async def aanalyze_keyword(self, idea: str, market: str) -> dict:
        """Analyze an idea as exactly one niche -> {"niches": [niche]}."""
        if not idea.strip():
            raise ValueError("Niche idea must not be empty")
        return await self.run(
            self._request(
                "keyword",
                prompts.keyword_prompt(idea, market),
                prompts.keyword_system(self.language),
                prompts.NicheAnalysis,
            )
        )

    async def avideo_ideas(self, niche: dict, avoid=()) -> dict:
        name = niche["niche_name"]["original"]
        return await self.run(
            self._request(
                "video_ideas",
                prompts.video_ideas_prompt(niche),
                prompts.video_ideas_system(name, avoid, self.language),
                prompts.VideoIdeas,
            )
        )

    async def adevelop_video_ideas(self, niche: dict) -> dict:
        if not niche.get("video_ideas"):
            raise ValueError("Niche has no video ideas to develop")
        return await self.run(
            self._request(
                "develop_ideas",
                prompts.develop_ideas_prompt(niche),
                prompts.develop_ideas_system(
                    niche["niche_name"]["original"], niche["description"], self.language
                ),
                prompts.ContentPlan,
            )
        )

    async def acontent_plan(self, niche: dict, count: int = 5, avoid=()) -> dict:
        return await self.run(
            self._request(
                "content_plan",
                prompts.content_plan_prompt(niche),
                prompts.content_plan_system(
                    niche["niche_name"]["original"],
                    niche["description"],
                    count,
                    avoid,
                    self.language,
                ),
                prompts.ContentPlan,
            )
        )

    async def achannel_plan(self, niche: dict, detailed: bool = False) -> str:
        """Markdown channel growth plan for one niche."""
        return await self.run(
            self._request(
                "channel_plan",
                prompts.channel_plan_prompt(niche, self.language),
                prompts.channel_plan_system(detailed, self.language),
            )
        )

    def _training_turn(self, text: str, files) -> dict:
        inline = self.provider == "gemini"
        combined = text
        if files:
            combined += prompts.attachment_note([name for name, _, _ in files], inline)
        parts = []
        if combined.strip():
            parts.append({"text": combined.strip()})
        if inline:
            parts += [
                {
                    "inline_data": {
                        "mime_type": mime_type,
                        "data": base64.b64encode(data).decode(),
                    }
                }
                for _, mime_type, data in files
            ]
        if not parts:
            raise ValueError("Training message must not be empty")
        return {"role": "user", "parts": parts}

    async def atrain(self, text: str, files=()) -> str:
        """Send a training message; both turns join training_history on success.

        files: [(name, mime_type, data), ...] with raw bytes. Gemini models
        receive them as inline parts; OpenAI models only get a note saying the
        attachments were left out.
        """
        turn = self._training_turn(text, list(files))
        request = Request(
            model=self._model_for("training"),
            system=prompts.TRAINING_SYSTEM,
            history=(*self.training_history, turn),
            cache=False,
        )
        reply = await self.run(request)
        self.training_history += [turn, {"role": "model", "parts": [{"text": reply}]}]
        return reply

    # --- Sync wrappers ---

    def analyze_niche(self, *args, **kwargs) -> dict:
        return _run_async(self.aanalyze_niche(*args, **kwargs))

    def analyze_keyword(self, *args, **kwargs) -> dict:
        return _run_async(self.aanalyze_keyword(*args, **kwargs))

    def video_ideas(self, *args, **kwargs) -> dict:
        return _run_async(self.avideo_ideas(*args, **kwargs))

    def develop_video_ideas(self, *args, **kwargs) -> dict:
        return _run_async(self.adevelop_video_ideas(*args, **kwargs))

    def content_plan(self, *args, **kwargs) -> dict:
        return _run_async(self.acontent_plan(*args, **kwargs))

    def channel_plan(self, *args, **kwargs) -> str:
        return _run_async(self.achannel_plan(*args, **kwargs))

    def train(self, text: str, files=()) -> str:
        return _run_async(self.atrain(text, files))
