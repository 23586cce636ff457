"""Ordered failover across a pool of API keys.

Keys are tried strictly left to right, one at a time, starting from index 0 on
every call. The first success wins. Each failure is reported through
on_failure(index) before the next key is tried. Blank entries are empty slots:
they are neither attempted nor reported.

Usage:
    out = await execute(keys, lambda key: call_api(key), ring.mark_invalid)
    out.result, out.successful_index
"""

import logging
from typing import Awaitable, Callable, NamedTuple, TypeVar

from niche_finder.errors import FailoverError
from niche_finder.keys import mask

log = logging.getLogger(__name__)

T = TypeVar("T")


class FailoverResult(NamedTuple):
    result: object
    successful_index: int


def execute(
    pool: list[str],
    action: Callable[[str], Awaitable[T]],
    on_failure: Callable[[int], None] | None = None,
) -> Awaitable[FailoverResult]:
    """Run action with each key in pool until one succeeds.

    Raises FailoverError right away (before any awaitable exists) when the
    pool is empty. Otherwise returns a coroutine resolving to FailoverResult,
    or raising FailoverError once every non-blank key has failed.
    """
    if not pool:
        raise FailoverError("at least one credential required")
    return _run(list(pool), action, on_failure)


async def _run(pool, action, on_failure) -> FailoverResult:
    failures: list[tuple[int, Exception]] = []
    for i, key in enumerate(pool):
        if not key or not key.strip():
            continue
        try:
            result = await action(key)
        except Exception as e:
            log.warning("Key #%d (%s) failed, trying next key: %s", i, mask(key), e)
            if on_failure is not None:
                on_failure(i)
            failures.append((i, e))
            continue
        return FailoverResult(result, i)

    if failures:
        last = failures[-1][1]
        detail = str(last) or type(last).__name__
        message = f"All credentials failed. Last error: {detail}"
    else:
        message = "All credentials failed. Last error: no usable credential"
    raise FailoverError(message, failures)
