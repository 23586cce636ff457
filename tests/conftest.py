from unittest.mock import MagicMock, patch

import pytest

from niche_finder.providers import gemini, openai_api


@pytest.fixture(autouse=True)
def response_cache():
    """Swap the disk response cache for an always-miss mock in both adapters."""
    cache = MagicMock()
    cache.get.return_value = None
    with patch.object(gemini, "response_cache", cache), patch.object(
        openai_api, "response_cache", cache
    ):
        yield cache
