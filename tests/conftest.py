import pytest

from estate_search.caching import search_cache


@pytest.fixture(autouse=True)
def fresh_search_cache(monkeypatch):
    """Give every test its own process-wide result cache."""
    monkeypatch.setattr(search_cache, "_shared_cache", None)
