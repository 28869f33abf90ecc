"""Search result caching."""

from .search_cache import SearchCache, get_search_cache

__all__ = ['SearchCache', 'get_search_cache']
