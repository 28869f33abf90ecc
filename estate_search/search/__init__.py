"""
Search dispatch for the property search core.

Builds the normalized request from the filter state, consults the result
cache and queries the record store.
"""

from .search_dispatcher import (
    InFlightGuard,
    SearchDispatcher,
    SearchResultState,
    build_search_request,
)

__all__ = [
    'InFlightGuard',
    'SearchDispatcher',
    'SearchResultState',
    'build_search_request',
]
