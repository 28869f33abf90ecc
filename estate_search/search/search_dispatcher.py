"""
Search dispatcher.

Runs one end-to-end search: snapshot the filter state, check the mandatory
city scope, consult the cache, query the record store and publish the
results. At most one search is in flight at any time.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from estate_search.caching.search_cache import SearchCache, get_search_cache
from estate_search.error_handling.error_handler import ErrorHandler
from estate_search.error_handling.notices import NoticeBoard
from estate_search.filtering.filter_state import FilterState
from estate_search.filtering.filter_validator import FilterValidator
from estate_search.models import (
    ExtractedFilters,
    FilterSet,
    FilterUniverse,
    Property,
    SearchCriteria,
    SearchRequest,
)
from estate_search.parsing.query_parser import QueryParser
from estate_search.store.base import PropertyStore


logger = logging.getLogger(__name__)


class InFlightGuard:
    """Marks a search as running for the duration of a ``hold()`` block."""

    def __init__(self):
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    @contextmanager
    def hold(self) -> Iterator[None]:
        self._held = True
        try:
            yield
        finally:
            self._held = False


@dataclass
class SearchResultState:
    """What the list and map views render.

    Attributes:
        properties: Current result set, in store order
        loading: True while the store is being queried
        error: User-facing message of the last failed search, if any
        from_cache: True when the current results were served from the cache
        searched: True once a search has been dispatched
    """
    properties: List[Property] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    from_cache: bool = False
    searched: bool = False


def _sorted_or_none(values) -> Optional[tuple]:
    return tuple(sorted(values)) if values else None


def build_search_request(
    filters: FilterSet,
    derived: Optional[ExtractedFilters] = None,
    min_free_text_length: int = 3
) -> SearchRequest:
    """Assemble the normalized store request for a filter snapshot.

    Free text shorter than ``min_free_text_length`` trimmed characters is
    dropped. Amenities and feature hints derived from the free text are
    unioned with the selected amenities.

    Args:
        filters: Snapshot of the filter state
        derived: Amenities/features taken from the free text
        min_free_text_length: Shortest free text treated as a search signal

    Returns:
        SearchRequest with sorted, de-duplicated collections
    """
    free_text = filters.free_text.strip()
    if len(free_text) < min_free_text_length:
        free_text = ""

    features = set(filters.amenities)
    if free_text and derived is not None:
        features.update(derived.amenities or ())
        features.update(derived.features or ())

    criteria = SearchCriteria(
        cities=tuple(sorted(filters.cities)),
        property_types=_sorted_or_none(filters.property_types),
        listing_types=_sorted_or_none(filters.listing_types),
        min_price=filters.min_price,
        max_price=filters.max_price,
        min_beds=filters.min_beds,
        min_baths=filters.min_baths,
        min_living_area=filters.min_living_area,
        max_living_area=filters.max_living_area,
        features=_sorted_or_none(features),
    )
    return SearchRequest(free_text=free_text, criteria=criteria)


class SearchDispatcher:
    """
    Orchestrates a single property search.

    Store failures are caught here: the visible results are cleared, a
    notice is posted and the dispatcher stays usable for the next search.

    Attributes:
        filter_state: The filter state searched with
        store: Record store queried on cache misses
        cache: Single-slot result cache; the process-wide one by default
        results: Published result state
        universe: Known filter values; when set, amenities derived from the
            free text are validated against it
        dropped_count: Number of dispatches dropped because one was in flight
    """

    def __init__(
        self,
        filter_state: FilterState,
        store: PropertyStore,
        cache: Optional[SearchCache] = None,
        notices: Optional[NoticeBoard] = None,
        error_handler: Optional[ErrorHandler] = None,
        parser: Optional[QueryParser] = None,
        validator: Optional[FilterValidator] = None,
        min_free_text_length: int = 3
    ):
        self.filter_state = filter_state
        self.store = store
        self.cache = cache if cache is not None else get_search_cache()
        self.notices = notices if notices is not None else NoticeBoard()
        self.error_handler = error_handler or ErrorHandler()
        self.parser = parser or QueryParser()
        self.validator = validator or FilterValidator()
        self.min_free_text_length = min_free_text_length

        self.results = SearchResultState()
        self.universe: Optional[FilterUniverse] = None
        self.dropped_count = 0
        self._guard = InFlightGuard()

    @property
    def in_flight(self) -> bool:
        return self._guard.held

    def build_request(self, filters: FilterSet) -> SearchRequest:
        """Build the store request for ``filters``."""
        derived = None
        text = filters.free_text.strip()
        if len(text) >= self.min_free_text_length:
            extracted = self.parser.parse(text)
            derived = ExtractedFilters(amenities=extracted.amenities, features=extracted.features)
            if self.universe is not None:
                derived = self.validator.validate(derived, self.universe)

        return build_search_request(filters, derived, self.min_free_text_length)

    async def dispatch(self) -> None:
        """
        Run a search with the current filter state.

        Dropped silently when another search is in flight. Never raises for
        store failures.
        """
        if self._guard.held:
            self.dropped_count += 1
            logger.debug("Search already in progress, dropping request")
            return

        with self._guard.hold():
            filters = self.filter_state.snapshot()
            self.filter_state.mark_clean()
            self.results.searched = True

            if not filters.cities:
                logger.info("No cities selected, skipping search")
                self._publish([], from_cache=False)
                return

            request = self.build_request(filters)
            params = request.to_params()

            cached = self.cache.lookup(params)
            if cached is not None:
                self._publish(cached.results, from_cache=True)
                return

            logger.info(
                f"Searching: cities={list(request.criteria.cities)}, "
                f"text='{request.free_text}', features={request.criteria.features}"
            )
            self.results.loading = True
            try:
                properties = await self.store.search_properties(request.free_text, request.criteria)
                self._publish(properties, from_cache=False)
                self.cache.store(properties, params)
                logger.info(f"Found {len(properties)} properties for cities: {list(request.criteria.cities)}")
            except Exception as e:
                summary = self.error_handler.describe_search_failure(e)
                self.results.properties = []
                self.results.from_cache = False
                self.results.error = summary['user_message']
                self.notices.error(summary['user_message'])
            finally:
                self.results.loading = False

    def _publish(self, properties: List[Property], from_cache: bool) -> None:
        self.results.properties = list(properties)
        self.results.from_cache = from_cache
        self.results.error = None
