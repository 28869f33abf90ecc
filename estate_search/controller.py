"""
Search controller for one property search page.

Wires the query parser, filter validation, filter state, result cache,
dispatcher and reconciler together and exposes the surface the list and
map views use.
"""

import logging
from typing import List, Optional

from estate_search.caching.search_cache import SearchCache, get_search_cache
from estate_search.config.search_config import SearchSettings, get_search_settings
from estate_search.error_handling.error_handler import DISCOVERY_FAILED_MESSAGE, ErrorHandler
from estate_search.error_handling.errors import DiscoveryError
from estate_search.error_handling.notices import NoticeBoard
from estate_search.filtering.filter_reconciler import FilterReconciler
from estate_search.filtering.filter_state import FilterState
from estate_search.filtering.filter_validator import FilterValidator
from estate_search.models import ExtractedFilters, FilterUniverse, Property, sort_properties
from estate_search.parsing.query_parser import QueryParser
from estate_search.scheduling.debouncer import Debouncer
from estate_search.search.search_dispatcher import SearchDispatcher, SearchResultState
from estate_search.session.search_history import SearchHistory
from estate_search.session.session_manager import SearchSessionManager
from estate_search.store.base import PropertyStore


# Configure logging
logger = logging.getLogger(__name__)


class SearchController:
    """
    Drives one search UI instance.

    Filter edits go through ``state``; the controller never re-runs a search
    implicitly. Callers either search right away (``handle_search``,
    ``process_natural_language_query``) or schedule a debounced search
    (``schedule_dispatch``, ``remove_filter``, ``reset``).

    Attributes:
        settings: Search configuration
        store: Record store
        state: Filter state
        universe: Known filter values, completed by ``initialize``
        dispatcher: Search dispatcher
        reconciler: Filter removal/reset handler
        history: Recent searches
        notices: User-facing notices
        initial_load_done: True once session discovery finished
    """

    def __init__(
        self,
        store: PropertyStore,
        settings: Optional[SearchSettings] = None,
        cache: Optional[SearchCache] = None,
        session_manager: Optional[SearchSessionManager] = None
    ):
        """
        Initialize the controller.

        Args:
            store: Record store to search
            settings: Search configuration (uses defaults if not provided)
            cache: Result cache; defaults to the process-wide cache, or a
                session-backed one when cache persistence is enabled
            session_manager: Session persistence; nothing is persisted
                without it
        """
        self.settings = settings or get_search_settings()
        self.store = store
        self.session_manager = session_manager

        discovery = self.settings.discovery
        self.state = FilterState(
            price_ceiling=discovery.default_max_price,
            area_ceiling=discovery.default_max_living_area
        )

        vocabulary = self.settings.vocabulary
        self.universe = FilterUniverse(
            cities=[],
            property_types=list(vocabulary.property_types),
            listing_types=list(vocabulary.listing_types),
            amenities=list(vocabulary.amenities),
            max_price=discovery.default_max_price,
            max_living_area=discovery.default_max_living_area
        )

        self.parser = QueryParser()
        self.validator = FilterValidator()
        self.notices = NoticeBoard()
        self.history = SearchHistory()
        self.error_handler = ErrorHandler(
            max_retries=discovery.max_retries,
            backoff_base_seconds=discovery.backoff_base_seconds
        )

        if cache is None:
            if self.settings.cache.persist and session_manager is not None:
                cache = SearchCache(ttl_ms=self.settings.cache.ttl_ms, session_manager=session_manager)
            else:
                cache = get_search_cache(ttl_ms=self.settings.cache.ttl_ms)

        self.dispatcher = SearchDispatcher(
            filter_state=self.state,
            store=store,
            cache=cache,
            notices=self.notices,
            error_handler=self.error_handler,
            parser=self.parser,
            validator=self.validator,
            min_free_text_length=self.settings.dispatch.min_free_text_length
        )
        self.dispatcher.universe = self.universe

        self.reconciler = FilterReconciler(
            filter_state=self.state,
            dispatch=self.dispatcher.dispatch,
            debouncer=Debouncer(delay_ms=self.settings.dispatch.debounce_ms)
        )

        self.initial_load_done = False

    # ------------------------------------------------------------------
    # Result surface
    # ------------------------------------------------------------------

    @property
    def results(self) -> SearchResultState:
        return self.dispatcher.results

    @property
    def properties(self) -> List[Property]:
        return self.dispatcher.results.properties

    @property
    def loading(self) -> bool:
        return self.dispatcher.results.loading

    @property
    def error(self) -> Optional[str]:
        return self.dispatcher.results.error

    @property
    def visible_results(self) -> List[Property]:
        """Results ordered by the selected sort option."""
        return sort_properties(self.dispatcher.results.properties, self.state.sort_option)

    def active_filter_count(self) -> int:
        return self.state.active_filter_count()

    # ------------------------------------------------------------------
    # Session bootstrap
    # ------------------------------------------------------------------

    async def initialize(
        self,
        is_new_search: bool = True,
        restore_filters: bool = True,
        run_search: bool = True
    ) -> None:
        """
        Load the session bounds and run the first search.

        Discovers the price and living area ceilings and the city list,
        restores persisted filters and history, and picks a default city for
        a new search without one. A discovery failure keeps the default
        bounds and posts a notice; the page stays usable either way.

        Args:
            is_new_search: Pick a default city when none is selected
            restore_filters: Restore the persisted filters; history is
                always restored
            run_search: Search once the bounds are loaded and a city is
                selected
        """
        self._restore_session(restore_filters)

        try:
            max_price = await self.error_handler.retry_with_backoff(self.store.get_max_property_price)
            max_living_area = await self.error_handler.retry_with_backoff(self.store.get_max_living_area)
            cities = await self.error_handler.retry_with_backoff(self.store.get_all_cities)

            self.state.apply_ceilings(max_price=max_price, max_living_area=max_living_area)
            self.universe.max_price = self.state.price_ceiling
            self.universe.max_living_area = self.state.area_ceiling
            self.universe.cities = list(cities)
            logger.info(
                f"Search bounds loaded: max_price={self.state.price_ceiling}, "
                f"max_living_area={self.state.area_ceiling}, cities={len(cities)}"
            )

            if is_new_search and not self.state.cities:
                default_city = await self.error_handler.retry_with_backoff(
                    self.store.get_city_with_lowest_property_count
                )
                if default_city:
                    logger.info(f"Selecting default city: {default_city}")
                    self.state.set_cities([default_city])
        except DiscoveryError as e:
            logger.warning(f"Session discovery failed, using default bounds: {e}")
            self.notices.error(DISCOVERY_FAILED_MESSAGE)
        finally:
            self.initial_load_done = True

        if run_search and self.state.cities:
            await self.handle_search()

    def _restore_session(self, restore_filters: bool = True) -> None:
        if self.session_manager is None:
            return

        session = self.session_manager.load_session()
        filters = session.get("filters") or {}
        if filters and restore_filters:
            self.state.restore(filters)
            logger.info(f"Restored filters for cities: {sorted(self.state.cities)}")
        self.history.load(session.get("search_history") or [])

    def save_session(self) -> bool:
        """Persist the filters and the recent searches."""
        if self.session_manager is None:
            return False
        return self.session_manager.save_filters(self.state.to_dict(), self.history.to_list())

    # ------------------------------------------------------------------
    # Search actions
    # ------------------------------------------------------------------

    def set_search_term(self, text: str) -> None:
        self.state.set_free_text(text)

    async def handle_search(self) -> None:
        """Search now with the current filters, bypassing the debounce delay."""
        self.reconciler.debouncer.cancel()
        await self.dispatcher.dispatch()

    async def process_natural_language_query(self) -> ExtractedFilters:
        """
        Apply the filters found in the search term, then search.

        The term is parsed, validated against the known filter values and
        merged into the filter state. The search runs even when nothing was
        extracted.

        Returns:
            The validated filters that were applied
        """
        term = self.state.free_text
        extracted = self.parser.parse(term)
        logger.debug(f"Extracted filters before validation: {extracted.to_dict()}")

        validated = self.validator.validate(extracted, self.universe)
        logger.debug(f"Filters after validation: {validated.to_dict()}")

        if not validated.is_empty():
            self.state.apply_extracted(validated)

        self.history.add(term)
        await self.handle_search()
        return validated

    def schedule_dispatch(self) -> None:
        """Schedule a debounced search after filter edits."""
        self.reconciler.schedule_dispatch()

    def remove_filter(self, dimension: str, value: Optional[str] = None) -> None:
        self.reconciler.remove_filter(dimension, value)

    def reset(self) -> None:
        self.reconciler.reset()

    async def wait_idle(self) -> None:
        """Wait for scheduled searches to finish."""
        await self.reconciler.debouncer.wait_idle()
