"""
Property-based tests for the search dispatcher.

These tests verify the mandatory city scope, the single in-flight search,
cache reuse, feature merging and recovery from store failures.
"""

import asyncio
from typing import List, Optional

from hypothesis import given, settings, strategies as st

from estate_search.caching import SearchCache
from estate_search.error_handling import NoticeBoard, QueryError
from estate_search.error_handling.error_handler import SEARCH_FAILED_MESSAGE
from estate_search.filtering import FilterState
from estate_search.models import FilterSet, FilterUniverse, Property, SearchCriteria
from estate_search.search import InFlightGuard, SearchDispatcher, build_search_request
from estate_search.store import PropertyStore


ORAN_VILLA = Property(id="1", title="Villa", city="Oran", price=90000)


class RecordingStore(PropertyStore):
    """Store double that records searches and can hold them open."""

    def __init__(self, results: Optional[List[Property]] = None, gate: Optional[asyncio.Event] = None):
        self.results = [ORAN_VILLA] if results is None else results
        self.gate = gate
        self.failure: Optional[Exception] = None
        self.calls = []

    async def search_properties(self, free_text: str, criteria: SearchCriteria) -> List[Property]:
        self.calls.append((free_text, criteria))
        if self.gate is not None:
            await self.gate.wait()
        if self.failure is not None:
            raise self.failure
        return list(self.results)

    async def get_max_property_price(self) -> int:
        return 0

    async def get_max_living_area(self) -> int:
        return 0

    async def get_all_cities(self) -> List[str]:
        return []


def make_dispatcher(store, cities=("Oran",), free_text=""):
    state = FilterState()
    state.set_cities(cities)
    state.set_free_text(free_text)
    return SearchDispatcher(filter_state=state, store=store, cache=SearchCache())


class TestCityScope:
    """Tests for Property 4: no cities, no store call."""

    @given(min_beds=st.integers(min_value=0, max_value=5), text=st.text(max_size=30))
    @settings(max_examples=50)
    def test_no_cities_skips_store(self, min_beds, text):
        """
        **Feature: property-search, Property 4: City selection is mandatory scope**

        For any other filters, dispatching with no cities publishes an empty
        result set without calling the store.
        """
        store = RecordingStore()
        dispatcher = make_dispatcher(store, cities=(), free_text=text)
        dispatcher.filter_state.set_min_beds(min_beds)

        asyncio.run(dispatcher.dispatch())

        assert store.calls == []
        assert dispatcher.results.properties == []
        assert dispatcher.results.searched
        assert not dispatcher.results.loading


class TestSingleInFlight:
    """Tests for Property 5: at most one search in flight."""

    def test_back_to_back_dispatch_calls_store_once(self):
        """
        **Feature: property-search, Property 5: At-most-one in-flight**

        Two dispatches issued before the first store call resolves result in
        exactly one store call.
        """
        async def scenario():
            gate = asyncio.Event()
            store = RecordingStore(gate=gate)
            dispatcher = make_dispatcher(store)

            first = asyncio.create_task(dispatcher.dispatch())
            await asyncio.sleep(0)
            assert dispatcher.in_flight
            assert dispatcher.results.loading

            await dispatcher.dispatch()
            gate.set()
            await first
            return store, dispatcher

        store, dispatcher = asyncio.run(scenario())
        assert len(store.calls) == 1
        assert dispatcher.dropped_count == 1
        assert not dispatcher.in_flight
        assert dispatcher.results.properties == [ORAN_VILLA]

    def test_guard_releases_on_error(self):
        guard = InFlightGuard()
        try:
            with guard.hold():
                assert guard.held
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert not guard.held


class TestCacheReuse:

    def test_repeated_search_hits_cache(self):
        """
        **Feature: property-search, E2E: Repeated search**

        Searching Oran twice with default bounds calls the store once; the
        second search is served from the cache.
        """
        async def scenario():
            store = RecordingStore()
            dispatcher = make_dispatcher(store)
            await dispatcher.dispatch()
            await dispatcher.dispatch()
            return store, dispatcher

        store, dispatcher = asyncio.run(scenario())
        assert len(store.calls) == 1
        assert dispatcher.results.from_cache
        assert dispatcher.results.properties == [ORAN_VILLA]

    def test_empty_results_are_searched_again(self):
        async def scenario():
            store = RecordingStore(results=[])
            dispatcher = make_dispatcher(store)
            await dispatcher.dispatch()
            await dispatcher.dispatch()
            return store

        assert len(asyncio.run(scenario()).calls) == 2

    def test_changed_filters_miss_cache(self):
        async def scenario():
            store = RecordingStore()
            dispatcher = make_dispatcher(store)
            await dispatcher.dispatch()
            dispatcher.filter_state.set_min_beds(2)
            await dispatcher.dispatch()
            return store

        assert len(asyncio.run(scenario()).calls) == 2

    def test_sort_option_does_not_change_request(self):
        async def scenario():
            store = RecordingStore()
            dispatcher = make_dispatcher(store)
            await dispatcher.dispatch()
            dispatcher.filter_state.set_sort_option("priceDesc")
            await dispatcher.dispatch()
            return store

        assert len(asyncio.run(scenario()).calls) == 1


class TestStoreFailure:

    def test_failure_clears_results_and_recovers(self):
        async def scenario():
            store = RecordingStore()
            dispatcher = make_dispatcher(store)
            await dispatcher.dispatch()

            store.failure = QueryError("connection refused")
            dispatcher.filter_state.set_min_beds(1)
            await dispatcher.dispatch()
            failed = (
                list(dispatcher.results.properties),
                dispatcher.results.error,
                dispatcher.results.loading,
                dispatcher.in_flight,
            )

            store.failure = None
            dispatcher.filter_state.set_min_beds(2)
            await dispatcher.dispatch()
            return dispatcher, failed

        dispatcher, failed = asyncio.run(scenario())
        properties, error, loading, in_flight = failed

        assert properties == []
        assert error == SEARCH_FAILED_MESSAGE
        assert not loading
        assert not in_flight
        assert dispatcher.notices.latest().level == "error"

        assert dispatcher.results.error is None
        assert dispatcher.results.properties == [ORAN_VILLA]

    def test_unexpected_exception_is_contained(self):
        store = RecordingStore()
        store.failure = RuntimeError("socket closed")
        notices = NoticeBoard()
        state = FilterState()
        state.set_cities(["Oran"])
        dispatcher = SearchDispatcher(state, store, cache=SearchCache(), notices=notices)

        asyncio.run(dispatcher.dispatch())

        assert dispatcher.results.error == SEARCH_FAILED_MESSAGE
        assert notices.latest().message == SEARCH_FAILED_MESSAGE


class TestRequestBuilding:

    def test_free_text_amenities_are_merged(self):
        store = RecordingStore()
        dispatcher = make_dispatcher(store, free_text="house with pool")
        dispatcher.filter_state.set_amenities(["garden"])

        asyncio.run(dispatcher.dispatch())

        free_text, criteria = store.calls[0]
        assert free_text == "house with pool"
        assert criteria.features == ("garden", "pool")

    def test_universe_filters_derived_amenities(self):
        store = RecordingStore()
        dispatcher = make_dispatcher(store, free_text="house with pool near the park")
        dispatcher.universe = FilterUniverse(amenities=["garden"])

        asyncio.run(dispatcher.dispatch())

        _, criteria = store.calls[0]
        assert criteria.features == ("near the park",)

    @given(text=st.text(max_size=2))
    @settings(max_examples=50)
    def test_short_free_text_is_ignored(self, text):
        request = build_search_request(FilterSet(free_text=text, cities={"Oran"}, amenities={"pool"}))
        assert request.free_text == ""
        assert request.criteria.features == ("pool",)

    def test_request_is_normalized(self):
        filters = FilterSet(
            free_text="  villa  ",
            cities={"Oran", "Algiers"},
            property_types={"Villa", "House"},
            max_price=100,
            max_living_area=500,
        )
        request = build_search_request(filters)

        assert request.free_text == "villa"
        assert request.criteria.cities == ("Algiers", "Oran")
        assert request.criteria.property_types == ("House", "Villa")
        assert request.criteria.listing_types is None
        assert request.criteria.features is None
