"""
Filter removal and reset with a guaranteed follow-up search.

Every user action handled here mutates the filter state and then schedules
exactly one search through a debouncer, so a burst of chip removals ends in
a single search with the final state.
"""

import logging
from typing import Awaitable, Callable, Optional

from estate_search.scheduling.debouncer import Debouncer
from .filter_state import FilterState


logger = logging.getLogger(__name__)


class FilterReconciler:
    """Applies filter removals/resets and schedules the follow-up search.

    Attributes:
        filter_state: State being edited
        dispatch: Async callable running one search
        debouncer: Coalesces follow-up searches
    """

    def __init__(
        self,
        filter_state: FilterState,
        dispatch: Callable[[], Awaitable[None]],
        debouncer: Optional[Debouncer] = None
    ):
        self.filter_state = filter_state
        self.dispatch = dispatch
        self.debouncer = debouncer or Debouncer()

    def remove_filter(self, dimension: str, value: Optional[str] = None) -> None:
        """Remove one filter value (or reset one dimension) and schedule a search.

        Unknown dimensions leave the state untouched but still schedule the
        search.
        """
        logger.debug(f"Removing filter {dimension}={value!r}")
        self.filter_state.remove_filter(dimension, value)
        self.schedule_dispatch()

    def reset(self) -> None:
        """Reset every filter except the city selection and schedule a search."""
        self.filter_state.reset()
        self.schedule_dispatch()

    def schedule_dispatch(self) -> None:
        """Schedule one search after the debounce delay."""
        self.debouncer.schedule(self.dispatch)
