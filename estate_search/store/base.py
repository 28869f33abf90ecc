"""Record store interface consumed by the search core."""

from abc import ABC, abstractmethod
from typing import List, Optional

from estate_search.models import Property, SearchCriteria


class PropertyStore(ABC):
    """Queryable property record store.

    Implementations raise ``QueryError`` for any backend or transport
    failure. All supplied criteria are conjunctive.
    """

    @abstractmethod
    async def search_properties(self, free_text: str, criteria: SearchCriteria) -> List[Property]:
        """Return the properties matching ``free_text`` and every criterion."""

    @abstractmethod
    async def get_max_property_price(self) -> int:
        """Return the highest listed price, 0 for an empty store."""

    @abstractmethod
    async def get_max_living_area(self) -> int:
        """Return the largest living area, 0 for an empty store."""

    @abstractmethod
    async def get_all_cities(self) -> List[str]:
        """Return every city with at least one property, sorted."""

    async def get_city_with_lowest_property_count(self) -> Optional[str]:
        """Return the city offered as default selection for a new search."""
        cities = await self.get_all_cities()
        return cities[0] if cities else None
