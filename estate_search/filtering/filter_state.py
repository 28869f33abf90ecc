"""
Authoritative filter state for one search page.

FilterState owns every filter dimension together with the session ceilings
for price and living area, keeps the range invariants on every write, and
derives the active filter count shown next to the filter button.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Protocol

from estate_search.models import ExtractedFilters, FilterSet, SortOption


logger = logging.getLogger(__name__)


class FilterDimension(str, Enum):
    """Names accepted by ``remove_filter``; they match the filter chip ids."""
    CITY = "city"
    PROPERTY_TYPE = "propertyType"
    LISTING_TYPE = "listingType"
    BEDS = "beds"
    BATHS = "baths"
    LIVING_AREA = "livingArea"
    PRICE = "price"
    AMENITIES = "amenities"


class FilterSetters(Protocol):
    """The fixed setter surface used to apply parsed filters."""

    def set_cities(self, cities: Iterable[str]) -> None: ...
    def set_property_types(self, types: Iterable[str]) -> None: ...
    def set_listing_types(self, types: Iterable[str]) -> None: ...
    def set_min_price(self, price: int) -> None: ...
    def set_max_price(self, price: int) -> None: ...
    def set_min_beds(self, beds: int) -> None: ...
    def set_min_baths(self, baths: int) -> None: ...
    def set_min_living_area(self, area: int) -> None: ...
    def set_max_living_area(self, area: int) -> None: ...
    def set_amenities(self, amenities: Iterable[str]) -> None: ...


def apply_extracted_filters(filters: ExtractedFilters, setters: FilterSetters) -> None:
    """Apply validated natural language filters through ``setters``.

    Only positive findings are applied; absent or zero values leave the
    corresponding dimension untouched. A parsed city replaces the current
    city selection.
    """
    if filters.property_types:
        setters.set_property_types(filters.property_types)

    if filters.beds and filters.beds > 0:
        setters.set_min_beds(filters.beds)

    if filters.baths and filters.baths > 0:
        setters.set_min_baths(filters.baths)

    # Upper bound first so a raised minimum cannot be pulled down again
    if filters.max_price and filters.max_price > 0:
        setters.set_max_price(filters.max_price)

    if filters.min_price and filters.min_price > 0:
        setters.set_min_price(filters.min_price)

    if filters.city:
        setters.set_cities([filters.city])

    if filters.amenities:
        setters.set_amenities(filters.amenities)

    if filters.living_area:
        if filters.living_area.max:
            setters.set_max_living_area(filters.living_area.max)
        if filters.living_area.min:
            setters.set_min_living_area(filters.living_area.min)

    if filters.listing_types:
        setters.set_listing_types(filters.listing_types)


class FilterState:
    """Mutable record of all active filter dimensions.

    Invariants kept by every setter:
        0 <= min_price <= max_price <= price_ceiling
        0 <= min_living_area <= max_living_area <= area_ceiling
        min_beds >= 0 and min_baths >= 0

    Cities are the mandatory search scope rather than an optional filter:
    they are not counted as active filters and survive ``reset()``.
    """

    def __init__(self, price_ceiling: int = 50_000_000, area_ceiling: int = 500):
        self._price_ceiling = max(0, int(price_ceiling))
        self._area_ceiling = max(0, int(area_ceiling))

        self._free_text = ""
        self._cities = set()
        self._property_types = set()
        self._listing_types = set()
        self._min_price = 0
        self._max_price = self._price_ceiling
        self._min_beds = 0
        self._min_baths = 0
        self._min_living_area = 0
        self._max_living_area = self._area_ceiling
        self._amenities = set()
        self._sort_option = SortOption.RELEVANCE

        self._dirty = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def free_text(self) -> str:
        return self._free_text

    @property
    def cities(self) -> frozenset:
        return frozenset(self._cities)

    @property
    def property_types(self) -> frozenset:
        return frozenset(self._property_types)

    @property
    def listing_types(self) -> frozenset:
        return frozenset(self._listing_types)

    @property
    def min_price(self) -> int:
        return self._min_price

    @property
    def max_price(self) -> int:
        return self._max_price

    @property
    def min_beds(self) -> int:
        return self._min_beds

    @property
    def min_baths(self) -> int:
        return self._min_baths

    @property
    def min_living_area(self) -> int:
        return self._min_living_area

    @property
    def max_living_area(self) -> int:
        return self._max_living_area

    @property
    def amenities(self) -> frozenset:
        return frozenset(self._amenities)

    @property
    def sort_option(self) -> SortOption:
        return self._sort_option

    @property
    def price_ceiling(self) -> int:
        return self._price_ceiling

    @property
    def area_ceiling(self) -> int:
        return self._area_ceiling

    @property
    def dirty(self) -> bool:
        """True when a filter changed since the last ``mark_clean()``."""
        return self._dirty

    def mark_clean(self) -> None:
        self._dirty = False

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def set_free_text(self, text: str) -> None:
        self._free_text = text or ""
        self._dirty = True

    def set_cities(self, cities: Iterable[str]) -> None:
        self._cities = set(cities)
        self._dirty = True

    def set_property_types(self, types: Iterable[str]) -> None:
        self._property_types = set(types)
        self._dirty = True

    def set_listing_types(self, types: Iterable[str]) -> None:
        self._listing_types = set(types)
        self._dirty = True

    def set_amenities(self, amenities: Iterable[str]) -> None:
        self._amenities = set(amenities)
        self._dirty = True

    def set_min_price(self, price: int) -> None:
        """Set the lower price bound, raising the upper bound if needed."""
        self._min_price = self._clamp(price, self._price_ceiling)
        if self._min_price > self._max_price:
            self._max_price = self._min_price
        self._dirty = True

    def set_max_price(self, price: int) -> None:
        """Set the upper price bound, lowering the lower bound if needed."""
        self._max_price = self._clamp(price, self._price_ceiling)
        if self._max_price < self._min_price:
            self._min_price = self._max_price
        self._dirty = True

    def set_min_beds(self, beds: int) -> None:
        self._min_beds = max(0, int(beds))
        self._dirty = True

    def set_min_baths(self, baths: int) -> None:
        self._min_baths = max(0, int(baths))
        self._dirty = True

    def set_min_living_area(self, area: int) -> None:
        self._min_living_area = self._clamp(area, self._area_ceiling)
        if self._min_living_area > self._max_living_area:
            self._max_living_area = self._min_living_area
        self._dirty = True

    def set_max_living_area(self, area: int) -> None:
        self._max_living_area = self._clamp(area, self._area_ceiling)
        if self._max_living_area < self._min_living_area:
            self._min_living_area = self._max_living_area
        self._dirty = True

    def set_sort_option(self, option) -> None:
        self._sort_option = SortOption(option)
        self._dirty = True

    def _clamp(self, value: int, ceiling: int) -> int:
        return min(max(0, int(value)), ceiling)

    # ------------------------------------------------------------------
    # Derived metadata and bulk operations
    # ------------------------------------------------------------------

    def active_filter_count(self) -> int:
        """Count the optional filter dimensions that differ from their defaults.

        City selection is never counted.
        """
        count = 0
        if self._property_types:
            count += 1
        if self._listing_types:
            count += 1
        if self._min_beds > 0:
            count += 1
        if self._min_baths > 0:
            count += 1
        if self._min_living_area > 0:
            count += 1
        if self._max_living_area < self._area_ceiling:
            count += 1
        if self._amenities:
            count += 1
        return count

    def apply_ceilings(
        self,
        max_price: Optional[int] = None,
        max_living_area: Optional[int] = None
    ) -> None:
        """Install the price and living area ceilings discovered for the session.

        Upper bounds still sitting at the old ceiling follow the new one.
        A ceiling is never lowered below a bound the user has set.
        Non-positive values are ignored.
        """
        if max_price is not None and max_price > 0:
            following = self._max_price == self._price_ceiling
            floor = self._min_price if following else max(self._min_price, self._max_price)
            self._price_ceiling = max(int(max_price), floor)
            if following:
                self._max_price = self._price_ceiling

        if max_living_area is not None and max_living_area > 0:
            following = self._max_living_area == self._area_ceiling
            floor = (
                self._min_living_area if following
                else max(self._min_living_area, self._max_living_area)
            )
            self._area_ceiling = max(int(max_living_area), floor)
            if following:
                self._max_living_area = self._area_ceiling

        logger.debug(
            f"Ceilings set: price={self._price_ceiling}, living_area={self._area_ceiling}"
        )

    def reset(self) -> None:
        """Restore every filter to its default, keeping the city selection."""
        logger.info(f"Resetting filters, keeping cities: {sorted(self._cities)}")
        self._property_types = set()
        self._listing_types = set()
        self._min_price = 0
        self._max_price = self._price_ceiling
        self._min_beds = 0
        self._min_baths = 0
        self._min_living_area = 0
        self._max_living_area = self._area_ceiling
        self._amenities = set()
        self._sort_option = SortOption.RELEVANCE
        self._dirty = True

    def remove_filter(self, dimension: str, value: Optional[str] = None) -> bool:
        """Remove one filter value or reset one scalar/range dimension.

        Args:
            dimension: One of the FilterDimension values
            value: Value to remove from a set-valued dimension. Without it,
                ``amenities`` is cleared and the other set dimensions are
                left untouched.

        Returns:
            True if the dimension was recognized, False for a no-op
        """
        try:
            dimension = FilterDimension(dimension)
        except ValueError:
            logger.debug(f"Ignoring removal of unknown filter dimension '{dimension}'")
            return False

        if dimension == FilterDimension.CITY:
            if value:
                self._cities.discard(value)
        elif dimension == FilterDimension.PROPERTY_TYPE:
            if value:
                self._property_types.discard(value)
        elif dimension == FilterDimension.LISTING_TYPE:
            if value:
                self._listing_types.discard(value)
        elif dimension == FilterDimension.BEDS:
            self._min_beds = 0
        elif dimension == FilterDimension.BATHS:
            self._min_baths = 0
        elif dimension == FilterDimension.LIVING_AREA:
            self._min_living_area = 0
            self._max_living_area = self._area_ceiling
        elif dimension == FilterDimension.PRICE:
            self._min_price = 0
            self._max_price = self._price_ceiling
        elif dimension == FilterDimension.AMENITIES:
            if value:
                self._amenities.discard(value)
            else:
                self._amenities = set()

        self._dirty = True
        return True

    def apply_extracted(self, filters: ExtractedFilters) -> None:
        """Merge validated natural language filters into the state."""
        apply_extracted_filters(filters, self)

    def snapshot(self) -> FilterSet:
        """Return an independent copy of the current filters."""
        return FilterSet(
            free_text=self._free_text,
            cities=set(self._cities),
            property_types=set(self._property_types),
            listing_types=set(self._listing_types),
            min_price=self._min_price,
            max_price=self._max_price,
            min_beds=self._min_beds,
            min_baths=self._min_baths,
            min_living_area=self._min_living_area,
            max_living_area=self._max_living_area,
            amenities=set(self._amenities),
            sort_option=self._sort_option,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the filters to a JSON-compatible dictionary."""
        return {
            "free_text": self._free_text,
            "cities": sorted(self._cities),
            "property_types": sorted(self._property_types),
            "listing_types": sorted(self._listing_types),
            "min_price": self._min_price,
            "max_price": self._max_price,
            "min_beds": self._min_beds,
            "min_baths": self._min_baths,
            "min_living_area": self._min_living_area,
            "max_living_area": self._max_living_area,
            "amenities": sorted(self._amenities),
            "sort_option": self._sort_option.value,
        }

    def restore(self, data: Dict[str, Any]) -> None:
        """Restore filters saved with ``to_dict``.

        Missing keys keep their current value; bounds are clamped to the
        current ceilings.
        """
        if "free_text" in data:
            self.set_free_text(data["free_text"])
        if "cities" in data:
            self.set_cities(data["cities"])
        if "property_types" in data:
            self.set_property_types(data["property_types"])
        if "listing_types" in data:
            self.set_listing_types(data["listing_types"])
        if "amenities" in data:
            self.set_amenities(data["amenities"])
        # Upper bounds first so the lower bounds clamp against them
        numeric_setters = (
            ("max_price", self.set_max_price),
            ("min_price", self.set_min_price),
            ("min_beds", self.set_min_beds),
            ("min_baths", self.set_min_baths),
            ("max_living_area", self.set_max_living_area),
            ("min_living_area", self.set_min_living_area),
        )
        for key, setter in numeric_setters:
            if key not in data:
                continue
            try:
                setter(data[key])
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid saved value for {key}: {data[key]!r}")
        if "sort_option" in data:
            try:
                self.set_sort_option(data["sort_option"])
            except ValueError:
                logger.warning(f"Ignoring unknown sort option '{data['sort_option']}'")
