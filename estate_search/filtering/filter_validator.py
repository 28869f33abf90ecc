"""
Validation of parsed filters against the currently known filter universe.

Natural language parsing recognizes a fixed vocabulary; only the values the
record store actually offers may reach the filter state. Everything else is
dropped silently.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from estate_search.models import ExtractedFilters, FilterUniverse, LivingAreaRange


logger = logging.getLogger(__name__)


class FilterValidator:
    """Intersects extracted filters with a FilterUniverse.

    Collection values are compared case-insensitively and replaced by the
    universe's spelling. Numeric bounds are clamped to ``[0, ceiling]``.
    The input is never mutated.
    """

    def validate(
        self,
        extracted: ExtractedFilters,
        universe: FilterUniverse
    ) -> ExtractedFilters:
        """Validate extracted filters.

        Args:
            extracted: Parser output
            universe: Values currently known to be valid

        Returns:
            A new ExtractedFilters where every value is either absent or
            present in the corresponding universe collection
        """
        validated = replace(extracted)

        validated.city = self._validate_city(extracted.city, universe.cities)
        validated.property_types = self._intersect(
            'property_types', extracted.property_types, universe.property_types
        )
        validated.listing_types = self._intersect(
            'listing_types', extracted.listing_types, universe.listing_types
        )
        validated.amenities = self._intersect(
            'amenities', extracted.amenities, universe.amenities
        )

        validated.min_price = self._clamp('min_price', extracted.min_price, universe.max_price)
        validated.max_price = self._clamp('max_price', extracted.max_price, universe.max_price)
        if (validated.min_price is not None and validated.max_price is not None
                and validated.min_price > validated.max_price):
            validated.min_price = validated.max_price

        validated.living_area = self._validate_living_area(
            extracted.living_area, universe.max_living_area
        )

        if extracted.beds is not None:
            validated.beds = max(0, extracted.beds)
        if extracted.baths is not None:
            validated.baths = max(0, extracted.baths)
        if extracted.features is not None:
            validated.features = list(extracted.features)

        return validated

    def _validate_city(self, city: Optional[str], cities: Sequence[str]) -> Optional[str]:
        if city is None:
            return None

        by_lower = {known.lower(): known for known in cities}
        canonical = by_lower.get(city.lower())
        if canonical is None:
            logger.debug(f"Dropping city '{city}': not among {len(cities)} known cities")
        return canonical

    def _intersect(
        self,
        dimension: str,
        values: Optional[List[str]],
        allowed: Sequence[str]
    ) -> Optional[List[str]]:
        """Keep the values present in ``allowed``, each one independently."""
        if not values:
            return None

        by_lower = {known.lower(): known for known in allowed}
        kept = []
        for value in values:
            canonical = by_lower.get(value.lower())
            if canonical is None:
                logger.debug(f"Dropping {dimension} value '{value}'")
            elif canonical not in kept:
                kept.append(canonical)

        return kept or None

    def _clamp(self, dimension: str, value: Optional[int], ceiling: int) -> Optional[int]:
        if value is None:
            return None
        if not ceiling or ceiling <= 0:
            logger.debug(f"Dropping {dimension}={value}: no known ceiling")
            return None
        return min(max(0, value), ceiling)

    def _validate_living_area(
        self,
        area: Optional[LivingAreaRange],
        ceiling: int
    ) -> Optional[LivingAreaRange]:
        if area is None:
            return None

        area_min = self._clamp('min_living_area', area.min, ceiling)
        area_max = self._clamp('max_living_area', area.max, ceiling)
        if area_min is None and area_max is None:
            return None
        if area_min is not None and area_max is not None and area_min > area_max:
            area_min = area_max
        return LivingAreaRange(min=area_min, max=area_max)
