"""
Natural language query parser.

This module extracts structured search filters (property type, bedrooms,
price bounds, city, amenities, ...) from free-text property queries.
"""

from typing import List, Optional, Tuple
import re

from estate_search.models import ExtractedFilters, LivingAreaRange
from .vocabulary import (
    AMENITY_KEYWORDS,
    CITY_NAMES,
    LISTING_TYPE_KEYWORDS,
    PROPERTY_TYPE_KEYWORDS,
)


BEDROOM_PATTERN = re.compile(r'(\d+)\s*(?:bedroom|bed|br)')
BATHROOM_PATTERN = re.compile(r'(\d+)\s*(?:bathroom|bath|ba)')
UNDER_PRICE_PATTERN = re.compile(r'under\s*\$?(\d+)(k?)')
BETWEEN_PRICE_PATTERN = re.compile(
    r'between\s*\$?(\d+)(k?)\s*(?:and|-)\s*\$?(\d+)(k?)'
)

_AREA_UNIT = r'(?:m2|sq\s*m|square\s*meters)'
AREA_RANGE_PATTERN = re.compile(r'(\d+)\s*(?:to|-)\s*(\d+)\s*' + _AREA_UNIT)
AREA_MIN_PATTERN = re.compile(r'(?:at least|minimum|min)\s*(\d+)\s*' + _AREA_UNIT)
AREA_MAX_PATTERN = re.compile(r'(?:at most|maximum|max)\s*(\d+)\s*' + _AREA_UNIT)

NEAR_PATTERN = re.compile(
    r'near\s+(.+?)(?:\s+in\b|\s+with\b|\s+under\b|\s+between\b|$)'
)


class QueryParser:
    """Extracts a sparse filter set from a free-text property query.

    Parsing is pure and case-insensitive: every rule runs against a
    lower-cased copy of the query, rules are independent of each other and
    several may fire on the same query. A dimension without textual
    evidence is left as ``None``.
    """

    def parse(self, query: str) -> ExtractedFilters:
        """Parse a natural language query.

        Args:
            query: Raw user query

        Returns:
            ExtractedFilters holding only the dimensions found in the query

        Examples:
            >>> QueryParser().parse("3 bedroom villa in oran").beds
            3
        """
        lower_query = query.lower()
        filters = ExtractedFilters()

        filters.property_types = self._match_all(lower_query, PROPERTY_TYPE_KEYWORDS)
        filters.beds = self._first_int(BEDROOM_PATTERN, lower_query)
        filters.baths = self._first_int(BATHROOM_PATTERN, lower_query)
        filters.amenities = self._match_all(lower_query, AMENITY_KEYWORDS)
        filters.listing_types = self._extract_listing_types(lower_query)

        # "between" runs after "under" and overrides its upper bound
        under_match = UNDER_PRICE_PATTERN.search(lower_query)
        if under_match:
            filters.max_price = self._scale(int(under_match.group(1)), bool(under_match.group(2)))

        between_match = BETWEEN_PRICE_PATTERN.search(lower_query)
        if between_match:
            thousands = bool(between_match.group(2) or between_match.group(4))
            filters.min_price = self._scale(int(between_match.group(1)), thousands)
            filters.max_price = self._scale(int(between_match.group(3)), thousands)

        filters.living_area = self._extract_living_area(lower_query)
        filters.city = self._extract_city(lower_query)
        filters.features = self._extract_near_hint(lower_query)

        return filters

    def _match_all(self, lower_query: str, vocabulary: Tuple[str, ...]) -> Optional[List[str]]:
        matches = [word for word in vocabulary if word in lower_query]
        return matches or None

    def _first_int(self, pattern: re.Pattern, lower_query: str) -> Optional[int]:
        match = pattern.search(lower_query)
        if match:
            return int(match.group(1))
        return None

    def _scale(self, value: int, thousands: bool) -> int:
        return value * 1000 if thousands else value

    def _extract_listing_types(self, lower_query: str) -> Optional[List[str]]:
        """Find listing types phrased as "for rent", "to rent", "for sale", ..."""
        found = [
            listing_type for listing_type in LISTING_TYPE_KEYWORDS
            if f"for {listing_type}" in lower_query or f"to {listing_type}" in lower_query
        ]
        return found or None

    def _extract_living_area(self, lower_query: str) -> Optional[LivingAreaRange]:
        """Extract living area bounds expressed in square meters.

        Handles ranges ("80 to 120 m2") and single bounds ("at least 90 sq m",
        "max 200 square meters"). A single bound overrides the matching side
        of a range.
        """
        area = LivingAreaRange()

        range_match = AREA_RANGE_PATTERN.search(lower_query)
        if range_match:
            area.min = int(range_match.group(1))
            area.max = int(range_match.group(2))

        area_min = self._first_int(AREA_MIN_PATTERN, lower_query)
        if area_min is not None:
            area.min = area_min

        area_max = self._first_int(AREA_MAX_PATTERN, lower_query)
        if area_max is not None:
            area.max = area_max

        if area.min is None and area.max is None:
            return None
        return area

    def _extract_city(self, lower_query: str) -> Optional[str]:
        for city in CITY_NAMES:
            if city in lower_query:
                return ' '.join(word[:1].upper() + word[1:] for word in city.split(' '))
        return None

    def _extract_near_hint(self, lower_query: str) -> Optional[List[str]]:
        """Turn a "near <landmark>" phrase into a free-form feature hint.

        A phrase naming a known city is left to the city rule instead.
        """
        near_match = NEAR_PATTERN.search(lower_query)
        if not near_match:
            return None

        near_location = near_match.group(1).strip()
        if not near_location or any(city in near_location for city in CITY_NAMES):
            return None

        return [f"near {near_location}"]


_default_parser = QueryParser()


def parse_natural_language_query(query: str) -> ExtractedFilters:
    """Parse ``query`` with a shared QueryParser."""
    return _default_parser.parse(query)
