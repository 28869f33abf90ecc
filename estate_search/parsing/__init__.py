"""
Natural language parsing for property searches.

Turns free-text queries such as "3 bedroom villa with pool in Oran under 90k"
into structured, sparse filter sets.
"""

from .query_parser import QueryParser, parse_natural_language_query
from .vocabulary import (
    AMENITY_KEYWORDS,
    CITY_NAMES,
    LISTING_TYPE_KEYWORDS,
    PROPERTY_TYPE_KEYWORDS,
)

__all__ = [
    'QueryParser',
    'parse_natural_language_query',
    'AMENITY_KEYWORDS',
    'CITY_NAMES',
    'LISTING_TYPE_KEYWORDS',
    'PROPERTY_TYPE_KEYWORDS',
]
