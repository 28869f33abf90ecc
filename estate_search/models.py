"""
Data models for the property search core.

This module defines the core data structures used throughout the application.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set
import re

from pydantic import BaseModel, ConfigDict, field_validator


class SortOption(str, Enum):
    """Result orderings offered by the search page."""
    RELEVANCE = "relevance"
    PRICE_ASC = "priceAsc"
    PRICE_DESC = "priceDesc"


class Property(BaseModel):
    """A property record as returned by the record store.

    The search core treats a property as opaque beyond its ``id``; the
    remaining fields are the ones the listing pages commonly read and are
    all optional. Unknown columns are kept as extra attributes so the whole
    record passes through untouched.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    city: Optional[str] = None
    type: Optional[str] = None
    listing_type: Optional[str] = None
    price: Optional[float] = None
    beds: Optional[int] = None
    baths: Optional[int] = None
    living_area: Optional[float] = None
    features: List[str] = []

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Optional[float]:
        """Accept display prices such as "$1,234" or "12 500 000 DZD"."""
        if value is None or isinstance(value, (int, float)):
            return value
        digits = re.sub(r"[^0-9.]", "", str(value))
        if not digits:
            return None
        try:
            return float(digits)
        except ValueError:
            return None

    @field_validator("features", mode="before")
    @classmethod
    def _default_features(cls, value: Any) -> List[str]:
        return value or []


@dataclass
class LivingAreaRange:
    """Living area bounds found in free text, in square meters."""
    min: Optional[int] = None
    max: Optional[int] = None


@dataclass
class ExtractedFilters:
    """Sparse filter set produced from a natural language query.

    Every attribute stays ``None`` unless the parser found positive textual
    evidence for it, so callers can tell "unspecified" apart from
    "explicitly empty".

    Attributes:
        property_types: Property types mentioned in the query
        beds: Minimum bedroom count
        baths: Minimum bathroom count
        min_price: Lower price bound
        max_price: Upper price bound
        city: Title-cased city name
        amenities: Amenity keywords mentioned in the query
        features: Free-form hints that are not structured filters
        listing_types: Listing types ("rent", "sale", ...)
        living_area: Living area bounds
    """
    property_types: Optional[List[str]] = None
    beds: Optional[int] = None
    baths: Optional[int] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    city: Optional[str] = None
    amenities: Optional[List[str]] = None
    features: Optional[List[str]] = None
    listing_types: Optional[List[str]] = None
    living_area: Optional[LivingAreaRange] = None

    def is_empty(self) -> bool:
        """Return True when no dimension was extracted."""
        return all(value is None for value in asdict(self).values())

    def to_dict(self) -> dict:
        """Convert to a dictionary holding only the extracted dimensions."""
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class FilterUniverse:
    """Values currently known to be valid for each filter dimension."""
    cities: Sequence[str] = ()
    property_types: Sequence[str] = ()
    listing_types: Sequence[str] = ()
    amenities: Sequence[str] = ()
    max_price: int = 0
    max_living_area: int = 0


@dataclass
class FilterSet:
    """Snapshot of every filter dimension driving one search page.

    Attributes:
        free_text: Raw user query, possibly empty
        cities: Selected cities; a search needs at least one
        property_types: Property type restriction, empty means any
        listing_types: Listing type restriction, empty means any
        min_price: Inclusive lower price bound
        max_price: Inclusive upper price bound
        min_beds: Minimum number of bedrooms
        min_baths: Minimum number of bathrooms
        min_living_area: Inclusive lower living area bound
        max_living_area: Inclusive upper living area bound
        amenities: Required amenities
        sort_option: Result ordering
    """
    free_text: str = ""
    cities: Set[str] = field(default_factory=set)
    property_types: Set[str] = field(default_factory=set)
    listing_types: Set[str] = field(default_factory=set)
    min_price: int = 0
    max_price: int = 0
    min_beds: int = 0
    min_baths: int = 0
    min_living_area: int = 0
    max_living_area: int = 0
    amenities: Set[str] = field(default_factory=set)
    sort_option: SortOption = SortOption.RELEVANCE


@dataclass(frozen=True)
class SearchCriteria:
    """Conjunctive criteria handed to the record store.

    Collections are sorted tuples so two equal criteria compare and
    serialize identically. ``None`` means the dimension is not restricted.
    """
    cities: tuple = ()
    property_types: Optional[tuple] = None
    listing_types: Optional[tuple] = None
    min_price: int = 0
    max_price: int = 0
    min_beds: int = 0
    min_baths: int = 0
    min_living_area: int = 0
    max_living_area: int = 0
    features: Optional[tuple] = None

    def to_dict(self) -> dict:
        """Convert criteria to a JSON-compatible dictionary."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
        return data


@dataclass(frozen=True)
class SearchRequest:
    """Normalized parameters of a single search."""
    free_text: str
    criteria: SearchCriteria

    def to_params(self) -> Dict[str, Any]:
        """Build the parameter snapshot used as the cache key."""
        return {"free_text": self.free_text, **self.criteria.to_dict()}


@dataclass
class CacheEntry:
    """The last successful search result set.

    Attributes:
        results: Properties in store order
        search_params: Parameter snapshot the results were fetched for
        timestamp_ms: Epoch milliseconds when the entry was stored
    """
    results: List[Property]
    search_params: Dict[str, Any]
    timestamp_ms: int

    def to_dict(self) -> dict:
        """Convert cache entry to a dictionary for JSON serialization."""
        return {
            "results": [prop.model_dump(mode="json") for prop in self.results],
            "search_params": self.search_params,
            "timestamp_ms": self.timestamp_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CacheEntry':
        """Create a CacheEntry from its dictionary form."""
        return cls(
            results=[Property.model_validate(item) for item in data.get("results", [])],
            search_params=dict(data.get("search_params", {})),
            timestamp_ms=int(data.get("timestamp_ms", 0)),
        )


@dataclass
class SearchSuggestion:
    """An entry of the recent searches list."""
    text: str
    type: str = "history"
    timestamp_ms: Optional[int] = None


def sort_properties(properties: List[Property], option: SortOption) -> List[Property]:
    """Order properties for display.

    Relevance keeps the store order. Price orderings push properties
    without a price to the end.
    """
    if option == SortOption.RELEVANCE:
        return list(properties)

    priced = [prop for prop in properties if prop.price is not None]
    unpriced = [prop for prop in properties if prop.price is None]
    priced.sort(key=lambda prop: prop.price, reverse=option == SortOption.PRICE_DESC)
    return priced + unpriced
