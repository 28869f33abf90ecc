"""
In-memory property store.

Holds property records in a list and answers searches by filtering them.
Useful for tests, demos and small datasets loaded from a JSON file.
"""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, List, Optional, Union

from estate_search.error_handling.errors import QueryError
from estate_search.models import Property, SearchCriteria
from .base import PropertyStore


logger = logging.getLogger(__name__)


class InMemoryPropertyStore(PropertyStore):
    """Filters an in-memory list of properties.

    Free text is matched as a case-insensitive substring of the title,
    location or description. Feature criteria must all be present in the
    property's feature list; "near <place>" hints are matched against the
    location and description instead.
    """

    def __init__(self, properties: Iterable[Union[Property, dict]] = ()):
        self.properties: List[Property] = [
            prop if isinstance(prop, Property) else Property.model_validate(prop)
            for prop in properties
        ]

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> 'InMemoryPropertyStore':
        """Load properties from a JSON file holding a list of records.

        Raises:
            QueryError: If the file cannot be read or parsed
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                records = json.load(f)
            if not isinstance(records, list):
                raise ValueError("expected a JSON list of property records")
            store = cls(records)
        except (OSError, ValueError) as e:
            raise QueryError(f"Failed to load properties from {path}: {e}") from e

        logger.info(f"Loaded {len(store.properties)} properties from {path}")
        return store

    async def search_properties(self, free_text: str, criteria: SearchCriteria) -> List[Property]:
        return [prop for prop in self.properties if self._matches(prop, free_text, criteria)]

    async def get_max_property_price(self) -> int:
        prices = [prop.price for prop in self.properties if prop.price is not None]
        return int(max(prices)) if prices else 0

    async def get_max_living_area(self) -> int:
        areas = [prop.living_area for prop in self.properties if prop.living_area is not None]
        return int(max(areas)) if areas else 0

    async def get_all_cities(self) -> List[str]:
        return sorted({prop.city for prop in self.properties if prop.city})

    async def get_city_with_lowest_property_count(self) -> Optional[str]:
        counts = Counter(prop.city for prop in self.properties if prop.city)
        if not counts:
            return None
        return min(counts, key=lambda city: (counts[city], city))

    def _matches(self, prop: Property, free_text: str, criteria: SearchCriteria) -> bool:
        if not self._in(prop.city, criteria.cities):
            return False

        if criteria.property_types and not self._in(prop.type, criteria.property_types):
            return False

        if criteria.listing_types and not self._in(prop.listing_type, criteria.listing_types):
            return False

        # Properties without a price are not excluded by the price range
        if prop.price is not None:
            if prop.price < criteria.min_price or prop.price > criteria.max_price:
                return False

        if criteria.min_beds > 0 and (prop.beds is None or prop.beds < criteria.min_beds):
            return False

        if criteria.min_baths > 0 and (prop.baths is None or prop.baths < criteria.min_baths):
            return False

        if prop.living_area is not None:
            if not criteria.min_living_area <= prop.living_area <= criteria.max_living_area:
                return False
        elif criteria.min_living_area > 0:
            return False

        if free_text and not self._text_contains(prop, free_text):
            return False

        for feature in criteria.features or ():
            if not self._has_feature(prop, feature):
                return False

        return True

    def _in(self, value: Optional[str], allowed: Iterable[str]) -> bool:
        if value is None:
            return False
        return value.lower() in {item.lower() for item in allowed}

    def _text_contains(self, prop: Property, text: str) -> bool:
        needle = text.lower()
        return any(
            field and needle in field.lower()
            for field in (prop.title, prop.location, prop.description)
        )

    def _has_feature(self, prop: Property, feature: str) -> bool:
        feature_lower = feature.lower()
        if feature_lower.startswith("near "):
            return self._text_contains(prop, feature_lower[len("near "):])
        return any(feature_lower in item.lower() for item in prop.features)
