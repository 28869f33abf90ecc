"""
PostgreSQL property store.

Answers searches with a single parameterized query against the
``properties`` table through an asyncpg connection pool.
"""

import logging
from typing import Any, List, Optional, Tuple

import asyncpg

from estate_search.error_handling.errors import QueryError
from estate_search.models import Property, SearchCriteria
from .base import PropertyStore


logger = logging.getLogger(__name__)


CREATE_PROPERTIES_TABLE = """
    CREATE TABLE IF NOT EXISTS properties (
        id TEXT PRIMARY KEY,
        title TEXT,
        description TEXT,
        location TEXT,
        city TEXT NOT NULL,
        type TEXT,
        listing_type TEXT,
        price NUMERIC,
        beds INTEGER,
        baths INTEGER,
        living_area NUMERIC,
        features TEXT[] NOT NULL DEFAULT '{}',
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
"""

# asyncpg reports failures through these; all of them become QueryError
_STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def _like_pattern(text: str) -> str:
    """Wrap ``text`` in % wildcards, escaping LIKE metacharacters."""
    escaped = text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f"%{escaped}%"


def build_search_query(free_text: str, criteria: SearchCriteria) -> Tuple[str, List[Any]]:
    """Translate a search into SQL and its positional arguments.

    Every criterion becomes one AND-ed condition. Set-valued criteria are
    compared case-insensitively.

    Returns:
        Tuple of (sql, args) ready for ``conn.fetch(sql, *args)``
    """
    conditions: List[str] = []
    args: List[Any] = []

    def arg(value: Any) -> str:
        args.append(value)
        return f"${len(args)}"

    conditions.append(f"lower(city) = ANY({arg([c.lower() for c in criteria.cities])}::text[])")

    if criteria.property_types:
        conditions.append(
            f"lower(type) = ANY({arg([t.lower() for t in criteria.property_types])}::text[])"
        )

    if criteria.listing_types:
        conditions.append(
            f"lower(listing_type) = ANY({arg([t.lower() for t in criteria.listing_types])}::text[])"
        )

    conditions.append(
        f"(price IS NULL OR price BETWEEN {arg(criteria.min_price)} AND {arg(criteria.max_price)})"
    )

    if criteria.min_beds > 0:
        conditions.append(f"beds >= {arg(criteria.min_beds)}")

    if criteria.min_baths > 0:
        conditions.append(f"baths >= {arg(criteria.min_baths)}")

    if criteria.min_living_area > 0:
        conditions.append(
            f"living_area BETWEEN {arg(criteria.min_living_area)} AND {arg(criteria.max_living_area)}"
        )
    else:
        conditions.append(
            f"(living_area IS NULL OR living_area <= {arg(criteria.max_living_area)})"
        )

    if free_text:
        pattern = arg(_like_pattern(free_text))
        conditions.append(
            f"(title ILIKE {pattern} OR location ILIKE {pattern} OR description ILIKE {pattern})"
        )

    for feature in criteria.features or ():
        if feature.lower().startswith("near "):
            pattern = arg(_like_pattern(feature[len("near "):]))
            conditions.append(
                f"(title ILIKE {pattern} OR location ILIKE {pattern} OR description ILIKE {pattern})"
            )
        else:
            conditions.append(
                f"EXISTS (SELECT 1 FROM unnest(features) AS f WHERE f ILIKE {arg(_like_pattern(feature))})"
            )

    sql = "SELECT * FROM properties WHERE " + " AND ".join(conditions) + " ORDER BY created_at DESC"
    return sql, args


class PostgresPropertyStore(PropertyStore):
    """Property store backed by PostgreSQL.

    Attributes:
        pool: asyncpg connection pool
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    @classmethod
    async def connect(
        cls,
        database_url: str,
        min_size: int = 2,
        max_size: int = 10
    ) -> 'PostgresPropertyStore':
        """Create a connection pool and make sure the table exists.

        Raises:
            QueryError: If the database cannot be reached
        """
        try:
            pool = await asyncpg.create_pool(database_url, min_size=min_size, max_size=max_size)
            async with pool.acquire() as conn:
                await conn.execute(CREATE_PROPERTIES_TABLE)
        except _STORE_ERRORS as e:
            logger.error(f"Failed to connect to PostgreSQL: {e}")
            raise QueryError(f"Failed to connect to PostgreSQL: {e}") from e

        logger.info("PostgreSQL connection pool created")
        return cls(pool)

    async def close(self) -> None:
        await self.pool.close()
        logger.info("PostgreSQL connection pool closed")

    async def search_properties(self, free_text: str, criteria: SearchCriteria) -> List[Property]:
        sql, args = build_search_query(free_text, criteria)
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(sql, *args)
        except _STORE_ERRORS as e:
            raise QueryError(f"Property search failed: {e}") from e

        return [self._to_property(row) for row in rows]

    async def get_max_property_price(self) -> int:
        value = await self._fetchval("SELECT COALESCE(MAX(price), 0) FROM properties")
        return int(value or 0)

    async def get_max_living_area(self) -> int:
        value = await self._fetchval("SELECT COALESCE(MAX(living_area), 0) FROM properties")
        return int(value or 0)

    async def get_all_cities(self) -> List[str]:
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(
                    "SELECT DISTINCT city FROM properties WHERE city IS NOT NULL ORDER BY city"
                )
        except _STORE_ERRORS as e:
            raise QueryError(f"Failed to load cities: {e}") from e
        return [row['city'] for row in rows]

    async def get_city_with_lowest_property_count(self) -> Optional[str]:
        return await self._fetchval("""
            SELECT city FROM properties
            WHERE city IS NOT NULL
            GROUP BY city
            ORDER BY COUNT(*) ASC, city ASC
            LIMIT 1
        """)

    async def _fetchval(self, sql: str) -> Any:
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchval(sql)
        except _STORE_ERRORS as e:
            raise QueryError(f"Query failed: {e}") from e

    def _to_property(self, row: Any) -> Property:
        record = dict(row)
        record['id'] = str(record['id'])
        record['features'] = list(record.get('features') or [])
        return Property.model_validate(record)
