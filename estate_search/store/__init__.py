"""
Record store adapters.

The search core only talks to the PropertyStore interface; the in-memory and
PostgreSQL stores are interchangeable implementations of it.
"""

from .base import PropertyStore
from .memory_store import InMemoryPropertyStore
from .postgres_store import PostgresPropertyStore

__all__ = ['PropertyStore', 'InMemoryPropertyStore', 'PostgresPropertyStore']
