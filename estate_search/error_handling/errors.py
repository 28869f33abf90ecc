"""Exceptions raised by the property search core."""


class SearchError(Exception):
    """Base class for property search failures."""


class QueryError(SearchError):
    """The record store rejected a query or the transport failed."""


class DiscoveryError(SearchError):
    """The session bounds (price/area ceilings, city list) could not be loaded."""
