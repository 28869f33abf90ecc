"""
Error handling module for the property search core.

Provides the search exception taxonomy, retry logic for session discovery,
and the user-facing notice board.
"""

from .error_handler import ErrorHandler, RetryConfig
from .errors import DiscoveryError, QueryError, SearchError
from .notices import Notice, NoticeBoard

__all__ = [
    'ErrorHandler',
    'RetryConfig',
    'DiscoveryError',
    'QueryError',
    'SearchError',
    'Notice',
    'NoticeBoard',
]
