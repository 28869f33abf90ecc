"""Session persistence and recent searches."""

from .search_history import SearchHistory
from .session_manager import SearchSessionManager

__all__ = ['SearchHistory', 'SearchSessionManager']
