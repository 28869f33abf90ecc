"""
Session management for the property search core.

This module persists search page state across runs: the active filters, the
recent searches list and the cached result slot.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime

from estate_search.models import CacheEntry


logger = logging.getLogger(__name__)


class SearchSessionManager:
    """Manages session persistence for the search page.

    Handles loading and saving session state to file-based storage with
    graceful error handling for storage failures. A failed read yields an
    empty session; a failed write is logged and the caller keeps working
    from memory.

    Attributes:
        session_id: Unique identifier for this session
        storage_type: Type of storage backend ("file" or "memory")
        base_dir: Base directory for file-based storage
    """

    def __init__(
        self,
        session_id: str,
        storage_type: str = "file",
        base_dir: str = "./search_sessions"
    ):
        """Initialize session manager.

        Args:
            session_id: Unique identifier for this session
            storage_type: Storage backend type ("file" or "memory")
            base_dir: Base directory for file-based storage
        """
        self.session_id = session_id
        self.storage_type = storage_type
        self.base_dir = Path(base_dir)
        self._memory_state: Optional[Dict[str, Any]] = None

        if self.storage_type == "file":
            try:
                self.base_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Failed to create session directory {self.base_dir}: {e}")

    def _get_session_file_path(self) -> Path:
        """Get the file path for this session."""
        return self.base_dir / f"{self.session_id}.json"

    def load_session(self) -> Dict[str, Any]:
        """Load previous session state from persistent storage.

        Returns:
            Dictionary containing session state with keys:
                - session_id: Session identifier
                - last_run: ISO format timestamp of last save
                - filters: Saved filter state
                - search_history: Recent searches, newest first
                - cache_entry: Last cached search results or None
        """
        if self.storage_type == "memory":
            if self._memory_state is None:
                return self._create_empty_session()
            return json.loads(json.dumps(self._memory_state))

        if self.storage_type != "file":
            logger.warning(f"Unsupported storage type: {self.storage_type}")
            return self._create_empty_session()

        session_file = self._get_session_file_path()

        if not session_file.exists():
            logger.info(f"No existing session found at {session_file}")
            return self._create_empty_session()

        try:
            with open(session_file, 'r', encoding='utf-8') as f:
                session_data = json.load(f)
            if not isinstance(session_data, dict):
                raise ValueError("session file does not hold an object")
            logger.info(f"Successfully loaded session from {session_file}")
            return session_data
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse session JSON from {session_file}: {e}")
            return self._create_empty_session()
        except (IOError, ValueError) as e:
            logger.error(f"Failed to read session file {session_file}: {e}")
            return self._create_empty_session()

    def save_session(self, state: Dict[str, Any]) -> bool:
        """Save session state to persistent storage.

        Args:
            state: Session state dictionary to persist

        Returns:
            True if save was successful, False otherwise
        """
        if self.storage_type == "memory":
            try:
                self._memory_state = json.loads(json.dumps(state))
            except TypeError as e:
                logger.error(f"Failed to serialize session state to JSON: {e}")
                return False
            return True

        if self.storage_type != "file":
            logger.warning(f"Unsupported storage type: {self.storage_type}")
            return False

        session_file = self._get_session_file_path()

        try:
            session_file.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(state, indent=2)
            with open(session_file, 'w', encoding='utf-8') as f:
                f.write(payload)

            logger.debug(f"Saved session to {session_file}")
            return True
        except IOError as e:
            logger.error(f"Failed to write session file {session_file}: {e}")
            return False
        except TypeError as e:
            logger.error(f"Failed to serialize session state to JSON: {e}")
            return False

    def _create_empty_session(self) -> Dict[str, Any]:
        """Create an empty session state."""
        return {
            "session_id": self.session_id,
            "last_run": None,
            "filters": {},
            "search_history": [],
            "cache_entry": None,
        }

    def update_session_timestamp(self, state: Dict[str, Any]) -> Dict[str, Any]:
        """Update the last_run timestamp in session state."""
        state["last_run"] = datetime.now().isoformat()
        return state

    def save_filters(self, filters: Dict[str, Any], search_history: List[Dict[str, Any]]) -> bool:
        """Persist the filter state and the recent searches list."""
        state = self.load_session()
        state["filters"] = filters
        state["search_history"] = search_history
        return self.save_session(self.update_session_timestamp(state))

    def load_cache_entry(self) -> Optional[CacheEntry]:
        """Load the persisted cache slot, if any."""
        data = self.load_session().get("cache_entry")
        if not data:
            return None
        try:
            return CacheEntry.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache entry: {e}")
            return None

    def save_cache_entry(self, entry: Optional[CacheEntry]) -> bool:
        """Persist the cache slot, or clear it when ``entry`` is None."""
        state = self.load_session()
        state["cache_entry"] = entry.to_dict() if entry else None
        return self.save_session(state)
