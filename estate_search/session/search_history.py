"""Recent searches shown as suggestions under the search box."""

import time
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional

from estate_search.models import SearchSuggestion


class SearchHistory:
    """Most-recent-first list of past free-text searches.

    Entries are de-duplicated case-insensitively. Repeating a search moves it
    to the top; a new search is inserted at the top and the list is capped.
    """

    def __init__(
        self,
        max_entries: int = 10,
        max_suggestions: int = 5,
        clock: Optional[Callable[[], float]] = None
    ):
        self.max_entries = max_entries
        self.max_suggestions = max_suggestions
        self._clock = clock or time.time
        self.entries: List[SearchSuggestion] = []

    def add(self, text: str) -> None:
        """Record a search."""
        text = text.strip()
        if not text:
            return

        lowered = text.lower()
        exists = any(item.text.lower() == lowered for item in self.entries)
        entry = SearchSuggestion(text=text, type="history", timestamp_ms=int(self._clock() * 1000))
        rest = [item for item in self.entries if item.text.lower() != lowered]

        if exists:
            self.entries = [entry] + rest
        else:
            self.entries = ([entry] + rest)[:self.max_entries]

    def filtered(self, term: str = "") -> List[SearchSuggestion]:
        """Return up to ``max_suggestions`` entries containing ``term``."""
        if not term:
            return self.entries[:self.max_suggestions]

        lowered = term.lower()
        return [
            item for item in self.entries if lowered in item.text.lower()
        ][:self.max_suggestions]

    def to_list(self) -> List[Dict[str, Any]]:
        return [asdict(item) for item in self.entries]

    def load(self, data: List[Dict[str, Any]]) -> None:
        """Replace the entries with a list saved by ``to_list``."""
        self.entries = [
            SearchSuggestion(
                text=item["text"],
                type=item.get("type", "history"),
                timestamp_ms=item.get("timestamp_ms"),
            )
            for item in data
            if isinstance(item, dict) and item.get("text")
        ]
