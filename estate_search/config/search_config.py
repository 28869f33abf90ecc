"""Search configuration settings for the property search core."""

from dataclasses import dataclass, field
from typing import List, Optional
import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class CacheConfig:
    """Search result cache configuration."""
    ttl_ms: int = 300_000
    persist: bool = False


@dataclass
class DispatchConfig:
    """Search dispatch configuration."""
    debounce_ms: int = 100
    min_free_text_length: int = 3


@dataclass
class DiscoveryConfig:
    """Session discovery configuration.

    The default ceilings are used until the record store reports the real
    maximum price and living area.
    """
    default_max_price: int = 50_000_000
    default_max_living_area: int = 500
    max_retries: int = 3
    backoff_base_seconds: float = 0.5


@dataclass
class SessionConfig:
    """Session persistence configuration."""
    session_id: str = "property_search_v1"
    storage_type: str = "file"
    base_dir: str = "./search_sessions"


@dataclass
class StoreConfig:
    """Record store configuration."""
    database_url: Optional[str] = None
    data_file: Optional[str] = None


@dataclass
class VocabularyConfig:
    """Filter values offered by the search page."""
    property_types: List[str] = field(
        default_factory=lambda: ['House', 'Apartment', 'Villa', 'Land']
    )
    listing_types: List[str] = field(
        default_factory=lambda: ['sale', 'rent', 'construction']
    )
    amenities: List[str] = field(
        default_factory=lambda: [
            'pool', 'garden', 'garage', 'balcony', 'terrace', 'parking',
            'furnished', 'air conditioning', 'elevator', 'security', 'gym',
            'wifi', 'modern',
        ]
    )


@dataclass
class SearchSettings:
    """Main search configuration settings."""
    cache: CacheConfig = None
    dispatch: DispatchConfig = None
    discovery: DiscoveryConfig = None
    session: SessionConfig = None
    store: StoreConfig = None
    vocabulary: VocabularyConfig = None

    def __post_init__(self):
        """Initialize nested configs if not provided."""
        if self.cache is None:
            self.cache = CacheConfig()
        if self.dispatch is None:
            self.dispatch = DispatchConfig()
        if self.discovery is None:
            self.discovery = DiscoveryConfig()
        if self.session is None:
            self.session = SessionConfig()
        if self.store is None:
            self.store = StoreConfig()
        if self.vocabulary is None:
            self.vocabulary = VocabularyConfig()


# Default search configuration
SEARCH_CONFIG = {
    "cache": {
        "ttl_ms": int(os.getenv("SEARCH_CACHE_TTL_MS", "300000")),
        "persist": _env_flag("SEARCH_CACHE_PERSIST", "false"),
    },
    "dispatch": {
        "debounce_ms": int(os.getenv("SEARCH_DEBOUNCE_MS", "100")),
        "min_free_text_length": int(os.getenv("MIN_FREE_TEXT_LENGTH", "3")),
    },
    "discovery": {
        "default_max_price": int(os.getenv("DEFAULT_MAX_PRICE", "50000000")),
        "default_max_living_area": int(os.getenv("DEFAULT_MAX_LIVING_AREA", "500")),
        "max_retries": int(os.getenv("DISCOVERY_MAX_RETRIES", "3")),
        "backoff_base_seconds": float(os.getenv("DISCOVERY_BACKOFF_SECONDS", "0.5")),
    },
    "session": {
        "session_id": os.getenv("SESSION_ID", "property_search_v1"),
        "storage_type": os.getenv("STORAGE_TYPE", "file"),
        "base_dir": os.getenv("SESSION_BASE_DIR", "./search_sessions"),
    },
    "store": {
        "database_url": os.getenv("DATABASE_URL"),
        "data_file": os.getenv("PROPERTIES_FILE"),
    },
}


def get_search_settings() -> SearchSettings:
    """Get search settings from configuration."""
    return SearchSettings(
        cache=CacheConfig(**SEARCH_CONFIG["cache"]),
        dispatch=DispatchConfig(**SEARCH_CONFIG["dispatch"]),
        discovery=DiscoveryConfig(**SEARCH_CONFIG["discovery"]),
        session=SessionConfig(**SEARCH_CONFIG["session"]),
        store=StoreConfig(**SEARCH_CONFIG["store"]),
        vocabulary=VocabularyConfig(),
    )
