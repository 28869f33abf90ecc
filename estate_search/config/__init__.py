"""Configuration module for the property search core."""

from .search_config import (
    SEARCH_CONFIG,
    SearchSettings,
    CacheConfig,
    DispatchConfig,
    DiscoveryConfig,
    SessionConfig,
    StoreConfig,
    VocabularyConfig,
    get_search_settings,
)

__all__ = [
    'SEARCH_CONFIG',
    'SearchSettings',
    'CacheConfig',
    'DispatchConfig',
    'DiscoveryConfig',
    'SessionConfig',
    'StoreConfig',
    'VocabularyConfig',
    'get_search_settings',
]
