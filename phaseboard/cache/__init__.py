"""PhaseBoard presentation cache."""

from .view_cache import (
    ENTITY_TAGS,
    USER_TAGS,
    BaseCacheManager,
    CacheError,
    MemoryCacheManager,
    NullCacheManager,
    RedisCacheManager,
    create_cache_manager,
)

__all__ = [
    "ENTITY_TAGS",
    "USER_TAGS",
    "BaseCacheManager",
    "CacheError",
    "MemoryCacheManager",
    "NullCacheManager",
    "RedisCacheManager",
    "create_cache_manager",
]
