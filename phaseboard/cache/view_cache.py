"""
PhaseBoard - View Cache
Keyed presentation cache with tag-based invalidation

Cached entries are JSON payloads of read views. Every successful mutation
invalidates the tags of the views it can affect; the cache never decides
what is correct, it only saves recomputing unchanged views between refreshes.

Each tag carries a generation counter bumped on invalidation. A read-through
load records the generations before calling its loader and the result is
only stored if none of them moved, so a view computed before a write is
never cached after that write's invalidation.
"""

# ===============================================================================
# STANDARD IMPORTS SECTION
# ===============================================================================

# Standard library imports (alphabetical)
import json
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Sequence, Set, Tuple

# Third-party imports (alphabetical)
import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError, WatchError

# Local imports (alphabetical)
from phaseboard.config.settings import Settings

# ===============================================================================
# LOGGING CONFIGURATION
# ===============================================================================

logger = structlog.get_logger("phaseboard.cache")

# ===============================================================================
# CONSTANTS & CONFIGURATION
# ===============================================================================

TAG_PROJECTS = "projects"
TAG_TIMELINE = "timeline"
TAG_STATS = "stats"
TAG_USERS = "users"

ENTITY_TAGS: Tuple[str, ...] = (TAG_PROJECTS, TAG_TIMELINE, TAG_STATS)
USER_TAGS: Tuple[str, ...] = ENTITY_TAGS + (TAG_USERS,)

Generations = Tuple[int, ...]


@dataclass
class CacheConfig:
    """Configuration dataclass for cache settings"""
    backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    default_ttl: int = 30
    key_prefix: str = "phaseboard"
    timeout: int = 5
    max_entries: int = 1024


@dataclass
class CacheStats:
    hit_count: int = 0
    miss_count: int = 0
    set_count: int = 0
    stale_skip_count: int = 0
    eviction_count: int = 0
    invalidation_count: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class CacheError(Exception):
    """Base cache exception"""


class CacheConnectionError(CacheError):
    """Cache backend unreachable"""

# ===============================================================================
# CORE IMPLEMENTATION CLASSES
# ===============================================================================

class BaseCacheManager(ABC):
    """Abstract base class for cache managers"""

    def __init__(self, config: CacheConfig):
        self.config = config
        self.logger = logger.bind(cache_manager=self.__class__.__name__)
        self.stats = CacheStats()

    async def initialize(self) -> None:
        """Initialize cache manager resources"""

    async def cleanup(self) -> None:
        """Cleanup cache manager resources"""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get a cached payload, ``None`` on miss"""

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        tags: Iterable[str] = (),
        ttl: Optional[int] = None,
        generations: Optional[Generations] = None,
    ) -> bool:
        """
        Store a JSON-compatible payload under ``key`` and its tags.

        When ``generations`` is given the store is skipped (returning
        ``False``) unless the tags are still at those generations.
        """

    @abstractmethod
    async def invalidate(self, *tags: str) -> int:
        """Drop every entry carrying any of ``tags``; returns entries removed"""

    @abstractmethod
    async def tag_generations(self, tags: Sequence[str]) -> Generations:
        """Current generation of each tag, in order"""

    async def health_check(self) -> Dict[str, Any]:
        return {"backend": self.config.backend, "healthy": True}

    async def invalidate_views(self, *tags: str) -> int:
        """Invalidate after a mutation; a failing backend only leaves entries to expire."""
        try:
            return await self.invalidate(*tags)
        except CacheError as e:
            self.logger.warning("Cache invalidation failed", tags=list(tags), error=str(e))
            return 0

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        tags: Iterable[str] = (),
        ttl: Optional[int] = None,
    ) -> Any:
        """
        Read-through helper.

        Backend failures degrade to calling ``loader`` directly; the payload
        returned is always the JSON-compatible form.
        """
        tags = tuple(tags)
        try:
            cached = await self.get(key)
            if cached is not None:
                return cached
            generations = await self.tag_generations(tags)
        except CacheError as e:
            self.logger.warning("Cache read failed, loading directly", key=key, error=str(e))
            return await loader()

        value = await loader()
        try:
            if not await self.set(key, value, tags=tags, ttl=ttl, generations=generations):
                self.stats.stale_skip_count += 1
                self.logger.debug("View invalidated while loading, not cached", key=key)
        except CacheError as e:
            self.logger.warning("Cache write failed", key=key, error=str(e))
        return value


class MemoryCacheManager(BaseCacheManager):
    """
    In-process cache for single-worker deployments and tests.

    Expired entries are pruned on every write and the least recently used
    entries are evicted beyond ``max_entries``.
    """

    def __init__(self, config: CacheConfig):
        super().__init__(config)
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._key_tags: Dict[str, Tuple[str, ...]] = {}
        self._tags: Dict[str, Set[str]] = {}
        self._generations: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _drop(self, key: str) -> bool:
        found = self._entries.pop(key, None) is not None
        for tag in self._key_tags.pop(key, ()):
            members = self._tags.get(tag)
            if members is not None:
                members.discard(key)
                if not members:
                    del self._tags[tag]
        return found

    def _prune(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            self._drop(key)
        while len(self._entries) > self.config.max_entries:
            oldest = next(iter(self._entries))
            self._drop(oldest)
            self.stats.eviction_count += 1

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            self.stats.miss_count += 1
            return None
        expires_at, value = entry
        if expires_at <= time.monotonic():
            self._drop(key)
            self.stats.miss_count += 1
            return None
        self._entries.move_to_end(key)
        self.stats.hit_count += 1
        return value

    async def set(
        self,
        key: str,
        value: Any,
        tags: Iterable[str] = (),
        ttl: Optional[int] = None,
        generations: Optional[Generations] = None,
    ) -> bool:
        tags = tuple(tags)
        if generations is not None and await self.tag_generations(tags) != tuple(generations):
            return False

        now = time.monotonic()
        self._drop(key)
        self._entries[key] = (now + (ttl or self.config.default_ttl), value)
        self._key_tags[key] = tags
        for tag in tags:
            self._tags.setdefault(tag, set()).add(key)
        self._prune(now)
        self.stats.set_count += 1
        return True

    async def invalidate(self, *tags: str) -> int:
        removed = 0
        for tag in tags:
            self._generations[tag] = self._generations.get(tag, 0) + 1
            for key in list(self._tags.get(tag, ())):
                if self._drop(key):
                    removed += 1
        self.stats.invalidation_count += 1
        self.logger.debug("Cache invalidated", tags=list(tags), removed=removed)
        return removed

    async def tag_generations(self, tags: Sequence[str]) -> Generations:
        return tuple(self._generations.get(tag, 0) for tag in tags)

    async def cleanup(self) -> None:
        self._entries.clear()
        self._key_tags.clear()
        self._tags.clear()


class RedisCacheManager(BaseCacheManager):
    """Redis-backed cache shared by every worker"""

    def __init__(self, config: CacheConfig):
        super().__init__(config)
        self._redis: Optional[aioredis.Redis] = None

    async def initialize(self) -> None:
        """Initialize Redis connection"""
        try:
            self._redis = aioredis.from_url(
                self.config.redis_url,
                socket_timeout=self.config.timeout,
                decode_responses=True,
            )
            await self._redis.ping()
            self.logger.info("Redis cache manager initialized", redis_url=self.config.redis_url)
        except RedisError as e:
            self.logger.error("Failed to initialize Redis cache manager", error=str(e))
            raise CacheConnectionError(f"Failed to initialize Redis: {e}") from e

    async def cleanup(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            self.logger.info("Redis cache manager cleanup completed")

    def _build_key(self, key: str) -> str:
        return f"{self.config.key_prefix}:view:{key}"

    def _tag_key(self, tag: str) -> str:
        return f"{self.config.key_prefix}:tag:{tag}"

    def _generation_key(self, tag: str) -> str:
        return f"{self.config.key_prefix}:gen:{tag}"

    def _client(self) -> aioredis.Redis:
        if self._redis is None:
            raise CacheConnectionError("Redis cache manager not initialized")
        return self._redis

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw_value = await self._client().get(self._build_key(key))
        except RedisError as e:
            raise CacheError(f"Get operation failed: {e}") from e

        if raw_value is None:
            self.stats.miss_count += 1
            return None
        self.stats.hit_count += 1
        return json.loads(raw_value)

    async def tag_generations(self, tags: Sequence[str]) -> Generations:
        if not tags:
            return ()
        try:
            raw = await self._client().mget([self._generation_key(tag) for tag in tags])
        except RedisError as e:
            raise CacheError(f"Generation lookup failed: {e}") from e
        return tuple(int(value or 0) for value in raw)

    async def set(
        self,
        key: str,
        value: Any,
        tags: Iterable[str] = (),
        ttl: Optional[int] = None,
        generations: Optional[Generations] = None,
    ) -> bool:
        tags = tuple(tags)
        full_key = self._build_key(key)
        expiry = ttl or self.config.default_ttl
        generation_keys = [self._generation_key(tag) for tag in tags]
        try:
            async with self._client().pipeline(transaction=True) as pipe:
                if generations is not None and generation_keys:
                    # EXEC aborts if an invalidation bumps a watched generation
                    await pipe.watch(*generation_keys)
                    current = tuple(int(v or 0) for v in await pipe.mget(generation_keys))
                    if current != tuple(generations):
                        await pipe.reset()
                        return False
                    pipe.multi()
                pipe.set(full_key, json.dumps(value), ex=expiry)
                for tag in tags:
                    pipe.sadd(self._tag_key(tag), full_key)
                    pipe.expire(self._tag_key(tag), expiry * 2)
                await pipe.execute()
        except WatchError:
            return False
        except RedisError as e:
            raise CacheError(f"Set operation failed: {e}") from e
        self.stats.set_count += 1
        return True

    async def invalidate(self, *tags: str) -> int:
        client = self._client()
        removed = 0
        try:
            for tag in tags:
                await client.incr(self._generation_key(tag))
                tag_key = self._tag_key(tag)
                keys = await client.smembers(tag_key)
                if keys:
                    removed += await client.delete(*keys)
                await client.delete(tag_key)
        except RedisError as e:
            raise CacheError(f"Invalidate operation failed: {e}") from e
        self.stats.invalidation_count += 1
        return removed

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self._client().ping()
            return {"backend": "redis", "healthy": True}
        except (RedisError, CacheError) as e:
            return {"backend": "redis", "healthy": False, "error": str(e)}


class NullCacheManager(BaseCacheManager):
    """Cache disabled: every read is a miss"""

    async def get(self, key: str) -> Optional[Any]:
        return None

    async def set(
        self,
        key: str,
        value: Any,
        tags: Iterable[str] = (),
        ttl: Optional[int] = None,
        generations: Optional[Generations] = None,
    ) -> bool:
        return True

    async def invalidate(self, *tags: str) -> int:
        return 0

    async def tag_generations(self, tags: Sequence[str]) -> Generations:
        return tuple(0 for _ in tags)

# ===============================================================================
# FACTORY
# ===============================================================================

_BACKENDS = {
    "memory": MemoryCacheManager,
    "redis": RedisCacheManager,
    "none": NullCacheManager,
}


def create_cache_manager(settings: Settings) -> BaseCacheManager:
    config = CacheConfig(
        backend=settings.CACHE_BACKEND,
        redis_url=settings.REDIS_URL,
        default_ttl=settings.CACHE_TTL,
        max_entries=settings.CACHE_MAX_ENTRIES,
    )
    return _BACKENDS[config.backend](config)
