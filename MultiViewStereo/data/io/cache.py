from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Optional


class LRUCache:
    """
    Small LRU (Least Recently Used) cache used by image providers.

    Usage:
        cache = LRUCache(max_size=256)

        shape = cache.get_or_load('view_000', read_shape)
    """

    def __init__(self, max_size: int = 100):
        """
        Args:
            max_size: Maximum number of items to keep. 0 disables caching.
        """
        self.max_size = max_size
        self.cache: "OrderedDict[Hashable, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __contains__(self, key: Hashable) -> bool:
        return key in self.cache

    def __len__(self) -> int:
        return len(self.cache)

    def get(self, key: Hashable) -> Optional[Any]:
        """Cached value or None"""
        if key in self.cache:
            self.cache.move_to_end(key)
            self.hits += 1
            return self.cache[key]

        self.misses += 1
        return None

    def put(self, key: Hashable, value: Any):
        if self.max_size <= 0:
            return
        if key in self.cache:
            self.cache.move_to_end(key)
        elif len(self.cache) >= self.max_size:
            self.cache.popitem(last=False)
        self.cache[key] = value

    def get_or_load(self, key: Hashable, loader: Callable[[Hashable], Any]) -> Any:
        """
        Return the cached value, computing and storing it on a miss.

        Values which are None are returned but not cached.
        """
        value = self.get(key)
        if value is not None:
            return value

        value = loader(key)
        if value is not None:
            self.put(key, value)
        return value

    def clear(self):
        self.cache.clear()
        self.hits = 0
        self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        total = self.hits + self.misses
        return {
            'size': len(self.cache),
            'max_size': self.max_size,
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': self.hits / total if total > 0 else 0
        }
