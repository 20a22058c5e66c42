from octranspo_fetch.cache.lru import CacheEntry, LRUCache

__all__ = ["CacheEntry", "LRUCache"]
