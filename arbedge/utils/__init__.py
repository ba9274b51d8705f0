"""Utility modules."""

from arbedge.utils.cache import TTLCache, CacheEntry, CacheLookup
from arbedge.utils.logging import setup_logging

__all__ = [
    "TTLCache",
    "CacheEntry",
    "CacheLookup",
    "setup_logging",
]
