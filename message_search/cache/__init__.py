"""Cache module initialization."""

from .cache_sweeper import CacheSweeper
from .result_cache import ResultCache, make_cache_key

__all__ = ["CacheSweeper", "ResultCache", "make_cache_key"]
