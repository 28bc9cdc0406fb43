"""Shared utilities: TTL cache and rate gate."""

from .cache import CacheEntry, TTLCache
from .rate_gate import RateGate

__all__ = ["CacheEntry", "TTLCache", "RateGate"]
