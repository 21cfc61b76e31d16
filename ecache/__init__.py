"""Sharded LRU / LRU-2 in-memory cache with lazy expiration and statistics."""

__version__ = "0.1.0"
__all__ = ["cache", "stats"]