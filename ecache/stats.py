"""Hit/miss statistics for caches, grouped into named pools."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ecache.cache import Action, Cache

_FIELDS = ("evicted", "updated", "added", "get_miss", "get_hit", "del_miss", "del_hit")

_pools: dict[str, "StatsNode"] = {}
_lock = threading.Lock()


@dataclass
class StatsNode:
    """Counters of cache events for one pool."""

    evicted: int = 0
    updated: int = 0
    added: int = 0
    get_miss: int = 0
    get_hit: int = 0
    del_miss: int = 0
    del_hit: int = 0

    def hit_rate(self) -> float:
        """Share of reads that hit; 0.0 when there were none."""
        total = self.get_hit + self.get_miss
        if total == 0:
            return 0.0
        return self.get_hit / total


def bind(pool: str, *args: Cache) -> None:
    """Count the events of the given caches into the pool named ``pool``."""
    with _lock:
        node = _pools.setdefault(pool, StatsNode())

    def record(action: Action, key: str, value: Any, data: Optional[bytes], status: int) -> None:
        field = _FIELDS[status + int(action) * 2 - 1]
        with _lock:
            setattr(node, field, getattr(node, field) + 1)

    for cache in args:
        cache.inspect(record)


def stats() -> Mapping[str, StatsNode]:
    """Live read-only view of all pools and their counters."""
    return MappingProxyType(_pools)