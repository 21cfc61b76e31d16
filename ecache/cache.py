"""Sharded LRU / LRU-2 in-memory cache with lazy expiration and inspectors."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from typing import Any, Callable, Iterator, Optional, Tuple

_MISSING = object()  # marks an item that holds bytes only, no object value

_U16_MAX = 0xFFFF


class Action(IntEnum):
    """Kinds of cache operations reported to inspectors."""

    PUT = 1
    GET = 2
    DEL = 3


Inspector = Callable[[Action, str, Any, Optional[bytes], int], None]
Walker = Callable[[str, Any, Optional[bytes], int], bool]


def now() -> int:
    """Current wall-clock time in nanoseconds."""
    return time.time_ns()


def hash_bkrd(s: str) -> int:
    """BKDR string hash (seed 131) wrapped to a signed 32-bit integer."""
    h = 0
    for byte in s.encode("utf-8"):
        h = (h * 131 + byte) & 0xFFFFFFFF
    return h - (1 << 32) if h & 0x80000000 else h


def mask_of_next_pow_of_2(cap: int) -> int:
    """Mask (power of two minus one) covering ``cap`` as a 16-bit value."""
    if not 0 <= cap <= _U16_MAX:
        raise ValueError(f"value out of 16-bit range: {cap}")
    if cap > 0 and cap & (cap - 1) == 0:
        return cap - 1
    cap |= cap >> 1
    cap |= cap >> 2
    cap |= cap >> 4
    return cap | (cap >> 8)


def to_int64(data: Optional[bytes]) -> int:
    """Decode the first eight bytes as a little-endian signed integer."""
    if data is None or len(data) < 8:
        raise ValueError("at least 8 bytes are required")
    return int.from_bytes(bytes(data[:8]), "little", signed=True)


def _exposed(iface: Any) -> Any:
    return None if iface is _MISSING else iface


def _noop(action: Action, key: str, value: Any, data: Optional[bytes], status: int) -> None:
    return None


@dataclass
class Node:
    """One cache slot; ``expire_at == 0`` marks it as deleted."""

    key: str
    iface: Any
    data: Optional[bytes]
    expire_at: int


class Bucket:
    """Fixed-capacity LRU list. Iteration runs from most to least recent."""

    def __init__(self, capacity: int) -> None:
        if not 1 <= capacity <= _U16_MAX:
            raise ValueError(f"capacity must be between 1 and {_U16_MAX}: {capacity}")
        self.capacity = capacity
        # first entry is the tail (least recent), last entry the head
        self._nodes: OrderedDict[str, Node] = OrderedDict()

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return reversed(self._nodes.values())

    def __reversed__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def put(self, key: str, iface: Any, data: Optional[bytes], expire_at: int, on: Inspector) -> bool:
        """Store an item at the head; True if added, False if updated."""
        node = self._nodes.get(key)
        if node is not None:
            node.iface, node.data, node.expire_at = iface, data, expire_at
            self._nodes.move_to_end(key)
            return False
        if len(self._nodes) >= self.capacity:
            _, tail = self._nodes.popitem(last=False)
            if tail.expire_at > 0:  # deleted items are dropped silently
                on(Action.PUT, tail.key, _exposed(tail.iface), tail.data, -1)
        self._nodes[key] = Node(key, iface, data, expire_at)
        return True

    def get(self, key: str) -> Optional[Node]:
        """Return the node for ``key`` (possibly deleted) and refresh it to the head."""
        node = self._nodes.get(key)
        if node is None:
            return None
        self._nodes.move_to_end(key)
        return node

    def delete(self, key: str) -> Optional[Tuple[Node, int]]:
        """Mark a live item deleted and sink it; return it with its old expiry."""
        node = self._nodes.get(key)
        if node is None or node.expire_at <= 0:
            return None
        expire_at, node.expire_at = node.expire_at, 0
        self._nodes.move_to_end(key, last=False)
        return node, expire_at

    def walk(self, walker: Walker) -> bool:
        """Call ``walker`` for each live item; stop when it returns False."""
        for node in list(self):
            if node.expire_at > 0 and not walker(node.key, _exposed(node.iface), node.data, node.expire_at):
                return False
        return True


class Cache:
    """Thread-safe cache sharded over buckets, with optional LRU-2 level."""

    def __init__(self, bucket_count: int, cap_per_bucket: int, expiration: float | timedelta = 0) -> None:
        mask = mask_of_next_pow_of_2(bucket_count)
        if isinstance(expiration, timedelta):
            expiration = expiration.total_seconds()
        self._expiration = int(expiration * 1_000_000_000)
        self._mask = mask
        self._locks = [threading.Lock() for _ in range(mask + 1)]
        self._levels: list[list[Optional[Bucket]]] = [
            [Bucket(cap_per_bucket), None] for _ in range(mask + 1)
        ]
        self._on: Inspector = _noop

    def lru2(self, cap_per_bucket: int) -> "Cache":
        """Add a second level: items read twice move up into it."""
        for levels in self._levels:
            levels[1] = Bucket(cap_per_bucket)
        return self

    def _index(self, key: str) -> int:
        return hash_bkrd(key) & self._mask

    def _store(self, key: str, iface: Any, data: Optional[bytes]) -> None:
        idx = self._index(key)
        with self._locks[idx]:
            level0 = self._levels[idx][0]
            added = level0.put(key, iface, data, now() + self._expiration, self._on)
        self._on(Action.PUT, key, _exposed(iface), data, int(added))

    def put(self, key: str, value: Any) -> None:
        """Store an object value."""
        self._store(key, value, None)

    def put_int64(self, key: str, number: int) -> None:
        """Store a signed 64-bit integer as 8 little-endian bytes."""
        self._store(key, _MISSING, number.to_bytes(8, "little", signed=True))

    def put_bytes(self, key: str, data: Optional[bytes]) -> None:
        """Store a bytes value."""
        self._store(key, _MISSING, data)

    def _fresh(self, bucket: Bucket, key: str) -> Optional[Node]:
        node = bucket.get(key)
        if node is not None and node.expire_at > 0 and (self._expiration <= 0 or now() < node.expire_at):
            node.expire_at = now() + self._expiration
            return node
        return None

    def _lookup(self, key: str) -> Tuple[bool, Any, Optional[bytes]]:
        idx = self._index(key)
        with self._locks[idx]:
            level0, level1 = self._levels[idx]
            if level1 is None:
                node = self._fresh(level0, key)
            else:
                removed = level0.delete(key)
                if removed is None:
                    node = self._fresh(level1, key)
                else:
                    node, expire_at = removed
                    level1.put(key, node.iface, node.data, expire_at, self._on)
            if node is None:
                found, iface, data = False, _MISSING, None
            else:
                found, iface, data = True, node.iface, node.data
        if found:
            self._on(Action.GET, key, _exposed(iface), data, 1)
        else:
            self._on(Action.GET, key, None, None, 0)
        return found, iface, data

    def get(self, key: str) -> Any:
        """Return the object stored under ``key``; KeyError if absent."""
        found, iface, _ = self._lookup(key)
        if not found or iface is _MISSING:
            raise KeyError(key)
        return iface

    def get_bytes(self, key: str) -> Optional[bytes]:
        """Return the bytes stored under ``key``; KeyError if absent."""
        found, _, data = self._lookup(key)
        if not found:
            raise KeyError(key)
        return data

    def get_int64(self, key: str) -> int:
        """Return the integer stored under ``key``.

        KeyError if absent, ValueError if the stored bytes are too short.
        """
        found, _, data = self._lookup(key)
        if not found:
            raise KeyError(key)
        return to_int64(data)

    def delete(self, key: str) -> None:
        """Delete ``key`` from every level."""
        idx = self._index(key)
        with self._locks[idx]:
            level0, level1 = self._levels[idx]
            node, expire_at = level0.delete(key) or (None, 0)
            if level1 is not None:
                removed = level1.delete(key)
                if removed is not None and (node is None or expire_at < removed[1]):
                    node = removed[0]
            if node is not None:
                self._on(Action.DEL, key, _exposed(node.iface), node.data, 1)
                node.iface, node.data = _MISSING, None
            else:
                self._on(Action.DEL, key, None, None, 0)

    def walk(self, walker: Walker) -> None:
        """Call ``walker`` on every live item; False stops the current bucket."""
        for lock, (level0, level1) in zip(self._locks, self._levels):
            with lock:
                level0.walk(walker)
                if level1 is not None:
                    level1.walk(walker)

    def inspect(self, inspector: Inspector) -> None:
        """Register an inspector, called after those registered earlier."""
        previous = self._on

        def chained(action: Action, key: str, value: Any, data: Optional[bytes], status: int) -> None:
            previous(action, key, value, data, status)
            inspector(action, key, value, data, status)

        self._on = chained