# ecache

A sharded, thread-safe in-memory cache with LRU eviction, an optional
LRU-2 second level, lazy expiration and hooks for observing every
operation. It has no dependencies outside the standard library.

## Installation

```
pip install .
```

## Usage

```python
from ecache.cache import Cache

# 4 buckets (rounded up to a power of two, at most 65535),
# 100 items per bucket, items expire 10 seconds after they were
# last written or read (0, the default, means they never expire).
cache = Cache(4, 100, 10.0)

cache.put("user:1", {"name": "alice"})
value = cache.get("user:1")            # KeyError if absent or expired

cache.put_int64("counter", 42)
number = cache.get_int64("counter")    # stored as 8 little-endian bytes

cache.put_bytes("blob", b"\x01\x02\x03")
data = cache.get_bytes("blob")

cache.delete("user:1")
```

The expiration may also be given as a `datetime.timedelta`. Expired items
are not removed eagerly; they simply stop being found and are later
evicted like any other item.

Object values and byte values are kept apart: `get` raises `KeyError` for
an item stored with `put_bytes` or `put_int64`, and `get_bytes` returns
`None` for an item stored with `put`. `get_int64` raises `ValueError` when
the stored bytes are shorter than eight. `ecache.cache.to_int64` decodes
such bytes directly.

### LRU-2

With LRU-2 enabled, an item moves into a second-level bucket the first time
it is read, so items written once and never read again do not push
frequently used items out.

```python
cache = Cache(4, 100, 10.0).lru2(50)
```

### Walking the contents

```python
def show(key, value, data, expire_at):
    print(key, value, data, expire_at)
    return True  # return False to stop walking the current bucket

cache.walk(show)
```

`value` is `None` for items stored as bytes; `expire_at` is in nanoseconds
since the epoch.

### Inspecting operations

An inspector is called after every put, get and delete, and for each item
evicted to make room. Inspectors run in the order they were registered.

```python
from ecache.cache import Action

def inspector(action, key, value, data, status):
    if action is Action.GET and status == 0:
        print("miss", key)

cache.inspect(inspector)
```

`status` is:

| action       | status |
|--------------|--------|
| `Action.PUT` | `1` added, `0` updated, `-1` evicted (the key is the evicted one) |
| `Action.GET` | `1` hit, `0` miss |
| `Action.DEL` | `1` deleted, `0` not found |

### Statistics

`ecache.stats` counts these events per named pool; several caches may be
bound to the same pool.

```python
from ecache import stats

stats.bind("users", cache)
cache.put("a", 1)
cache.get("a")
node = stats.stats()["users"]
print(node.added, node.get_hit, node.hit_rate())
```

A `StatsNode` holds `evicted`, `updated`, `added`, `get_miss`, `get_hit`,
`del_miss` and `del_hit`. `stats()` returns a live read-only mapping of
pool names to their nodes.

## What it does not do

The cache lives in the memory of one process only: it does not persist
items to disk and does not talk to any external cache server.

## Testing

```
pip install .[test]
pytest
```