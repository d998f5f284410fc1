"""TTL cache for ComfyUI responses (node catalog, health probes)."""
import time
from typing import Any, Callable


class ObjectInfoCache:
    """
    Key -> value map with a fixed TTL.

    Owned by whoever builds it (the app's service container); never a module
    global. `clock` is injectable for tests.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] | None = None):
        self._ttl = max(0.0, float(ttl_seconds))
        self._clock = clock or time.monotonic
        self._store: dict[str, tuple[float, Any]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> Any | None:
        item = self._store.get(key)
        if not item:
            return None
        ts, data = item
        if (self._clock() - ts) > self._ttl:
            self._store.pop(key, None)
            return None
        return data

    def put(self, key: str, data: Any) -> None:
        self._store[key] = (self._clock(), data)

    def invalidate(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def prune_expired(self) -> int:
        now = self._clock()
        expired = [k for k, (ts, _) in self._store.items() if (now - ts) > self._ttl]
        for k in expired:
            self._store.pop(k, None)
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)
