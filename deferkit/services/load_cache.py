"""Key-based cache for values that take a while to load.

The owner supplies one loader function; the cache guarantees the loader is
called at most once concurrently per key, no matter how many callers ask
for that key while it is loading. Values are handed out via callbacks since
a load may complete later (or synchronously, if the loader resolves inline).

Usage:
    def load_texture(key, resolve):
        http.get(f"/textures/{key}", on_done=resolve)

    textures = LoadCache(load_texture)
    textures.get("grass", sprite.set_texture)
    textures.get("grass", minimap.set_texture)  # same in-flight load

Notes:
- Single-threaded: no locking; hosts serialize access per instance.
- Distinct keys load concurrently and unboundedly.
- A loader that never resolves leaves its key pending forever.
- A loader that raises synchronously drops its key from pending; the
  error reaches the ``get()`` caller that started the load.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Resolve = Callable[[V], None]
LoaderFunction = Callable[[K, Resolve[V]], None]
ValueCallback = Callable[[V], None]


class LoadCache(Generic[K, V]):
    """Coalescing key -> value cache fed by an asynchronous loader.

    Args:
        loader: ``loader(key, resolve)``; must call ``resolve(value)`` exactly
            once per invocation. Not enforced.
    """

    def __init__(self, loader: LoaderFunction[K, V]) -> None:
        self._loader = loader
        self._storage: dict[K, V] = {}
        self._pending: dict[K, list[ValueCallback[V]]] = {}
        self._hits = 0
        self._misses = 0
        self._loads = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"LoadCache(entries={len(self._storage)}, pending_keys={len(self._pending)}, "
            f"hits={self._hits}, misses={self._misses}, loads={self._loads})"
        )

    def __contains__(self, key: object) -> bool:
        return key in self._storage

    def __len__(self) -> int:
        return len(self._storage)

    @property
    def is_pending(self) -> bool:
        """True while at least one key is being loaded."""
        return bool(self._pending)

    def get(self, key: K, callback: ValueCallback[V]) -> None:
        """Hand the value for ``key`` to ``callback``.

        Stored values are delivered synchronously. Otherwise the callback
        waits for the (single) in-flight load of that key, starting one if
        none is running.

        Args:
            key: Cache key.
            callback: Receives the value.
        """
        if key in self._storage:
            self._hits += 1
            callback(self._storage[key])
            return

        self._misses += 1
        waiters = self._pending.get(key)
        if waiters is not None:
            waiters.append(callback)
            logger.debug("cache.coalesced", extra={"cache_key": repr(key), "waiters": len(waiters)})
            return

        self._pending[key] = [callback]
        self._load(key)

    def fetch(self, key: K) -> "asyncio.Future[V]":
        """Awaitable view of :meth:`get` for coroutine callers.

        Must be called with a running event loop. Coalesces exactly like
        :meth:`get`.
        """
        future: asyncio.Future[V] = asyncio.get_running_loop().create_future()

        def _deliver(value: V) -> None:
            if not future.done():
                future.set_result(value)

        self.get(key, _deliver)
        return future

    def for_each(self, callback: Callable[[K, V], None]) -> None:
        """Call ``callback(key, value)`` for every resolved entry; order unspecified."""
        for key, value in list(self._storage.items()):
            callback(key, value)

    def clear(self) -> None:
        """Drop resolved values. In-flight loads keep running and still store."""
        self._storage.clear()
        logger.debug("cache.cleared", extra={"pending_keys": len(self._pending)})

    def stats(self) -> dict[str, int]:
        """Return lightweight cache metrics without exposing values."""
        return {
            "entries": len(self._storage),
            "pending_keys": len(self._pending),
            "hits": self._hits,
            "misses": self._misses,
            "loads": self._loads,
        }

    def _load(self, key: K) -> None:
        self._loads += 1
        logger.debug("cache.load_started", extra={"cache_key": repr(key)})

        def _resolve(value: V) -> None:
            self._on_resolved(key, value)

        try:
            self._loader(key, _resolve)
        except Exception:
            # No load is in flight any more; let the next get() retry.
            self._pending.pop(key, None)
            logger.warning("cache.load_failed", extra={"cache_key": repr(key)})
            raise

    def _on_resolved(self, key: K, value: V) -> None:
        self._storage[key] = value
        # Detach before delivering so a raising waiter can't strand the key.
        waiters = self._pending.pop(key, None)
        if waiters is None:
            return
        logger.debug("cache.resolved", extra={"cache_key": repr(key), "waiters": len(waiters)})
        for callback in waiters:
            callback(value)
