import asyncio
from collections.abc import Awaitable, Callable
from typing import Any


class InMemoryViewCache:
    """In-process cache of rendered views, keyed by path and variant.

    Revalidating a path drops every variant cached under it, so the next read
    renders from current store state. At most ``max_variants_per_path``
    variants are kept per path; the oldest is evicted first.
    """

    def __init__(self, max_variants_per_path: int = 64) -> None:
        self._entries: dict[str, dict[str, Any]] = {}
        self._generations: dict[str, int] = {}
        self._max_variants_per_path = max_variants_per_path
        self._lock = asyncio.Lock()

    async def get_or_render(
        self, path: str, variant: str, render: Callable[[], Awaitable[Any]]
    ) -> Any:
        async with self._lock:
            variants = self._entries.get(path)
            if variants is not None and variant in variants:
                return variants[variant]
            generation = self._generations.get(path, 0)
        rendered = await render()
        async with self._lock:
            # a revalidation during render makes this result stale
            if self._generations.get(path, 0) == generation:
                variants = self._entries.setdefault(path, {})
                variants[variant] = rendered
                while len(variants) > self._max_variants_per_path:
                    del variants[next(iter(variants))]
        return rendered

    async def revalidate_path(self, path: str) -> None:
        async with self._lock:
            self._entries.pop(path, None)
            self._generations[path] = self._generations.get(path, 0) + 1

    def is_cached(self, path: str, variant: str = "") -> bool:
        return variant in self._entries.get(path, {})
