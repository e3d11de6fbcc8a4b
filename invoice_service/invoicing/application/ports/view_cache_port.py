from collections.abc import Awaitable, Callable
from typing import Any, Protocol


class ViewCachePort(Protocol):
    async def get_or_render(
        self, path: str, variant: str, render: Callable[[], Awaitable[Any]]
    ) -> Any: ...

    async def revalidate_path(self, path: str) -> None: ...
