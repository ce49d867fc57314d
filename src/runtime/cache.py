import asyncio
import logging
from collections.abc import Callable

from hierarchy import HierarchyGraph

logger = logging.getLogger(__name__)


class HierarchyCache:
    """Memoizes built hierarchies by key; concurrent requests for one key build it once."""

    def __init__(self) -> None:
        self._graphs: dict[str, HierarchyGraph] = {}
        self._lock = asyncio.Lock()

    def get(self, key: str) -> HierarchyGraph | None:
        return self._graphs.get(key)

    async def get_or_build(self, key: str, factory: Callable[[], HierarchyGraph]) -> HierarchyGraph:
        graph = self._graphs.get(key)
        if graph is not None:
            return graph

        async with self._lock:
            graph = self._graphs.get(key)
            if graph is None:
                logger.info("Building profile hierarchy for %s", key)
                graph = await asyncio.to_thread(factory)
                self._graphs[key] = graph
        return graph

    async def clear(self) -> None:
        async with self._lock:
            self._graphs.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._graphs

    def __len__(self) -> int:
        return len(self._graphs)
