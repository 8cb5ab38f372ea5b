"""List engines: tiered read path, mutations and runtime wiring."""

from mylist.lists.cache_engine import ListCacheEngine
from mylist.lists.mutation_engine import ListMutationEngine
from mylist.lists.runtime import (
    ListRuntime,
    build_runtime,
    get_runtime,
    start_runtime,
    stop_runtime,
)
from mylist.lists.store import StoreGateway

__all__ = [
    "ListCacheEngine",
    "ListMutationEngine",
    "ListRuntime",
    "StoreGateway",
    "build_runtime",
    "get_runtime",
    "start_runtime",
    "stop_runtime",
]
