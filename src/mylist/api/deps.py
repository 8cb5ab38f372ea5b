"""Shared FastAPI dependencies for the list routers.

Provides:
- Caller identity from the ``user-id`` header
- The running list engines
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from mylist.core.errors import ValidationError
from mylist.lists.cache_engine import ListCacheEngine
from mylist.lists.mutation_engine import ListMutationEngine
from mylist.lists.runtime import ListRuntime, get_runtime
from mylist.observability.logging import user_id_var
from mylist.persistence.tables import OWNER_ID_MAX_LENGTH


async def require_owner(
    user_id: Annotated[str | None, Header(alias="user-id")] = None,
) -> str:
    """Return the caller's owner id.

    Raises:
        ValidationError: If the header is missing, blank or longer than the
            owner id column
    """
    if user_id is None or not user_id.strip():
        raise ValidationError("user-id header is required")
    if len(user_id) > OWNER_ID_MAX_LENGTH:
        raise ValidationError(
            f"user-id header must be at most {OWNER_ID_MAX_LENGTH} characters"
        )
    user_id_var.set(user_id)
    return user_id


async def list_runtime() -> ListRuntime:
    return await get_runtime()


def cache_engine(
    runtime: Annotated[ListRuntime, Depends(list_runtime)],
) -> ListCacheEngine:
    return runtime.cache_engine


def mutation_engine(
    runtime: Annotated[ListRuntime, Depends(list_runtime)],
) -> ListMutationEngine:
    return runtime.mutation_engine


OwnerId = Annotated[str, Depends(require_owner)]
CacheEngineDep = Annotated[ListCacheEngine, Depends(cache_engine)]
MutationEngineDep = Annotated[ListMutationEngine, Depends(mutation_engine)]
