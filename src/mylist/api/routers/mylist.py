"""Saved-items list router.

Endpoints (all require the ``user-id`` header):
- POST   /api/mylist/add                  - Add a movie or show to the list
- DELETE /api/mylist/remove/{contentId}   - Remove an item from the list
- GET    /api/mylist/items                - Paginated, enriched list page
- GET    /api/mylist/stats                - Counts by content type
"""

from __future__ import annotations

import re
from typing import Annotated, Any

from fastapi import APIRouter, Path, Query
from pydantic import BaseModel, Field

from mylist.api.deps import CacheEngineDep, MutationEngineDep, OwnerId
from mylist.config import settings
from mylist.core.errors import ValidationError
from mylist.core.model import ContentKind

router = APIRouter(prefix="/api/mylist", tags=["mylist"])

_KIND_VALUES = {kind.value for kind in ContentKind}
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class AddItemRequest(BaseModel):
    """Body of POST /add. Presence and values are checked by the handler."""

    model_config = {"populate_by_name": True}

    content_id: str | None = Field(default=None, alias="contentId")
    content_type: str | None = Field(default=None, alias="contentType")


def _parse_add_request(body: AddItemRequest) -> tuple[str, ContentKind]:
    if not body.content_id or not body.content_type:
        raise ValidationError("contentId and contentType are required")
    if body.content_type not in _KIND_VALUES:
        raise ValidationError('contentType must be "movie" or "tvshow"')
    return body.content_id, ContentKind(body.content_type)


def _query_int(raw: str | None, default: int) -> int:
    """Leading integer of a query value, or ``default`` when absent or zero."""
    match = _LEADING_INT.match(raw or "")
    if match is None:
        return default
    try:
        value = int(match.group(1))
    except ValueError:
        # Longer than the int parser accepts
        return default
    return value or default


@router.post("/add", status_code=201)
async def add_item(
    body: AddItemRequest,
    owner_id: OwnerId,
    engine: MutationEngineDep,
) -> dict[str, Any]:
    """Add a content item to the caller's list."""
    content_id, kind = _parse_add_request(body)
    membership = await engine.add_item(owner_id, content_id, kind)
    return {
        "success": True,
        "message": "Item added to your list",
        "data": membership.model_dump(mode="json", by_alias=True),
    }


@router.delete("/remove/{content_id}")
async def remove_item(
    content_id: Annotated[str, Path(description="Identifier of the content to remove")],
    owner_id: OwnerId,
    engine: MutationEngineDep,
) -> dict[str, Any]:
    """Remove a content item from the caller's list."""
    await engine.remove_item(owner_id, content_id)
    return {"success": True, "message": "Item removed from your list"}


@router.get("/items")
async def get_items(
    owner_id: OwnerId,
    engine: CacheEngineDep,
    page: Annotated[str | None, Query()] = None,
    page_size: Annotated[str | None, Query(alias="pageSize")] = None,
) -> dict[str, Any]:
    """One page of the caller's list, most recently added first.

    ``page`` and ``pageSize`` that are missing, zero or not numbers fall back
    to their defaults. Out-of-range values are clamped, not rejected.
    """
    result = await engine.get_page(
        owner_id,
        _query_int(page, 1),
        _query_int(page_size, settings.default_page_size),
    )
    return {"success": True, "data": result.model_dump(mode="json", by_alias=True)}


@router.get("/stats")
async def get_stats(owner_id: OwnerId, engine: CacheEngineDep) -> dict[str, Any]:
    """Total items and counts per content type in the caller's list."""
    stats = await engine.get_stats(owner_id)
    return {"success": True, "data": stats.model_dump(mode="json", by_alias=True)}
