"""Merchandise CRUD operations against the Reel Wheel API.

The API names the collection ``merchandises``; that segment is also the
cache family used for invalidation.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..models.catalog import (
    ListResponse,
    Merchandise,
    MerchandiseCreate,
    MerchandiseUpdate,
)
from .client import MERCHANDISE, ReelWheelClient, clean_params, list_cache_key
from .common import dump_payload, parse_page

BASE_PATH = f"/v1/{MERCHANDISE}/"


async def get_merchandise(
    client: ReelWheelClient,
    *,
    limit: int | None = None,
    offset: int | None = None,
    q: str | None = None,
    sort: str | None = None,
    cache_ttl: float | None = None,
    stale_while_revalidate: bool | None = None,
    use_cache: bool = True,
) -> ListResponse[Merchandise]:
    """Fetch one page of merchandise; never raises."""
    params = clean_params({"limit": limit, "offset": offset, "q": q, "sort": sort})
    raw = await client.get(
        BASE_PATH,
        params=params,
        cache_key=list_cache_key(MERCHANDISE, params) if use_cache else None,
        ttl=cache_ttl,
        stale_while_revalidate=stale_while_revalidate,
    )
    return parse_page(raw, Merchandise)


async def get_merchandise_item(
    client: ReelWheelClient, id_or_slug: str, *, use_cache: bool = True
) -> Merchandise:
    raw = await client.get(
        f"{BASE_PATH}{id_or_slug}",
        cache_key=f"{MERCHANDISE}:detail:{id_or_slug}" if use_cache else None,
    )
    return Merchandise.model_validate(raw)


async def create_merchandise(
    client: ReelWheelClient, data: MerchandiseCreate | Mapping[str, Any]
) -> Merchandise:
    raw = await client.post(BASE_PATH, json=dump_payload(data))
    return Merchandise.model_validate(raw)


async def update_merchandise(
    client: ReelWheelClient,
    item_id: str,
    data: MerchandiseUpdate | Mapping[str, Any],
) -> Merchandise:
    raw = await client.patch(f"{BASE_PATH}{item_id}", json=dump_payload(data, partial=True))
    return Merchandise.model_validate(raw)


async def delete_merchandise(client: ReelWheelClient, item_id: str) -> None:
    await client.delete(f"{BASE_PATH}{item_id}")
