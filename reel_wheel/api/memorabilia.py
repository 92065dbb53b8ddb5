"""Memorabilia CRUD operations against the Reel Wheel API."""

from __future__ import annotations

from typing import Any, Mapping

from ..models.catalog import (
    ListResponse,
    Memorabilia,
    MemorabiliaCreate,
    MemorabiliaUpdate,
)
from .client import MEMORABILIA, ReelWheelClient, clean_params, list_cache_key
from .common import dump_payload, parse_page

BASE_PATH = f"/v1/{MEMORABILIA}/"


async def get_memorabilia(
    client: ReelWheelClient,
    *,
    limit: int | None = None,
    offset: int | None = None,
    q: str | None = None,
    sort: str | None = None,
    cache_ttl: float | None = None,
    stale_while_revalidate: bool | None = None,
    use_cache: bool = True,
) -> ListResponse[Memorabilia]:
    """Fetch one page of memorabilia; never raises."""
    params = clean_params({"limit": limit, "offset": offset, "q": q, "sort": sort})
    raw = await client.get(
        BASE_PATH,
        params=params,
        cache_key=list_cache_key(MEMORABILIA, params) if use_cache else None,
        ttl=cache_ttl,
        stale_while_revalidate=stale_while_revalidate,
    )
    return parse_page(raw, Memorabilia)


async def get_memorabilia_item(
    client: ReelWheelClient, id_or_slug: str, *, use_cache: bool = True
) -> Memorabilia:
    raw = await client.get(
        f"{BASE_PATH}{id_or_slug}",
        cache_key=f"{MEMORABILIA}:detail:{id_or_slug}" if use_cache else None,
    )
    return Memorabilia.model_validate(raw)


async def create_memorabilia(
    client: ReelWheelClient, data: MemorabiliaCreate | Mapping[str, Any]
) -> Memorabilia:
    raw = await client.post(BASE_PATH, json=dump_payload(data))
    return Memorabilia.model_validate(raw)


async def update_memorabilia(
    client: ReelWheelClient,
    item_id: str,
    data: MemorabiliaUpdate | Mapping[str, Any],
) -> Memorabilia:
    raw = await client.patch(f"{BASE_PATH}{item_id}", json=dump_payload(data, partial=True))
    return Memorabilia.model_validate(raw)


async def delete_memorabilia(client: ReelWheelClient, item_id: str) -> None:
    await client.delete(f"{BASE_PATH}{item_id}")
