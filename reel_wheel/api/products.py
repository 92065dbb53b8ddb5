"""Product CRUD operations against the Reel Wheel API.

All functions accept a :class:`~reel_wheel.api.client.ReelWheelClient`
as their first argument and return parsed Pydantic models.  Listings go
through the response cache and never raise; writes invalidate every
cached product read.
"""

from __future__ import annotations

from typing import Any, Mapping

from loguru import logger

from ..models.catalog import ListResponse, Product, ProductCreate, ProductUpdate
from .client import PRODUCTS, ReelWheelClient, clean_params, list_cache_key
from .common import dump_payload, parse_page

BASE_PATH = f"/v1/{PRODUCTS}/"


async def get_products(
    client: ReelWheelClient,
    *,
    limit: int | None = None,
    offset: int | None = None,
    q: str | None = None,
    sort: str | None = None,
    product_types: list[str] | None = None,
    movies: list[str] | None = None,
    genres: list[str] | None = None,
    is_trending_model: bool | None = None,
    cache_ttl: float | None = None,
    stale_while_revalidate: bool | None = None,
    use_cache: bool = True,
) -> ListResponse[Product]:
    """Fetch one page of products.

    On failure the returned page is empty and carries the reason in
    ``error``.
    """
    params = clean_params(
        {
            "limit": limit,
            "offset": offset,
            "q": q,
            "sort": sort,
            "product_types": product_types,
            "movies": movies,
            "genres": genres,
            "is_trending_model": is_trending_model,
        }
    )
    raw = await client.get(
        BASE_PATH,
        params=params,
        cache_key=list_cache_key(PRODUCTS, params) if use_cache else None,
        ttl=cache_ttl,
        stale_while_revalidate=stale_while_revalidate,
    )
    return parse_page(raw, Product)


async def search_products(
    client: ReelWheelClient,
    q: str,
    *,
    limit: int | None = None,
    product_types: list[str] | None = None,
) -> ListResponse[Product]:
    """Search products through the dedicated search endpoint.

    Falls back to the plain listing with the same filters when the search
    endpoint fails.
    """
    params = clean_params(
        {"q": q.strip() or None, "limit": limit or None, "product_types": product_types}
    )
    page = parse_page(await client.get(f"{BASE_PATH}search", params=params), Product)
    if page.degraded:
        logger.warning(f"Search endpoint failed, falling back to products endpoint: {page.error}")
        page = parse_page(await client.get(BASE_PATH, params=params), Product)
    return page


async def get_product(
    client: ReelWheelClient, id_or_slug: str, *, use_cache: bool = True
) -> Product:
    """Fetch a single product by ID or slug.

    Raises :class:`~reel_wheel.api.errors.ApiError` on failure.
    """
    raw = await client.get(
        f"{BASE_PATH}{id_or_slug}",
        cache_key=f"{PRODUCTS}:detail:{id_or_slug}" if use_cache else None,
    )
    return Product.model_validate(raw)


async def create_product(
    client: ReelWheelClient, data: ProductCreate | Mapping[str, Any]
) -> Product:
    """Create a product and return it as stored by the server."""
    raw = await client.post(BASE_PATH, json=dump_payload(data))
    return Product.model_validate(raw)


async def update_product(
    client: ReelWheelClient, product_id: str, data: ProductUpdate | Mapping[str, Any]
) -> Product:
    """Apply a partial update to a product."""
    raw = await client.patch(f"{BASE_PATH}{product_id}", json=dump_payload(data, partial=True))
    return Product.model_validate(raw)


async def delete_product(client: ReelWheelClient, product_id: str) -> None:
    """Delete a product."""
    await client.delete(f"{BASE_PATH}{product_id}")
