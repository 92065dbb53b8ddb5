"""Tests for the per-resource helpers (products, memorabilia, merchandise, uploads)."""
import json

import httpx
import pytest

from conftest import list_response
from reel_wheel.api import memorabilia, merchandise, products, uploads
from reel_wheel.api.errors import HttpStatusError
from reel_wheel.models import (
    FileUpload,
    Memorabilia,
    MemorabiliaCreate,
    Merchandise,
    MerchandiseUpdate,
    Product,
    ProductCreate,
    ProductUpdate,
    TokenPair,
)

TOKENS = TokenPair(access_token="access-1", refresh_token="refresh-1")

PRODUCT = {"id": "p1", "title": "Batmobile", "slug": "batmobile", "genres": ["action"]}
MEMORABILIA_ITEM = {"id": "m1", "title": "Cowl", "slug": "cowl"}
MERCH_ITEM = {"id": "x1", "title": "Cap", "slug": "cap", "price": "19.99"}


class TestProducts:
    @pytest.mark.asyncio
    async def test_get_products_query_params(self, api, make_client):
        api.add("GET", "/v1/products/", list_response([PRODUCT], total=40))
        async with make_client(TOKENS) as client:
            page = await products.get_products(
                client,
                limit=20,
                offset=20,
                genres=["action", "sci-fi"],
                is_trending_model=True,
            )

        assert page.total == 40
        assert isinstance(page.rows[0], Product)
        request = api.calls("GET", "/v1/products/")[0]
        assert request.url.params["limit"] == "20"
        assert request.url.params["offset"] == "20"
        assert request.url.params.get_list("genres") == ["action", "sci-fi"]
        assert request.url.params["is_trending_model"] == "true"
        assert "q" not in request.url.params

    @pytest.mark.asyncio
    async def test_get_products_cached_per_query(self, api, make_client):
        api.add("GET", "/v1/products/", list_response([PRODUCT]))
        async with make_client(TOKENS) as client:
            await products.get_products(client, limit=10)
            await products.get_products(client, limit=10)
            await products.get_products(client, limit=5)

        assert len(api.calls("GET", "/v1/products/")) == 2

    @pytest.mark.asyncio
    async def test_get_products_bypass_cache(self, api, make_client):
        api.add("GET", "/v1/products/", list_response([PRODUCT]))
        async with make_client(TOKENS) as client:
            await products.get_products(client, use_cache=False)
            await products.get_products(client, use_cache=False)

        assert len(api.calls("GET", "/v1/products/")) == 2

    @pytest.mark.asyncio
    async def test_get_products_failure_is_empty_page(self, api, make_client):
        api.add("GET", "/v1/products/", httpx.Response(500, json={"detail": "boom"}))
        async with make_client(TOKENS) as client:
            page = await products.get_products(client)

        assert page.rows == []
        assert page.total == 0
        assert page.degraded
        assert "boom" in page.error

    @pytest.mark.asyncio
    async def test_get_products_malformed_envelope_is_degraded(self, api, make_client):
        api.add("GET", "/v1/products/", httpx.Response(200, json={"rows": [], "total": None, "offset": 0}))
        async with make_client(TOKENS) as client:
            page = await products.get_products(client)

        assert page.rows == []
        assert page.degraded

    @pytest.mark.asyncio
    async def test_search_uses_search_endpoint(self, api, make_client):
        api.add("GET", "/v1/products/search", list_response([PRODUCT]))
        async with make_client(TOKENS) as client:
            page = await products.search_products(client, "  bat  ", limit=5)

        assert [p.id for p in page.rows] == ["p1"]
        request = api.calls("GET", "/v1/products/search")[0]
        assert request.url.params["q"] == "bat"
        assert not api.calls("GET", "/v1/products/")

    @pytest.mark.asyncio
    async def test_search_falls_back_to_listing(self, api, make_client):
        api.add("GET", "/v1/products/search", httpx.Response(500))
        api.add("GET", "/v1/products/", list_response([PRODUCT]))
        async with make_client(TOKENS) as client:
            page = await products.search_products(client, "bat")

        assert not page.degraded
        assert [p.id for p in page.rows] == ["p1"]
        assert api.calls("GET", "/v1/products/")[0].url.params["q"] == "bat"

    @pytest.mark.asyncio
    async def test_get_product_by_slug(self, api, make_client):
        api.add("GET", "/v1/products/batmobile", httpx.Response(200, json=PRODUCT))
        async with make_client(TOKENS) as client:
            product = await products.get_product(client, "batmobile")
            again = await products.get_product(client, "batmobile")

        assert product.id == again.id == "p1"
        assert len(api.calls("GET", "/v1/products/batmobile")) == 1

    @pytest.mark.asyncio
    async def test_get_product_not_found_raises(self, api, make_client):
        async with make_client(TOKENS) as client:
            with pytest.raises(HttpStatusError) as excinfo:
                await products.get_product(client, "missing")
        assert excinfo.value.status_code == 404

    @pytest.mark.asyncio
    async def test_create_product_posts_json(self, api, make_client):
        api.add("POST", "/v1/products/", httpx.Response(201, json=PRODUCT))
        async with make_client(TOKENS) as client:
            product = await products.create_product(
                client, ProductCreate(title="Batmobile", genres=["action"])
            )

        assert product.slug == "batmobile"
        body = json.loads(api.calls("POST", "/v1/products/")[0].content)
        assert body == {"title": "Batmobile", "genres": ["action"]}

    @pytest.mark.asyncio
    async def test_update_product_is_partial_patch(self, api, make_client):
        api.add("PATCH", "/v1/products/p1", httpx.Response(200, json={**PRODUCT, "is_trending_model": True}))
        async with make_client(TOKENS) as client:
            product = await products.update_product(
                client, "p1", ProductUpdate(is_trending_model=True)
            )

        assert product.is_trending_model is True
        body = json.loads(api.calls("PATCH", "/v1/products/p1")[0].content)
        assert body == {"is_trending_model": True}

    @pytest.mark.asyncio
    async def test_write_invalidates_product_reads(self, api, make_client):
        api.add("GET", "/v1/products/", list_response([PRODUCT]))
        api.add("GET", "/v1/products/p1", httpx.Response(200, json=PRODUCT))
        api.add("DELETE", "/v1/products/p1", httpx.Response(204))
        async with make_client(TOKENS) as client:
            await products.get_products(client)
            await products.get_product(client, "p1")
            assert await products.delete_product(client, "p1") is None
            await products.get_products(client)
            await products.get_product(client, "p1")

        assert len(api.calls("GET", "/v1/products/")) == 2
        assert len(api.calls("GET", "/v1/products/p1")) == 2


class TestMemorabilia:
    @pytest.mark.asyncio
    async def test_listing_and_detail(self, api, make_client):
        api.add("GET", "/v1/memorabilia/", list_response([MEMORABILIA_ITEM]))
        api.add("GET", "/v1/memorabilia/cowl", httpx.Response(200, json=MEMORABILIA_ITEM))
        async with make_client(TOKENS) as client:
            page = await memorabilia.get_memorabilia(client, q="cowl")
            item = await memorabilia.get_memorabilia_item(client, "cowl")

        assert isinstance(page.rows[0], Memorabilia)
        assert item.title == "Cowl"
        assert api.calls("GET", "/v1/memorabilia/")[0].url.params["q"] == "cowl"

    @pytest.mark.asyncio
    async def test_create_and_delete(self, api, make_client):
        api.add("POST", "/v1/memorabilia/", httpx.Response(201, json=MEMORABILIA_ITEM))
        api.add("DELETE", "/v1/memorabilia/m1", httpx.Response(204))
        async with make_client(TOKENS) as client:
            item = await memorabilia.create_memorabilia(
                client, MemorabiliaCreate(title="Cowl", product_ids=["p1"])
            )
            await memorabilia.delete_memorabilia(client, item.id)

        body = json.loads(api.calls("POST", "/v1/memorabilia/")[0].content)
        assert body == {"title": "Cowl", "product_ids": ["p1"]}
        assert len(api.calls("DELETE", "/v1/memorabilia/m1")) == 1

    @pytest.mark.asyncio
    async def test_memorabilia_write_keeps_product_cache(self, api, make_client):
        api.add("GET", "/v1/products/", list_response([PRODUCT]))
        api.add("DELETE", "/v1/memorabilia/m1", httpx.Response(204))
        async with make_client(TOKENS) as client:
            await products.get_products(client)
            await memorabilia.delete_memorabilia(client, "m1")
            await products.get_products(client)

        assert len(api.calls("GET", "/v1/products/")) == 1


class TestMerchandise:
    @pytest.mark.asyncio
    async def test_listing_uses_plural_path(self, api, make_client):
        api.add("GET", "/v1/merchandises/", list_response([MERCH_ITEM]))
        async with make_client(TOKENS) as client:
            page = await merchandise.get_merchandise(client, limit=1)

        assert isinstance(page.rows[0], Merchandise)
        assert page.rows[0].price == "19.99"

    @pytest.mark.asyncio
    async def test_update_sends_price(self, api, make_client):
        api.add("PATCH", "/v1/merchandises/x1", httpx.Response(200, json={**MERCH_ITEM, "price": "24.99"}))
        async with make_client(TOKENS) as client:
            item = await merchandise.update_merchandise(
                client, "x1", MerchandiseUpdate(price="24.99")
            )

        assert item.price == "24.99"
        body = json.loads(api.calls("PATCH", "/v1/merchandises/x1")[0].content)
        assert body == {"price": "24.99"}

    @pytest.mark.asyncio
    async def test_get_item_error_propagates(self, api, make_client):
        api.add("GET", "/v1/merchandises/x1", httpx.Response(500, json={"detail": "db down"}))
        async with make_client(TOKENS) as client:
            with pytest.raises(HttpStatusError, match="db down"):
                await merchandise.get_merchandise_item(client, "x1")


class TestUploads:
    @pytest.mark.asyncio
    async def test_upload_path_is_multipart(self, api, make_client, tmp_path):
        image = tmp_path / "poster.png"
        image.write_bytes(b"\x89PNG fake")
        api.add(
            "POST",
            "/v1/uploads/",
            httpx.Response(201, json={"id": "u1", "url": "https://cdn.test/poster.png"}),
        )
        async with make_client(TOKENS) as client:
            result = await uploads.upload_file(client, image)

        assert isinstance(result, FileUpload)
        assert result.url == "https://cdn.test/poster.png"
        request = api.calls("POST", "/v1/uploads/")[0]
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert request.headers["authorization"] == "Bearer access-1"
        assert b'name="file"; filename="poster.png"' in request.content
        assert b"image/png" in request.content

    @pytest.mark.asyncio
    async def test_upload_bytes_requires_filename(self, make_client):
        async with make_client(TOKENS) as client:
            with pytest.raises(ValueError):
                await uploads.upload_file(client, b"data")

    @pytest.mark.asyncio
    async def test_upload_bytes(self, api, make_client):
        api.add("POST", "/v1/uploads/", httpx.Response(201, json={"id": "u2", "url": "https://cdn.test/a.bin"}))
        async with make_client(TOKENS) as client:
            result = await uploads.upload_file(client, b"data", filename="a.bin")

        assert result.id == "u2"
        assert b"application/octet-stream" in api.calls("POST", "/v1/uploads/")[0].content

    @pytest.mark.asyncio
    async def test_upload_failure_raises(self, api, make_client):
        api.add("POST", "/v1/uploads/", httpx.Response(413, json={"detail": "File too large"}))
        async with make_client(TOKENS) as client:
            with pytest.raises(HttpStatusError, match="File too large"):
                await uploads.upload_file(client, b"data", filename="a.bin")

    @pytest.mark.asyncio
    async def test_delete_file_passes_url(self, api, make_client):
        api.add("DELETE", "/v1/uploads/", httpx.Response(204))
        async with make_client(TOKENS) as client:
            await uploads.delete_file(client, "https://cdn.test/poster.png")

        request = api.calls("DELETE", "/v1/uploads/")[0]
        assert request.url.params["url"] == "https://cdn.test/poster.png"
