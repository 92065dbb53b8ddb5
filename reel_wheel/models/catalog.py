"""Pydantic v2 models for catalog entities: products, memorabilia, merchandise.

Response models tolerate unknown fields so that additions on the server
side do not break older clients.  Create/update models mirror the write
payloads accepted by the API.
"""

from __future__ import annotations

from typing import Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

RentalPeriod = Literal["hourly", "daily", "weekly", "monthly", "yearly"]

# Prices come back as strings but may be sent as numbers.
Price = Union[float, int, str]

T = TypeVar("T")


class LinkedItem(BaseModel):
    """Short reference to a related catalog entry."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    subtitle: str | None = None


class Product(BaseModel):
    """A rentable movie prop or vehicle."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    subtitle: str | None = None
    description: str | None = None
    product_types: list[str] = Field(default_factory=list)
    movies: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    available_rental_periods: list[RentalPeriod] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    background_image_url: str | None = None
    is_background_image_activated: bool = False
    is_trending_model: bool = False
    sale_price: str | None = None
    retail_price: str | None = None
    rental_price_hourly: str | None = None
    rental_price_daily: str | None = None
    rental_price_weekly: str | None = None
    rental_price_monthly: str | None = None
    rental_price_yearly: str | None = None
    slug: str
    video_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    products: list[LinkedItem] | None = None


class ProductCreate(BaseModel):
    title: str
    subtitle: str | None = None
    description: str | None = None
    product_types: list[str] | None = None
    movies: list[str] | None = None
    genres: list[str] | None = None
    keywords: list[str] | None = None
    available_rental_periods: list[RentalPeriod] | None = None
    images: list[str] | None = None
    background_image_url: str | None = None
    is_background_image_activated: bool | None = None
    is_trending_model: bool | None = None
    sale_price: Price | None = None
    retail_price: Price | None = None
    rental_price_hourly: Price | None = None
    rental_price_daily: Price | None = None
    rental_price_weekly: Price | None = None
    rental_price_monthly: Price | None = None
    rental_price_yearly: Price | None = None
    slug: str | None = None
    video_url: str | None = None
    memorabilia_ids: list[str] | None = None
    merchandise_ids: list[str] | None = None
    product_ids: list[str] | None = None


class ProductUpdate(ProductCreate):
    """Partial product update; every field is optional."""

    title: str | None = None


class Memorabilia(BaseModel):
    """A piece of screen-used memorabilia."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    subtitle: str | None = None
    description: str | None = None
    photos: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    slug: str
    created_at: str | None = None
    updated_at: str | None = None
    products: list[LinkedItem] | None = None


class MemorabiliaCreate(BaseModel):
    title: str
    subtitle: str | None = None
    description: str | None = None
    photos: list[str] | None = None
    keywords: list[str] | None = None
    slug: str | None = None
    product_ids: list[str] | None = None


class MemorabiliaUpdate(MemorabiliaCreate):
    title: str | None = None


class Merchandise(BaseModel):
    """A merchandise item sold alongside the rental catalog."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    subtitle: str | None = None
    description: str | None = None
    price: str
    photos: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    slug: str
    created_at: str | None = None
    updated_at: str | None = None
    products: list[LinkedItem] | None = None


class MerchandiseCreate(BaseModel):
    title: str
    subtitle: str | None = None
    description: str | None = None
    price: Price
    photos: list[str] | None = None
    keywords: list[str] | None = None
    slug: str | None = None
    product_ids: list[str] | None = None


class MerchandiseUpdate(MerchandiseCreate):
    title: str | None = None
    price: Price | None = None


class FileUpload(BaseModel):
    """An uploaded asset as returned by ``POST /v1/uploads/``."""

    model_config = ConfigDict(extra="allow")

    id: str
    url: str


class AvailableFilterValue(BaseModel):
    label: str
    value: str
    count: int


class AvailableFilter(BaseModel):
    label: str
    name: str
    values: list[AvailableFilterValue] = Field(default_factory=list)


class ListResponse(BaseModel, Generic[T]):
    """Paginated list envelope shared by every collection endpoint.

    ``error`` is only set when the request failed and the client
    substituted an empty page.
    """

    model_config = ConfigDict(extra="allow")

    rows: list[T] = Field(default_factory=list)
    total: int = 0
    offset: int = 0
    limit: int | None = None
    search: str | None = None
    sort: str | None = None
    available_filters: list[AvailableFilter] | None = None
    error: str | None = None

    @property
    def degraded(self) -> bool:
        """Return ``True`` when this page is a substituted empty result."""
        return self.error is not None
