"""Re-export all Reel Wheel data models for convenient access."""

from reel_wheel.models.catalog import (
    AvailableFilter,
    AvailableFilterValue,
    FileUpload,
    LinkedItem,
    ListResponse,
    Memorabilia,
    MemorabiliaCreate,
    MemorabiliaUpdate,
    Merchandise,
    MerchandiseCreate,
    MerchandiseUpdate,
    Product,
    ProductCreate,
    ProductUpdate,
    RentalPeriod,
)
from reel_wheel.models.user import TokenPair, User

__all__ = [
    # Catalog models
    "AvailableFilter",
    "AvailableFilterValue",
    "FileUpload",
    "LinkedItem",
    "ListResponse",
    "Memorabilia",
    "MemorabiliaCreate",
    "MemorabiliaUpdate",
    "Merchandise",
    "MerchandiseCreate",
    "MerchandiseUpdate",
    "Product",
    "ProductCreate",
    "ProductUpdate",
    "RentalPeriod",
    # User models
    "TokenPair",
    "User",
]
