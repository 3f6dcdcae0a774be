"""Pydantic models describing Product payloads.

Field names are snake_case in Python and camelCase on the wire, which is what
the dashboard sends and expects back.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ProductBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    price: Decimal = Field(..., ge=Decimal("0.01"), le=Decimal("1000000"))
    stock_quantity: int = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=50)
    manufacturer: str | None = Field(None, max_length=100)

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


class ProductCreate(ProductBase):
    """Schema for UI-created product rows.

    The flags are accepted so a full form payload validates, but creation
    always stores an active, non-deleted product.
    """

    is_active: bool | None = None
    is_deleted: bool | None = None


class ProductUpdate(ProductBase):
    """Full-replace payload for PUT; ``id`` must match the path."""

    id: int
    is_active: bool | None = None
    is_deleted: bool | None = None


class ProductRead(ProductBase):
    id: int
    is_active: bool
    is_deleted: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(CamelModel):
    total_count: int
    page: int
    page_size: int
    total_pages: int
    data: list[ProductRead]


class ProductSummary(CamelModel):
    total_products: int = 0
    active_products: int = 0
    inactive_products: int = 0
    deleted_products: int = 0
    total_value: Decimal = Decimal("0.00")
    total_stock: int = 0
    total_categories: int = 0

    @field_serializer("total_value")
    def serialize_total_value(self, value: Decimal) -> float:
        return float(value)


class CategoryStats(CamelModel):
    category: str
    count: int
    active_count: int
    inactive_count: int
    total_value: Decimal
    total_stock: int
    avg_price: Decimal

    @field_serializer("total_value", "avg_price")
    def serialize_money(self, value: Decimal) -> float:
        return float(value)
