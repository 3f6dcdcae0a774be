"""Compose filtered, sorted and paginated product listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
import logging
import math

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session

from catalog_api.db.models.product import Product
from catalog_api.services.errors import ProductNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_SORT_COLUMN = "name"

# Recognised sort columns, keyed by lower-cased request value
SORT_COLUMNS = {
    "name": Product.name,
    "description": Product.description,
    "price": Product.price,
    "stockquantity": Product.stock_quantity,
    "category": Product.category,
    "manufacturer": Product.manufacturer,
    "isactive": Product.is_active,
}


@dataclass
class ProductQuery:
    """Listing request after HTTP parameter parsing."""

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort_column: str = DEFAULT_SORT_COLUMN
    sort_order: str = "asc"
    search: str = ""
    category: str = ""
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_active: bool | None = None
    include_deleted: bool = False

    def __post_init__(self) -> None:
        self.page = max(self.page, 1)
        self.sort_order = "desc" if (self.sort_order or "").lower() == "desc" else "asc"
        self.search = self.search or ""
        self.category = self.category or ""

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class ProductPage:
    total_count: int
    page: int
    page_size: int
    items: list[Product] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        if self.total_count == 0:
            return 0
        return math.ceil(self.total_count / self.page_size)


def apply_visibility(query: Select, include_deleted: bool) -> Select:
    """Hide soft-deleted rows unless the caller opts in."""
    if include_deleted:
        return query
    return query.where(~Product.is_deleted)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def apply_filters(query: Select, params: ProductQuery) -> Select:
    """AND together every filter present on ``params``."""
    if params.search:
        pattern = _like_pattern(params.search)
        query = query.where(
            or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
                Product.category.ilike(pattern, escape="\\"),
                Product.manufacturer.ilike(pattern, escape="\\"),
            )
        )
    if params.category:
        query = query.where(Product.category == params.category)
    if params.min_price is not None:
        query = query.where(Product.price >= params.min_price)
    if params.max_price is not None:
        query = query.where(Product.price <= params.max_price)
    if params.is_active is not None:
        query = query.where(Product.is_active == params.is_active)
    return query


def apply_sorting(query: Select, sort_column: str, sort_order: str) -> Select:
    """Order by a recognised column, falling back to ``name``.

    ``id`` breaks ties so that page boundaries stay stable.
    """
    column = SORT_COLUMNS.get((sort_column or "").lower(), SORT_COLUMNS[DEFAULT_SORT_COLUMN])
    ordered = column.desc() if sort_order == "desc" else column.asc()
    tiebreak = Product.id.desc() if sort_order == "desc" else Product.id.asc()
    return query.order_by(ordered, tiebreak)


def list_products(db: Session, params: ProductQuery) -> ProductPage:
    """Return one page of products plus the pre-pagination match count."""
    filtered = apply_filters(
        apply_visibility(select(Product), params.include_deleted), params
    )

    count_query = select(func.count()).select_from(filtered.subquery())
    total = db.scalar(count_query) or 0

    page_query = (
        apply_sorting(filtered, params.sort_column, params.sort_order)
        .offset(params.offset)
        .limit(params.page_size)
    )
    items = list(db.scalars(page_query).all())

    logger.debug(
        f"Listed {len(items)}/{total} products (page={params.page}, "
        f"page_size={params.page_size}, sort={params.sort_column} {params.sort_order})"
    )
    return ProductPage(
        total_count=total, page=params.page, page_size=params.page_size, items=items
    )


def get_product(db: Session, product_id: int, include_deleted: bool = False) -> Product:
    """Fetch a single product honouring the visibility rule."""
    query = apply_visibility(select(Product), include_deleted).where(
        Product.id == product_id
    )
    product = db.scalar(query)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product
