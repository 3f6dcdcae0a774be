"""Aggregate reporting over the product catalog."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
import logging

from sqlalchemy import case, distinct, func, select
from sqlalchemy.orm import Session

from catalog_api.api.schemas.product import CategoryStats, ProductSummary
from catalog_api.db.models.product import Product
from catalog_api.services.product_query import apply_visibility

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    # SQLite hands back floats for numeric aggregates; go through str to keep cents exact
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def summarize_products(db: Session, include_deleted: bool = False) -> ProductSummary:
    """Totals over the visible products; all zeros when nothing is visible."""
    inventory_value = func.coalesce(func.sum(Product.price * Product.stock_quantity), 0)
    query = apply_visibility(
        select(
            func.count(Product.id),
            _count_where(Product.is_active),
            _count_where(~Product.is_active),
            _count_where(Product.is_deleted),
            inventory_value,
            func.coalesce(func.sum(Product.stock_quantity), 0),
            func.count(distinct(Product.category)),
        ),
        include_deleted,
    )
    row = db.execute(query).one()

    return ProductSummary(
        total_products=row[0] or 0,
        active_products=row[1] or 0,
        inactive_products=row[2] or 0,
        deleted_products=row[3] or 0,
        total_value=_money(row[4]),
        total_stock=row[5] or 0,
        total_categories=row[6] or 0,
    )


def stats_by_category(db: Session, include_deleted: bool = False) -> list[CategoryStats]:
    """Per-category counts and totals, highest inventory value first."""
    inventory_value = func.coalesce(
        func.sum(Product.price * Product.stock_quantity), 0
    ).label("total_value")
    query = apply_visibility(
        select(
            Product.category,
            func.count(Product.id),
            _count_where(Product.is_active),
            _count_where(~Product.is_active),
            inventory_value,
            func.coalesce(func.sum(Product.stock_quantity), 0),
            func.avg(Product.price),
        ),
        include_deleted,
    )
    query = query.group_by(Product.category).order_by(
        inventory_value.desc(), Product.category.asc()
    )

    return [
        CategoryStats(
            category=category,
            count=count,
            active_count=active,
            inactive_count=inactive,
            total_value=_money(total_value),
            total_stock=total_stock,
            avg_price=_money(avg_price),
        )
        for category, count, active, inactive, total_value, total_stock, avg_price in db.execute(
            query
        )
    ]


def list_categories(db: Session, include_deleted: bool = False) -> list[str]:
    query = apply_visibility(select(distinct(Product.category)), include_deleted)
    return list(db.scalars(query.order_by(Product.category)).all())
