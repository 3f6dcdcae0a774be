"""Create, replace and state-change operations for products.

Products are never physically removed: delete and restore only flip the
``is_deleted``/``is_active`` flags. Those two flags change exclusively through
``delete_product``, ``restore_product`` and ``set_product_active``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from catalog_api.api.schemas.product import ProductCreate, ProductUpdate
from catalog_api.db.models.product import Product
from catalog_api.services.errors import (
    ProductConflictError,
    ProductNotFoundError,
    ProductValidationError,
)

logger = logging.getLogger(__name__)

# Fields a full-replace update overwrites with the caller's values
REPLACEABLE_FIELDS = {
    "name",
    "description",
    "price",
    "stock_quantity",
    "category",
    "manufacturer",
}

CENT = Decimal("0.01")


def _clean_fields(payload: ProductCreate | ProductUpdate) -> dict:
    values = payload.model_dump(include=REPLACEABLE_FIELDS)
    values["price"] = Decimal(values["price"]).quantize(CENT, rounding=ROUND_HALF_UP)
    if values.get("manufacturer") == "":
        values["manufacturer"] = None
    return values


def _load(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def _exists(db: Session, product_id: int) -> bool:
    return db.scalar(select(Product.id).where(Product.id == product_id)) is not None


def _commit(db: Session, product_id: int) -> None:
    """Commit pending changes, mapping a stale row version to a domain error."""
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        if not _exists(db, product_id):
            raise ProductNotFoundError(product_id) from e
        logger.warning(f"Concurrent modification detected for product {product_id}")
        raise ProductConflictError(product_id) from e


def create_product(db: Session, payload: ProductCreate) -> Product:
    """Persist a new product; it always starts active and not deleted."""
    product = Product(**_clean_fields(payload), is_active=True, is_deleted=False)
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info(f"Created product {product.id} ({product.name!r})")
    return product


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    """Replace every editable field of an existing product.

    The stored ``is_active``/``is_deleted`` values are copied onto the incoming
    values before persisting, so a payload can never change them.
    """
    if payload.id != product_id:
        raise ProductValidationError(
            f"Product id in body ({payload.id}) does not match path id ({product_id})"
        )

    product = _load(db, product_id)

    incoming = _clean_fields(payload)
    incoming["is_active"] = product.is_active
    incoming["is_deleted"] = product.is_deleted

    for key, value in incoming.items():
        setattr(product, key, value)
    _commit(db, product_id)

    logger.info(f"Updated product {product_id}")
    return product


def delete_product(db: Session, product_id: int) -> None:
    """Soft delete: hide the product and deactivate it."""
    product = _load(db, product_id)
    product.is_deleted = True
    product.is_active = False
    _commit(db, product_id)

    logger.info(f"Soft deleted product {product_id}")


def restore_product(db: Session, product_id: int) -> None:
    product = _load(db, product_id)
    product.is_deleted = False
    product.is_active = True
    _commit(db, product_id)

    logger.info(f"Restored product {product_id}")


def set_product_active(db: Session, product_id: int, is_active: bool) -> None:
    """Toggle the active flag without touching ``is_deleted``."""
    product = _load(db, product_id)
    product.is_active = is_active
    _commit(db, product_id)

    logger.info(f"Set product {product_id} active={is_active}")
