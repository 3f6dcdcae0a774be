"""CRUD, filtering and reporting endpoints for the product catalog."""

from __future__ import annotations

from decimal import Decimal
import logging

from fastapi import APIRouter, Body, HTTPException, Query, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError

from catalog_api.api.dependencies.db import SessionDep
from catalog_api.api.schemas.product import (
    CategoryStats,
    ProductCreate,
    ProductListResponse,
    ProductRead,
    ProductSummary,
    ProductUpdate,
)
from catalog_api.core.config import get_settings
from catalog_api.services import product_mutations, product_query, product_stats
from catalog_api.services.errors import (
    ProductConflictError,
    ProductNotFoundError,
    ProductValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Paging values must fit a 32-bit database integer
MAX_DB_INT = 2**31 - 1

INCLUDE_DELETED = Query(
    False, alias="includeDeleted", description="Include soft-deleted products"
)


def _server_error(action: str, e: Exception) -> HTTPException:
    if isinstance(e, SQLAlchemyError):
        logger.error(f"Database error while {action}: {e}", exc_info=True)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: failed {action}",
        )
    logger.error(f"Unexpected error while {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred",
    )


@router.get(
    "",
    summary="List products with filters, sorting and pagination",
    response_model=ProductListResponse,
)
def list_products(
    db: SessionDep,
    page: int = Query(
        1, le=MAX_DB_INT, description="Page number (1-indexed); values below 1 mean 1"
    ),
    page_size: int | None = Query(
        None, alias="pageSize", ge=1, le=MAX_DB_INT, description="Items per page"
    ),
    sort_column: str = Query("name", alias="sortColumn"),
    sort_order: str = Query("asc", alias="sortOrder", description="asc or desc"),
    search: str = Query(
        "", description="Case-insensitive match on name, description, category, manufacturer"
    ),
    category: str = Query("", description="Exact category match"),
    min_price: Decimal | None = Query(None, alias="minPrice"),
    max_price: Decimal | None = Query(None, alias="maxPrice"),
    is_active: bool | None = Query(None, alias="isActive"),
    include_deleted: bool = INCLUDE_DELETED,
) -> ProductListResponse:
    """Return one page of products for the dashboard grid.

    ``totalCount`` counts every match before pagination is applied.
    """
    params = product_query.ProductQuery(
        page=page,
        page_size=page_size or get_settings().default_page_size,
        sort_column=sort_column,
        sort_order=sort_order,
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        is_active=is_active,
        include_deleted=include_deleted,
    )
    try:
        result = product_query.list_products(db, params)
    except Exception as e:
        raise _server_error("listing products", e) from e

    return ProductListResponse(
        total_count=result.total_count,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
        data=[ProductRead.model_validate(p) for p in result.items],
    )


@router.get(
    "/categories",
    summary="Distinct product categories",
    response_model=list[str],
)
def list_categories(
    db: SessionDep,
    include_deleted: bool = INCLUDE_DELETED,
) -> list[str]:
    try:
        return product_stats.list_categories(db, include_deleted)
    except Exception as e:
        raise _server_error("listing categories", e) from e


@router.get(
    "/stats/summary",
    summary="Catalog-wide totals",
    response_model=ProductSummary,
)
def products_summary(
    db: SessionDep,
    include_deleted: bool = INCLUDE_DELETED,
) -> ProductSummary:
    """Counts, stock and inventory value over the visible products."""
    try:
        return product_stats.summarize_products(db, include_deleted)
    except Exception as e:
        raise _server_error("computing product summary", e) from e


@router.get(
    "/stats/by-category",
    summary="Per-category totals ordered by inventory value",
    response_model=list[CategoryStats],
)
def products_by_category(
    db: SessionDep,
    include_deleted: bool = INCLUDE_DELETED,
) -> list[CategoryStats]:
    try:
        return product_stats.stats_by_category(db, include_deleted)
    except Exception as e:
        raise _server_error("computing category stats", e) from e


@router.get(
    "/{product_id}",
    summary="Fetch a single product",
    response_model=ProductRead,
)
def get_product(
    product_id: int,
    db: SessionDep,
    include_deleted: bool = INCLUDE_DELETED,
) -> ProductRead:
    try:
        product = product_query.get_product(db, product_id, include_deleted)
        return ProductRead.model_validate(product)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail="Product not found") from e
    except Exception as e:
        raise _server_error(f"fetching product {product_id}", e) from e


@router.post(
    "",
    summary="Create a product",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductRead,
)
def create_product(
    payload: ProductCreate,
    request: Request,
    response: Response,
    db: SessionDep,
) -> ProductRead:
    """Persist a product from the dashboard form.

    New products are always active and not deleted, whatever the payload says.
    """
    try:
        product = product_mutations.create_product(db, payload)
        response.headers["Location"] = str(
            request.url_for("get_product", product_id=product.id)
        )
        return ProductRead.model_validate(product)
    except Exception as e:
        db.rollback()
        raise _server_error("creating product", e) from e


@router.put(
    "/{product_id}",
    summary="Replace an existing product",
    status_code=status.HTTP_204_NO_CONTENT,
)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: SessionDep,
) -> Response:
    """Full-replace update; ``isActive``/``isDeleted`` in the body are ignored."""
    try:
        product_mutations.update_product(db, product_id, payload)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ProductValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail="Product not found") from e
    except ProductConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except Exception as e:
        db.rollback()
        raise _server_error(f"updating product {product_id}", e) from e


@router.delete(
    "/{product_id}",
    summary="Delete product (soft delete)",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_product(
    product_id: int,
    db: SessionDep,
) -> Response:
    """Mark the product deleted and inactive; the row stays in the database."""
    try:
        product_mutations.delete_product(db, product_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail="Product not found") from e
    except ProductConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except Exception as e:
        db.rollback()
        raise _server_error(f"deleting product {product_id}", e) from e


@router.patch(
    "/{product_id}/restore",
    summary="Restore a soft-deleted product",
    status_code=status.HTTP_204_NO_CONTENT,
)
def restore_product(
    product_id: int,
    db: SessionDep,
) -> Response:
    try:
        product_mutations.restore_product(db, product_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail="Product not found") from e
    except ProductConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except Exception as e:
        db.rollback()
        raise _server_error(f"restoring product {product_id}", e) from e


@router.patch(
    "/{product_id}/set-active",
    summary="Toggle the active flag",
    status_code=status.HTTP_204_NO_CONTENT,
)
def set_product_active(
    product_id: int,
    db: SessionDep,
    is_active: bool = Body(..., description="Bare JSON boolean"),
) -> Response:
    """Activate or deactivate a product; deletion state is left alone."""
    try:
        product_mutations.set_product_active(db, product_id, is_active)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail="Product not found") from e
    except ProductConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except Exception as e:
        db.rollback()
        raise _server_error(f"updating active flag of product {product_id}", e) from e
