"""Domain errors raised by the catalog services.

Routers translate these into HTTP status codes; the services themselves know
nothing about HTTP.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog service failures."""


class ProductValidationError(CatalogError, ValueError):
    """Malformed input, e.g. an id mismatch or an out-of-range value."""


class ProductNotFoundError(CatalogError, LookupError):
    """The referenced product does not exist or is hidden by visibility rules."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class ProductConflictError(CatalogError):
    """The product was modified concurrently between read and write."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} was modified by another request")
        self.product_id = product_id
