"""Exceptions raised by the storefront services."""

from collections.abc import Iterable


class StorefrontError(Exception):
    """Base class for storefront errors."""
    pass


class NotAuthenticatedError(StorefrontError):
    """Raised when a protected route is hit without a signed-in user."""
    pass


class ProductNotFoundError(StorefrontError):
    """Raised when a required product lookup finds no row."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class PersistenceError(StorefrontError):
    """Raised when the store rejects a write."""
    pass


class UnknownTagError(PersistenceError):
    """Raised when attaching tag ids that do not exist."""

    def __init__(self, tag_ids: Iterable[int]):
        self.tag_ids = sorted(tag_ids)
        super().__init__(f"Tags not found: {self.tag_ids}")
