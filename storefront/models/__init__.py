"""SQLAlchemy models."""

from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.tag import Tag, ProductTag

__all__ = [
    "Category",
    "Product",
    "Tag",
    "ProductTag",
]
