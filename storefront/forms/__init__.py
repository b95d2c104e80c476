"""HTML form definitions and validation."""

from storefront.forms.product import (
    BoundField,
    BoundProductForm,
    Choice,
    FieldSpec,
    ProductForm,
    ProductFormData,
)

__all__ = [
    "BoundField",
    "BoundProductForm",
    "Choice",
    "FieldSpec",
    "ProductForm",
    "ProductFormData",
]
