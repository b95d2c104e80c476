"""Product model - an item in the catalogue."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.database import Base

if TYPE_CHECKING:
    from storefront.models.category import Category
    from storefront.models.tag import ProductTag, Tag


class Product(Base):
    """A product in the catalogue."""

    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_name", "name"),
        Index("ix_products_category_id", "category_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost: Mapped[int] = mapped_column(Integer, nullable=False)  # minor currency units
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    category: Mapped["Category"] = relationship("Category", back_populates="products")
    product_tags: Mapped[list["ProductTag"]] = relationship(
        "ProductTag", back_populates="product", cascade="all, delete-orphan"
    )

    @property
    def tags(self) -> list["Tag"]:
        """Tags attached to this product; needs product_tags.tag loaded."""
        return [pt.tag for pt in self.product_tags]

    @property
    def tag_ids(self) -> list[int]:
        return [pt.tag_id for pt in self.product_tags]

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"
