"""Create/update/delete/list workflow for products."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.config import UploadWidgetConfig
from storefront.database import MAX_INTEGER
from storefront.exceptions import ProductNotFoundError
from storefront.forms import BoundProductForm, Choice, ProductForm
from storefront.models import Category, Product, ProductTag, Tag
from storefront.services.tag_reconciler import TagReconciler, parse_tag_ids

logger = logging.getLogger(__name__)

LISTING_URL = "/products"

FlashSink = Callable[[str, str], None]


@dataclass
class Page:
    """A template to render."""

    template: str
    context: dict[str, Any] = field(default_factory=dict)
    status_code: int = 200


@dataclass
class Redirect:
    """A redirect to another page."""

    url: str


def product_form_values(product: Product) -> dict[str, Any]:
    """Form default values for an existing product; tags as ids."""
    return {
        "name": product.name,
        "cost": product.cost,
        "description": product.description,
        "category_id": product.category_id,
        "image_url": product.image_url,
        "tags": product.tag_ids,
    }


class ProductFormWorkflow:
    """Orchestrates the product pages: reference data, forms, persistence."""

    def __init__(
        self,
        db: AsyncSession,
        upload_widget: UploadWidgetConfig,
        flash: FlashSink,
        listing_url: str = LISTING_URL,
    ):
        self.db = db
        self.upload_widget = upload_widget
        self.flash = flash
        self.listing_url = listing_url
        self.tags = TagReconciler(db)

    async def load_reference_lists(self) -> tuple[list[Choice], list[Choice]]:
        """Category and tag (id, name) pairs, in insertion (primary key) order."""
        categories = await self.db.execute(select(Category.id, Category.name).order_by(Category.id))
        tags = await self.db.execute(select(Tag.id, Tag.name).order_by(Tag.id))
        return (
            [(row.id, row.name) for row in categories.all()],
            [(row.id, row.name) for row in tags.all()],
        )

    async def build_form(self) -> ProductForm:
        categories, tags = await self.load_reference_lists()
        return ProductForm(categories, tags)

    async def get_product(
        self, product_id: int, with_tags: bool = False, for_update: bool = False
    ) -> Product:
        """Fetch a product or raise ProductNotFoundError."""
        if not 1 <= product_id <= MAX_INTEGER:
            raise ProductNotFoundError(product_id)

        query = select(Product).where(Product.id == product_id)
        if with_tags:
            query = query.options(selectinload(Product.product_tags))
        if for_update:
            query = query.with_for_update()

        result = await self.db.execute(query)
        product = result.scalar_one_or_none()

        if not product:
            raise ProductNotFoundError(product_id)
        return product

    def _form_page(self, template: str, form: BoundProductForm, **context: Any) -> Page:
        return Page(
            template=template,
            context={"form": form, **self.upload_widget.template_context(), **context},
        )

    async def list_products(self) -> Page:
        query = select(Product).options(
            selectinload(Product.category),
            selectinload(Product.product_tags).selectinload(ProductTag.tag),
        )
        result = await self.db.execute(query)
        products = list(result.scalars().all())
        return Page(template="products/index.html", context={"products": products})

    async def render_create_form(self) -> Page:
        form = await self.build_form()
        return self._form_page("products/create.html", form.unbound())

    async def submit_create(self, form_input: Mapping[str, Any]) -> Page | Redirect:
        form = await self.build_form()
        bound = form.bind(form_input)

        if not bound.is_valid:
            logger.debug(f"Product create rejected: {bound.errors}")
            return self._form_page("products/create.html", bound)

        product_data, tags = bound.data.split()
        product = Product(**product_data)
        self.db.add(product)
        await self.db.flush()

        tag_ids = parse_tag_ids(tags)
        if tag_ids:
            await self.tags.attach(product.id, tag_ids)

        await self.db.commit()
        logger.info(f"Created product {product.id} with tags {tag_ids}")

        self.flash(f"New Product {product.name} has been created", "success")
        return Redirect(self.listing_url)

    async def render_update_form(self, product_id: int) -> Page:
        product = await self.get_product(product_id, with_tags=True)
        form = await self.build_form()
        bound = form.bind_defaults(product_form_values(product))
        return self._form_page("products/update.html", bound, product=product)

    async def submit_update(self, product_id: int, form_input: Mapping[str, Any]) -> Page | Redirect:
        product = await self.get_product(product_id, with_tags=True, for_update=True)
        form = await self.build_form()
        bound = form.bind(form_input)

        if not bound.is_valid:
            logger.debug(f"Product {product_id} update rejected: {bound.errors}")
            return self._form_page("products/update.html", bound, product=product)

        product_data, tags = bound.data.split()
        for name, value in product_data.items():
            setattr(product, name, value)
        product.updated_at = datetime.now(UTC)
        await self.db.flush()

        # Product save and tag reconcile commit together
        await self.tags.reconcile(product.id, tags)
        await self.db.commit()
        logger.info(f"Updated product {product.id}")

        return Redirect(self.listing_url)

    async def render_delete_confirm(self, product_id: int) -> Page:
        product = await self.get_product(product_id)
        return Page(template="products/delete.html", context={"product": product})

    async def submit_delete(self, product_id: int) -> Redirect:
        product = await self.get_product(product_id, with_tags=True)
        await self.db.delete(product)
        await self.db.commit()
        logger.info(f"Deleted product {product_id}")
        return Redirect(self.listing_url)
