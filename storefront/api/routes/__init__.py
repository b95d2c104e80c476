"""Routes."""

from fastapi import APIRouter

from storefront.api.routes import health, products

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(products.router, prefix="/products", tags=["Products"])
