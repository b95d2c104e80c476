"""Health check endpoint."""

from fastapi import APIRouter
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from storefront import __version__
from storefront.api.deps import DbSession
from storefront.models import Product

router = APIRouter()


@router.get("/health")
async def health_check(db: DbSession) -> dict:
    """Report whether the catalogue tables are reachable."""
    product_count = None
    try:
        result = await db.execute(select(func.count()).select_from(Product))
        product_count = result.scalar()
    except SQLAlchemyError:
        await db.rollback()

    db_healthy = product_count is not None
    return {
        "status": "healthy" if db_healthy else "degraded",
        "database": "connected" if db_healthy else "disconnected",
        "products": product_count,
        "version": __version__,
    }
