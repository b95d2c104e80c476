"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from storefront import __version__
from storefront.api.routes import api_router
from storefront.api.templating import redirect, render
from storefront.config import Settings, settings as default_settings
from storefront.database import init_db
from storefront.exceptions import NotAuthenticatedError, PersistenceError, ProductNotFoundError
from storefront.utils.flash import flash

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Storefront...")
    await init_db()
    yield
    logger.info("Shutting down Storefront...")


async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    flash(request, "You need to sign in to access this page", "error")
    return redirect(request.app.state.login_url)


async def product_not_found_handler(request: Request, exc: ProductNotFoundError):
    logger.info(f"Not found: {request.method} {request.url.path} ({exc})")
    return render(request, "errors/404.html", {"message": str(exc)}, status_code=404)


async def persistence_error_handler(request: Request, exc: Exception):
    """Log store failures and show the generic error page."""
    logger.error(
        f"Persistence failure: {type(exc).__name__}: {exc}",
        exc_info=exc,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )
    return render(request, "errors/500.html", status_code=500)


def create_app(settings: Settings = default_settings) -> FastAPI:
    """Build the application."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="Storefront",
        description="Product catalogue management",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    # Built once; handed to the product workflow per request
    app.state.upload_widget = settings.upload_widget()
    app.state.login_url = settings.login_url

    app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)

    @app.middleware("http")
    async def add_security_headers(request, call_next):
        """Add security headers to all responses."""
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        return response

    app.add_exception_handler(NotAuthenticatedError, not_authenticated_handler)
    app.add_exception_handler(ProductNotFoundError, product_not_found_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_error_handler)

    app.include_router(api_router)

    @app.get("/", include_in_schema=False)
    async def root():
        """Send visitors to the product listing."""
        return redirect("/products")

    return app


app = create_app()
