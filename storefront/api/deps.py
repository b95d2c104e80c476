"""API dependencies for dependency injection."""

from functools import partial
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import UploadWidgetConfig
from storefront.database import get_db
from storefront.exceptions import NotAuthenticatedError
from storefront.services.product_workflow import ProductFormWorkflow
from storefront.utils.flash import flash

SESSION_USER_KEY = "user"

DbSession = Annotated[AsyncSession, Depends(get_db)]


def is_authenticated(request: Request) -> bool:
    """Whether the session carries a signed-in user."""
    return bool(request.session.get(SESSION_USER_KEY))


def require_login(request: Request) -> None:
    """Reject requests without a signed-in user."""
    if not is_authenticated(request):
        raise NotAuthenticatedError()


def get_upload_widget(request: Request) -> UploadWidgetConfig:
    """Upload widget config built once at application start-up."""
    return request.app.state.upload_widget


def get_product_workflow(
    request: Request,
    db: DbSession,
    upload_widget: Annotated[UploadWidgetConfig, Depends(get_upload_widget)],
) -> ProductFormWorkflow:
    """Per-request product workflow wired to the session flash sink."""
    return ProductFormWorkflow(db, upload_widget, flash=partial(flash, request))


Workflow = Annotated[ProductFormWorkflow, Depends(get_product_workflow)]
