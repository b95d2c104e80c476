"""Product pages."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from storefront.api.deps import Workflow, require_login
from storefront.api.templating import to_response

# Every product page needs a signed-in user
router = APIRouter(dependencies=[Depends(require_login)])


async def read_form(request: Request) -> dict[str, Any]:
    """Submitted form fields; tags keeps every selected value."""
    form = await request.form()
    data: dict[str, Any] = {key: form.get(key) for key in form.keys()}
    data["tags"] = form.getlist("tags")
    return data


@router.get("", response_class=HTMLResponse)
async def list_products(request: Request, workflow: Workflow) -> Response:
    """List all products."""
    return to_response(request, await workflow.list_products())


@router.get("/create", response_class=HTMLResponse)
async def create_product_form(request: Request, workflow: Workflow) -> Response:
    """Show the product creation form."""
    return to_response(request, await workflow.render_create_form())


@router.post("/create", response_class=HTMLResponse)
async def create_product(request: Request, workflow: Workflow) -> Response:
    """Create a product from the submitted form."""
    form_input = await read_form(request)
    return to_response(request, await workflow.submit_create(form_input))


@router.get("/{product_id}/update", response_class=HTMLResponse)
async def update_product_form(request: Request, workflow: Workflow, product_id: int) -> Response:
    """Show the edit form for a product."""
    return to_response(request, await workflow.render_update_form(product_id))


@router.post("/{product_id}/update", response_class=HTMLResponse)
async def update_product(request: Request, workflow: Workflow, product_id: int) -> Response:
    """Update a product and its tags from the submitted form."""
    form_input = await read_form(request)
    return to_response(request, await workflow.submit_update(product_id, form_input))


@router.get("/{product_id}/delete", response_class=HTMLResponse)
async def delete_product_confirm(request: Request, workflow: Workflow, product_id: int) -> Response:
    """Ask for confirmation before deleting a product."""
    return to_response(request, await workflow.render_delete_confirm(product_id))


@router.post("/{product_id}/delete", response_class=HTMLResponse)
async def delete_product(request: Request, workflow: Workflow, product_id: int) -> Response:
    """Delete a product."""
    return to_response(request, await workflow.submit_delete(product_id))
