"""Jinja2 rendering of workflow results."""

from pathlib import Path

from fastapi import Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from storefront.services.product_workflow import Page, Redirect
from storefront.utils.flash import pop_flashes

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(request: Request, template_name: str, context: dict | None = None, status_code: int = 200) -> Response:
    """Render a template, consuming any pending flash messages."""
    context = dict(context or {})
    context["flashes"] = pop_flashes(request)
    return templates.TemplateResponse(request, template_name, context, status_code=status_code)


def redirect(url: str, status_code: int = 303) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status_code)


def to_response(request: Request, result: Page | Redirect) -> Response:
    """Turn a workflow result into an HTTP response."""
    if isinstance(result, Redirect):
        return redirect(result.url)
    return render(request, result.template, result.context, status_code=result.status_code)
