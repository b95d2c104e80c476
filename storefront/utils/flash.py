"""One-shot flash messages stored in the session."""

from starlette.requests import Request

FLASH_SESSION_KEY = "_flashes"


def flash(request: Request, message: str, category: str = "info") -> None:
    """Queue a message to be shown on the next rendered page."""
    messages = request.session.get(FLASH_SESSION_KEY, [])
    messages.append({"message": message, "category": category})
    request.session[FLASH_SESSION_KEY] = messages


def pop_flashes(request: Request) -> list[dict[str, str]]:
    """Return and clear all pending flash messages."""
    return request.session.pop(FLASH_SESSION_KEY, [])
