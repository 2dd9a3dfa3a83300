from typing import Any

from fastapi import status
from fastapi.responses import HTMLResponse, RedirectResponse

from devon_farm.core.config import settings
from devon_farm.core.templates import jinja_env
from devon_farm.services.session_service import SessionContext


def render(
    template_name: str,
    status_code: int = status.HTTP_200_OK,
    session: SessionContext | None = None,
    **context: Any,
) -> HTMLResponse:
    template = jinja_env.get_template(template_name)
    html = template.render(app_name=settings.APP_NAME, signed_in=session is not None, **context)
    response = HTMLResponse(content=html, status_code=status_code)
    if session is not None:
        session.refresh_cookie(response)
    return response


def redirect(url: str, session: SessionContext | None = None) -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)
    if session is not None:
        session.refresh_cookie(response)
    return response
