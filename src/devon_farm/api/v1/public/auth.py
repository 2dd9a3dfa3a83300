# api/v1/public/auth.py
"""
Magic-link login endpoints
==========================

GET  /login          login form, or a farm-aware redirect when already signed in
POST /login          send a magic link and register the user locally
GET  /auth/callback  exchange the link token for a session cookie
POST /logout         revoke the session and clear the cookie
"""

import logging

import pydantic
from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.api.dependencies.deps import get_authenticator, get_db, get_provider
from devon_farm.api.templating import redirect, render
from devon_farm.auth_strategies.base import MagicLinkProvider
from devon_farm.core.config import settings
from devon_farm.core.cookies import clear_session_cookie, is_secure_request, set_session_cookie
from devon_farm.core.exceptions import (
    AuthenticationError,
    PersistenceError,
    ProviderError,
)
from devon_farm.schemas.auth import LoginRequest
from devon_farm.services.auth_service import AuthFlowService
from devon_farm.services.session_service import SessionAuthenticator

logger = logging.getLogger(__name__)

router = APIRouter()

LOGIN_TEMPLATE = "login.html"


def _get_auth_flow(
    db: AsyncSession = Depends(get_db),
    provider: MagicLinkProvider = Depends(get_provider),
    authenticator: SessionAuthenticator = Depends(get_authenticator),
) -> AuthFlowService:
    return AuthFlowService(db, provider, authenticator)


def _login_form(
    error: str | None = None, status_code: int = status.HTTP_200_OK, **context: object
) -> HTMLResponse:
    return render(LOGIN_TEMPLATE, status_code=status_code, title="Log in", error=error, **context)


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    flow: AuthFlowService = Depends(_get_auth_flow),
) -> Response:
    credential = request.cookies.get(settings.SESSION_COOKIE_NAME)
    try:
        outcome = await flow.login_redirect(credential)
    except Exception as exc:
        # The login page must render even when lookups break
        logger.warning(f"[Auth] Login short-circuit failed: {exc!r}")
        outcome = None

    if outcome is None:
        return _login_form()

    target, result = outcome
    return redirect(target, session=result.to_session(is_secure_request(request)))


@router.post("/login", response_class=HTMLResponse)
async def send_magic_link(
    name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    flow: AuthFlowService = Depends(_get_auth_flow),
) -> Response:
    try:
        login = LoginRequest.model_validate({"name": name, "email": email})
    except pydantic.ValidationError:
        return _login_form(
            "Enter a valid name and email",
            status_code=status.HTTP_400_BAD_REQUEST,
            name=name or "",
            email=email or "",
        )

    try:
        await flow.issue_link(login.name, str(login.email))
    except ProviderError as exc:
        logger.error(f"[Auth] Magic link send failed: {exc.error_code}")
        return _login_form(
            "We couldn't send your login link. Please try again shortly.",
            status_code=status.HTTP_502_BAD_GATEWAY,
            name=login.name,
            email=str(login.email),
        )
    except PersistenceError:
        # The link is already on its way; resubmitting repairs the account
        return _login_form(
            "Your login link was sent, but we couldn't save your details. "
            "Please submit the form again.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            name=login.name,
            email=str(login.email),
        )

    return render("login_sent.html", title="Check your email", email=str(login.email))


@router.get("/auth/callback", response_class=HTMLResponse)
async def magic_link_callback(
    request: Request,
    token: str | None = Query(default=None),
    next: str | None = Query(default=None),
    flow: AuthFlowService = Depends(_get_auth_flow),
) -> Response:
    if not token:
        return _login_form(
            "That login link is incomplete.", status_code=status.HTTP_400_BAD_REQUEST
        )

    try:
        outcome = await flow.consume_callback(token, next)
    except (AuthenticationError, ProviderError) as exc:
        logger.info(f"[Auth] Callback exchange failed: {exc.error_code}")
        return _login_form(
            "That login link is invalid or has expired. Request a new one below.",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    response = RedirectResponse(url=outcome.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, outcome.session.credential, is_secure_request(request))
    return response


@router.post("/logout")
async def logout(
    request: Request,
    flow: AuthFlowService = Depends(_get_auth_flow),
) -> RedirectResponse:
    await flow.logout(request.cookies.get(settings.SESSION_COOKIE_NAME))
    response = redirect("/")
    clear_session_cookie(response, is_secure_request(request))
    return response
