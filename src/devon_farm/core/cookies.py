# core/cookies.py
"""Session cookie policy: HttpOnly, SameSite=Lax, Path=/, 24h absolute expiry."""

from datetime import UTC, datetime, timedelta

from starlette.requests import Request
from starlette.responses import Response

from devon_farm.core.config import settings

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def is_secure_request(request: Request) -> bool:
    """True when the request reached us over TLS, directly or via a trusted proxy."""
    if request.url.scheme.lower() == "https":
        return True
    if settings.TRUST_FORWARDED_PROTO:
        forwarded = request.headers.get("x-forwarded-proto", "")
        # Proxies may append; the first hop is the client-facing scheme
        return forwarded.split(",")[0].strip().lower() == "https"
    return False


def session_cookie_expiry(now: datetime | None = None) -> datetime:
    now = now or datetime.now(UTC)
    return now + timedelta(hours=settings.SESSION_COOKIE_TTL_HOURS)


def set_session_cookie(response: Response, credential: str, secure: bool) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=credential,
        expires=session_cookie_expiry(),
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, secure: bool) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value="",
        expires=EPOCH,
        max_age=0,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )
