import logging
import uuid

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.api.dependencies.deps import get_authenticator, get_db
from devon_farm.core.config import settings
from devon_farm.core.cookies import is_secure_request
from devon_farm.core.exceptions import TenantAccessDenied
from devon_farm.models import UserORM
from devon_farm.repositories.user_repo import UserRepository
from devon_farm.services.auth_service import LOGIN_PATH
from devon_farm.services.session_service import (
    AuthStatus,
    SessionAuthenticator,
    SessionContext,
)

logger = logging.getLogger(__name__)


def prefers_json(request: Request) -> bool:
    """API callers ask for JSON; browsers ask for HTML or anything."""
    accept = request.headers.get("accept", "").lower()
    return "application/json" in accept and "text/html" not in accept


async def require_session(
    request: Request,
    response: Response,
    authenticator: SessionAuthenticator = Depends(get_authenticator),
) -> SessionContext:
    """
    Gate for every tenant-scoped route.

    No cookie → 303 to /login (401 for JSON callers).
    Rejected cookie → 401, never a redirect, so API clients cannot loop.
    Valid cookie → the refreshed credential is written back with a new
    24h expiry and the identity is returned to the handler.
    """
    credential = request.cookies.get(settings.SESSION_COOKIE_NAME)
    result = await authenticator.authenticate(credential)

    if result.status == AuthStatus.UNAUTHENTICATED:
        if prefers_json(request):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
            )
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Login required",
            headers={"Location": LOGIN_PATH},
        )

    if not result.authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    session = result.to_session(is_secure_request(request))
    # Covers handlers that return plain data; handlers returning their own
    # Response call session.refresh_cookie() on it.
    session.refresh_cookie(response)
    return session


async def get_current_user(
    session: SessionContext = Depends(require_session),
    db: AsyncSession = Depends(get_db),
) -> UserORM:
    user = await UserRepository(db).get_by_external_id(session.external_id)
    if user is None:
        logger.warning(f"[Auth] Valid session without local user: {session.external_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No account is registered for this session",
        )
    return user


def ensure_self(user: UserORM, user_id: uuid.UUID) -> None:
    if user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your account")


def ensure_farm_member(user: UserORM, farm_id: uuid.UUID) -> None:
    if user.farm_id != farm_id:
        logger.warning(f"[Tenant] user_id={user.id} denied access to farm_id={farm_id}")
        raise TenantAccessDenied()
