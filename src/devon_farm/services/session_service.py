# services/session_service.py
"""
Session gate
============
Turns the credential carried in the session cookie into an authenticated
identity for one request.

  authenticate(credential)
    └─ no credential           → UNAUTHENTICATED  (caller redirects to /login)
    └─ provider.validate_session (bounded by the provider timeout)
         ├─ any failure        → INVALID          (caller answers 401)
         └─ success            → AUTHENTICATED + refreshed credential

No database access happens here.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from starlette.responses import Response

from devon_farm.auth_strategies.base import MagicLinkProvider
from devon_farm.core.cookies import set_session_cookie
from devon_farm.core.exceptions import DevonFarmException

logger = logging.getLogger(__name__)


class AuthStatus(str, Enum):
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    INVALID = "invalid"


@dataclass(frozen=True)
class AuthResult:
    status: AuthStatus
    external_id: str | None = None
    credential: str | None = None
    reason: str | None = None

    @property
    def authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED

    def to_session(self, secure: bool) -> "SessionContext":
        if not self.authenticated or not self.external_id or not self.credential:
            raise ValueError(f"cannot build a session from a {self.status.value} result")
        return SessionContext(
            external_id=self.external_id, credential=self.credential, secure=secure
        )


@dataclass(frozen=True)
class SessionContext:
    """The authenticated identity of the current request."""

    external_id: str
    credential: str
    secure: bool

    def refresh_cookie(self, response: Response) -> Response:
        set_session_cookie(response, self.credential, self.secure)
        return response


class SessionAuthenticator:
    def __init__(self, provider: MagicLinkProvider, timeout_seconds: float = 5.0):
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def authenticate(self, credential: str | None) -> AuthResult:
        if not credential:
            return AuthResult(status=AuthStatus.UNAUTHENTICATED)

        try:
            session = await asyncio.wait_for(
                self.provider.validate_session(credential), timeout=self.timeout_seconds
            )
        except TimeoutError:
            logger.warning("[Session] Provider validation timed out")
            return AuthResult(status=AuthStatus.INVALID, reason="timeout")
        except DevonFarmException as exc:
            logger.info(f"[Session] Credential rejected: {exc.error_code}")
            return AuthResult(status=AuthStatus.INVALID, reason=exc.error_code)

        return AuthResult(
            status=AuthStatus.AUTHENTICATED,
            external_id=session.external_id,
            credential=session.credential,
        )
