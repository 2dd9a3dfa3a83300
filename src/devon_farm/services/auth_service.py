# services/auth_service.py
"""
AuthFlowService
===============
Orchestrates the passwordless login lifecycle:

  login_redirect(credential)           GET  /login
    └─ SessionAuthenticator.authenticate()
    └─ resolve local user → farm-aware redirect target (fails open to None)

  issue_link(name, email)              POST /login
    └─ provider.send_login_link()      ← returns the provider subject id
    └─ UserService.upsert_user()       ← the one place users are registered

  consume_callback(token, next)        GET  /auth/callback
    └─ provider.exchange_callback_token()
    └─ resolve (or backstop-create) the local user → redirect target

  logout(credential)                   POST /logout
    └─ provider.revoke_session()       ← best effort, never raises
"""

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.auth_strategies.base import MagicLinkProvider, ProviderSession
from devon_farm.core.exceptions import DevonFarmException, UserNotFoundError
from devon_farm.models import UserORM
from devon_farm.repositories.user_repo import UserRepository
from devon_farm.services.session_service import AuthResult, SessionAuthenticator
from devon_farm.services.user_service import UserService

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


def home_path_for(user: UserORM) -> str:
    """Farm dashboard for onboarded users, farm creation otherwise."""
    if user.farm_id is None:
        return f"/new/farm/{user.id}"
    return f"/farm/{user.farm_id}"


def safe_next_path(next_path: str | None) -> str | None:
    """Accept only same-site absolute paths, never another host."""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//"):
        return None
    if "\\" in next_path:
        return None
    parts = urlsplit(next_path)
    if parts.scheme or parts.netloc:
        return None
    return next_path


@dataclass(frozen=True)
class CallbackOutcome:
    session: ProviderSession
    redirect_to: str


class AuthFlowService:
    def __init__(
        self,
        db: AsyncSession,
        provider: MagicLinkProvider,
        authenticator: SessionAuthenticator,
    ) -> None:
        self.user_service = UserService(UserRepository(db))
        self.provider = provider
        self.authenticator = authenticator

    async def login_redirect(self, credential: str | None) -> tuple[str, AuthResult] | None:
        """
        Where an already signed-in visitor of the login page should go.

        Returns None whenever the answer is "show the form": no session, an
        invalid session, or any failure while looking up the local user.
        """
        if not credential:
            return None

        result = await self.authenticator.authenticate(credential)
        if not result.authenticated or not result.external_id:
            logger.info(f"[Auth] Ignoring stale session on login page: {result.reason}")
            return None

        try:
            user = await self.user_service.get_by_external_id(result.external_id)
        except SQLAlchemyError as exc:
            logger.warning(f"[Auth] User lookup failed on login page: {exc.__class__.__name__}")
            return None

        if not user:
            logger.warning(f"[Auth] No local user for external_id={result.external_id}")
            return None

        return home_path_for(user), result

    async def issue_link(self, name: str, email: str) -> UserORM:
        """
        Send the magic link, then register the user locally.

        Raises ProviderError before any local state exists. A PersistenceError
        afterwards means the link is already on its way; the upsert is
        idempotent, so submitting the form again repairs the record.
        """
        external_id = await self.provider.send_login_link(email)
        user = await self.user_service.upsert_user(external_id, name, email)
        logger.info(f"[Auth] Magic link issued. user_id={user.id} external_id={external_id}")
        return user

    async def consume_callback(self, token: str, next_path: str | None = None) -> CallbackOutcome:
        """
        Exchange the link token for a session and pick the redirect target.

        Raises AuthenticationError/ProviderError when the exchange fails;
        no session exists in that case. Once the exchange succeeds this
        always returns, so the caller can set the session cookie.
        """
        session = await self.provider.exchange_callback_token(token)
        logger.info(f"[Auth] Callback exchanged for external_id={session.external_id}")

        next_target = safe_next_path(next_path)
        try:
            user = await self._resolve_user(session)
        except (DevonFarmException, SQLAlchemyError) as exc:
            # The session is valid; the login page retries the lookup and
            # falls back to the form if it still fails.
            logger.error(f"[Auth] Could not resolve local user after callback: {exc!r}")
            return CallbackOutcome(session=session, redirect_to=next_target or LOGIN_PATH)

        return CallbackOutcome(session=session, redirect_to=next_target or home_path_for(user))

    async def _resolve_user(self, session: ProviderSession) -> UserORM:
        user = await self.user_service.get_by_external_id(session.external_id)
        if user:
            return user

        # Issuance normally registered the user; rebuild the row from the
        # provider profile if that upsert was lost.
        if not session.email:
            raise UserNotFoundError("No local account for this login link")
        name = session.name or session.email.split("@", 1)[0]
        logger.warning(f"[Auth] Backfilling missing user for external_id={session.external_id}")
        return await self.user_service.ensure_user(session.external_id, name, session.email)

    async def logout(self, credential: str | None) -> None:
        if not credential:
            return
        try:
            await asyncio.wait_for(
                self.provider.revoke_session(credential),
                timeout=self.authenticator.timeout_seconds,
            )
        except DevonFarmException as exc:
            logger.info(f"[Auth] Session revoke rejected during logout: {exc.error_code}")
        except Exception as exc:
            # Logout always succeeds for the browser
            logger.warning(f"[Auth] Session revoke failed during logout: {exc!r}")
