# auth_strategies/stytch.py
"""
Stytch magic-link provider
==========================
Thin async client over the Stytch consumer REST API.

  send_login_link(email)          → POST /v1/magic_links/email/login_or_create
  exchange_callback_token(token)  → POST /v1/magic_links/authenticate
  validate_session(credential)    → local JWT check, else POST /v1/sessions/authenticate
  revoke_session(credential)      → POST /v1/sessions/revoke

Every request runs under the configured timeout (5s by default). Network
failures, timeouts and 5xx answers surface as ProviderUnavailableError so
the session gate can fail closed.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JOSEError, JWTClaimsError, JWTError

from devon_farm.auth_strategies.base import MagicLinkProvider, ProviderSession
from devon_farm.auth_strategies.constants import (
    CLAIM_IAT,
    CLAIM_SUB,
    JWKS_CACHE_TTL_SECONDS,
    JWKS_FORCED_REFRESH_COOLDOWN_SECONDS,
    STYTCH,
    STYTCH_JWKS_PATH,
    STYTCH_JWT_ALGORITHM,
    STYTCH_LOGIN_OR_CREATE_PATH,
    STYTCH_MAGIC_LINK_AUTHENTICATE_PATH,
    STYTCH_SESSION_CLAIM,
    STYTCH_SESSIONS_AUTHENTICATE_PATH,
    STYTCH_SESSIONS_REVOKE_PATH,
)
from devon_farm.core.exceptions import (
    DevonFarmException,
    InvalidTokenError,
    ProviderError,
    ProviderUnavailableError,
    SessionExpiredError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StytchConfig:
    project_id: str
    secret: str
    base_url: str
    timeout_seconds: float = 5.0
    credential_type: str = "session_jwt"
    session_duration_minutes: int = 24 * 60
    jwt_max_age_seconds: int = 300
    callback_url: str | None = None

    @property
    def issuer(self) -> str:
        return f"stytch.com/{self.project_id}"

    @classmethod
    def from_settings(cls, settings: Any) -> "StytchConfig":
        return cls(
            project_id=settings.STYTCH_PROJECT_ID,
            secret=settings.STYTCH_SECRET,
            base_url=settings.stytch_base_url,
            timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS,
            credential_type=settings.SESSION_CREDENTIAL_TYPE,
            session_duration_minutes=settings.SESSION_DURATION_MINUTES,
            jwt_max_age_seconds=settings.SESSION_JWT_MAX_AGE_SECONDS,
            callback_url=settings.callback_url,
        )


class JWKSCache:
    """
    Signing keys for session JWTs, refetched hourly or when an unknown kid shows up.

    Forced refetches happen at most once per cooldown window.
    """

    def __init__(
        self,
        ttl_seconds: int = JWKS_CACHE_TTL_SECONDS,
        refresh_cooldown_seconds: int = JWKS_FORCED_REFRESH_COOLDOWN_SECONDS,
    ):
        self.ttl_seconds = ttl_seconds
        self.refresh_cooldown_seconds = refresh_cooldown_seconds
        self._keys: list[dict[str, Any]] = []
        self._fetched_at = 0.0
        self._forced_at: float | None = None
        self._lock = asyncio.Lock()

    def _fresh(self) -> bool:
        return bool(self._keys) and time.monotonic() - self._fetched_at < self.ttl_seconds

    def _may_force(self) -> bool:
        if self._forced_at is None:
            return True
        return time.monotonic() - self._forced_at >= self.refresh_cooldown_seconds

    def has_kid(self, kid: str | None) -> bool:
        return kid is None or any(key.get("kid") == kid for key in self._keys)

    async def get(self, provider: "StytchProvider", force: bool = False) -> list[dict[str, Any]]:
        async with self._lock:
            if force and not self._may_force():
                logger.debug("[Stytch] JWKS refresh skipped, cooling down")
                force = False
            if force or not self._fresh():
                self._keys = await provider.fetch_jwks()
                self._fetched_at = time.monotonic()
                if force:
                    self._forced_at = self._fetched_at
                logger.debug(f"[Stytch] JWKS refreshed, {len(self._keys)} key(s)")
            return self._keys


def _parse_timestamp(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _full_name(user: dict[str, Any]) -> str | None:
    name = user.get("name") or {}
    parts = [name.get("first_name"), name.get("last_name")]
    joined = " ".join(p for p in parts if p)
    return joined or None


def _primary_email(user: dict[str, Any]) -> str | None:
    for entry in user.get("emails") or []:
        if entry.get("email"):
            return entry["email"]
    return None


class StytchProvider(MagicLinkProvider):
    """
    Magic links and sessions backed by Stytch.

    The configuration is frozen and the HTTP client is shared; the only
    mutable state is the JWKS cache used for local session JWT checks.
    """

    def __init__(self, config: StytchConfig, http_client: httpx.AsyncClient | None = None):
        super().__init__(STYTCH)
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=config.base_url,
            auth=(config.project_id, config.secret),
            timeout=httpx.Timeout(config.timeout_seconds),
        )
        self._jwks = JWKSCache()

    # ── HTTP plumbing ─────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        rejects_as: type[DevonFarmException] = ProviderError,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(
                method, path, json=payload, timeout=self.config.timeout_seconds
            )
        except httpx.TimeoutException as exc:
            logger.warning(f"[Stytch] {method} {path} timed out")
            raise ProviderUnavailableError("Magic-link provider timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning(f"[Stytch] {method} {path} failed: {exc.__class__.__name__}")
            raise ProviderUnavailableError() from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.status_code >= 500:
            logger.error(f"[Stytch] {method} {path} returned {response.status_code}")
            raise ProviderUnavailableError(
                f"Magic-link provider error ({response.status_code})"
            )

        if response.status_code >= 400:
            error_type = body.get("error_type", "unknown")
            message = body.get("error_message") or "Request rejected by magic-link provider"
            logger.info(
                f"[Stytch] {method} {path} rejected: status={response.status_code} "
                f"error_type={error_type}"
            )
            if rejects_as is ProviderError:
                raise ProviderError(
                    message, details={"status_code": response.status_code, "error_type": error_type}
                )
            raise rejects_as(message)

        return body

    async def fetch_jwks(self) -> list[dict[str, Any]]:
        path = STYTCH_JWKS_PATH.format(project_id=self.config.project_id)
        body = await self._request("GET", path)
        keys = body.get("keys")
        if not isinstance(keys, list) or not all(isinstance(key, dict) for key in keys):
            raise ProviderError("Malformed JWKS response")
        return keys

    def _session_from(self, body: dict[str, Any]) -> ProviderSession:
        session = body.get("session") or {}
        user = body.get("user") or {}
        external_id = body.get("user_id") or session.get("user_id") or user.get("user_id")
        credential = body.get(self.config.credential_type)
        if not external_id or not credential:
            raise ProviderError("Provider response is missing the session or user id")
        return ProviderSession(
            external_id=external_id,
            credential=credential,
            expires_at=_parse_timestamp(session.get("expires_at")),
            email=_primary_email(user),
            name=_full_name(user),
        )

    # ── Provider contract ─────────────────────────────────────────

    async def send_login_link(self, email: str) -> str:
        payload: dict[str, Any] = {"email": email}
        if self.config.callback_url:
            payload["login_magic_link_url"] = self.config.callback_url
            payload["signup_magic_link_url"] = self.config.callback_url

        body = await self._request("POST", STYTCH_LOGIN_OR_CREATE_PATH, payload)
        external_id = body.get("user_id")
        if not external_id:
            raise ProviderError("Provider did not return a user id")
        logger.info(
            f"[Stytch] Login link sent. user_id={external_id} "
            f"created={body.get('user_created', False)}"
        )
        return external_id

    async def exchange_callback_token(self, token: str) -> ProviderSession:
        body = await self._request(
            "POST",
            STYTCH_MAGIC_LINK_AUTHENTICATE_PATH,
            {"token": token, "session_duration_minutes": self.config.session_duration_minutes},
            rejects_as=InvalidTokenError,
        )
        return self._session_from(body)

    async def validate_session(self, credential: str) -> ProviderSession:
        if self.config.credential_type == "session_jwt":
            local = await self._authenticate_jwt_locally(credential)
            if local is not None:
                return local

        body = await self._request(
            "POST",
            STYTCH_SESSIONS_AUTHENTICATE_PATH,
            {
                self.config.credential_type: credential,
                "session_duration_minutes": self.config.session_duration_minutes,
            },
            rejects_as=SessionExpiredError,
        )
        return self._session_from(body)

    async def revoke_session(self, credential: str) -> None:
        await self._request(
            "POST",
            STYTCH_SESSIONS_REVOKE_PATH,
            {self.config.credential_type: credential},
            rejects_as=SessionExpiredError,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ── Local session JWT verification ────────────────────────────

    async def _authenticate_jwt_locally(self, token: str) -> ProviderSession | None:
        """
        Verify a session JWT without a network round trip.

        Returns None when the token is well-signed but too old to trust
        locally; the caller must then re-check with the provider.
        """
        if self.config.jwt_max_age_seconds <= 0:
            return None

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise InvalidTokenError("Malformed session token") from exc

        kid = header.get("kid")
        keys = await self._jwks.get(self)
        if not self._jwks.has_kid(kid):
            keys = await self._jwks.get(self, force=True)
        if kid is not None:
            keys = [key for key in keys if key.get("kid") == kid]
            if not keys:
                raise InvalidTokenError("Session token was signed with an unknown key")

        try:
            claims = jwt.decode(
                token,
                {"keys": keys},
                algorithms=[STYTCH_JWT_ALGORITHM],
                audience=self.config.project_id,
                issuer=self.config.issuer,
            )
        except ExpiredSignatureError:
            return None
        except JWTClaimsError as exc:
            raise InvalidTokenError("Session token was issued for another project") from exc
        except JWTError as exc:
            raise InvalidTokenError("Session token signature is invalid") from exc
        except JOSEError as exc:
            logger.error(f"[Stytch] Unusable JWKS key: {exc}")
            raise ProviderError("Provider signing keys could not be used") from exc

        issued_at = claims.get(CLAIM_IAT)
        if not isinstance(issued_at, int | float):
            return None
        if time.time() - issued_at > self.config.jwt_max_age_seconds:
            return None

        session_claim = claims.get(STYTCH_SESSION_CLAIM) or {}
        expires_at = _parse_timestamp(session_claim.get("expires_at"))
        if expires_at is not None and expires_at <= datetime.now(UTC):
            return None

        subject = claims.get(CLAIM_SUB)
        if not subject:
            raise InvalidTokenError("Session token has no subject")

        return ProviderSession(external_id=subject, credential=token, expires_at=expires_at)
