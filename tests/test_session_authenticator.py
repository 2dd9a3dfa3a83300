"""Session gate: credential → AuthResult, failing closed."""

from __future__ import annotations

import pytest

from devon_farm.services.session_service import AuthStatus, SessionAuthenticator


class TestSessionAuthenticator:
    async def test_missing_credential_is_unauthenticated(self, provider):
        result = await SessionAuthenticator(provider).authenticate(None)

        assert result.status == AuthStatus.UNAUTHENTICATED
        assert not result.authenticated

    async def test_empty_credential_is_unauthenticated(self, provider):
        result = await SessionAuthenticator(provider).authenticate("")

        assert result.status == AuthStatus.UNAUTHENTICATED

    async def test_unknown_credential_is_invalid(self, provider):
        result = await SessionAuthenticator(provider).authenticate("session-forged")

        assert result.status == AuthStatus.INVALID
        assert result.reason == "SESSION_EXPIRED"

    async def test_provider_outage_fails_closed(self, provider):
        credential = provider.start_session("user-test-ana")
        provider.unavailable = True

        result = await SessionAuthenticator(provider).authenticate(credential)

        assert result.status == AuthStatus.INVALID
        assert result.reason == "PROVIDER_UNAVAILABLE"

    async def test_slow_provider_times_out(self, provider):
        credential = provider.start_session("user-test-ana")
        provider.validate_delay = 0.5

        result = await SessionAuthenticator(provider, timeout_seconds=0.05).authenticate(credential)

        assert result.status == AuthStatus.INVALID
        assert result.reason == "timeout"

    async def test_valid_credential_returns_identity_and_refreshed_credential(self, provider):
        credential = provider.start_session("user-test-ana")

        result = await SessionAuthenticator(provider).authenticate(credential)

        assert result.authenticated
        assert result.external_id == "user-test-ana"
        assert result.credential != credential
        assert provider.sessions[result.credential] == "user-test-ana"

    async def test_session_context_requires_an_authenticated_result(self, provider):
        result = await SessionAuthenticator(provider).authenticate("session-forged")

        with pytest.raises(ValueError):
            result.to_session(secure=False)

    async def test_session_context_carries_identity(self, provider):
        credential = provider.start_session("user-test-ana")
        result = await SessionAuthenticator(provider).authenticate(credential)

        session = result.to_session(secure=True)

        assert session.external_id == "user-test-ana"
        assert session.credential == result.credential
        assert session.secure is True
