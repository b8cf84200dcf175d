"""
Unit tests for password hashing, tokens and the authorization gate.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from libraria.api.dependencies import AuthorizationGate, admins_only, catalog_editors
from libraria.exceptions import UnauthenticatedError, UnauthorizedError
from libraria.security import (
    Identity,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from libraria.services.users import ensure_self_or_admin
from libraria.storage.models import Role


SECRET = "unit-secret"


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def fake_request():
    return SimpleNamespace(
        state=SimpleNamespace(),
        method="GET",
        url=SimpleNamespace(path="/api/v1/test"),
    )


class TestPasswordHashing:
    """Tests for password hashing."""

    def test_hash_is_not_plaintext(self):
        hashed = get_password_hash("s1")
        assert hashed != "s1"
        assert verify_password("s1", hashed)

    def test_wrong_password_rejected(self):
        hashed = get_password_hash("s1")
        assert not verify_password("s2", hashed)

    def test_hashes_are_salted(self):
        assert get_password_hash("s1") != get_password_hash("s1")


class TestAccessTokens:
    """Tests for token issuance and verification."""

    def test_token_carries_identity(self, reader_identity):
        token = create_access_token(reader_identity, secret=SECRET)
        decoded = decode_access_token(token, secret=SECRET)

        assert decoded == reader_identity

    def test_payload_fields(self, admin_identity):
        token = create_access_token(admin_identity, secret=SECRET)
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert payload["id"] == admin_identity.id
        assert payload["role"] == "admin"
        assert payload["name"] == "Admin"
        assert "exp" in payload

    def test_default_expiry_is_eight_hours(self, reader_identity):
        token = create_access_token(reader_identity, secret=SECRET)
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])

        remaining = payload["exp"] - datetime.now(timezone.utc).timestamp()
        assert 8 * 3600 - 60 < remaining <= 8 * 3600

    def test_expired_token_rejected(self, reader_identity):
        token = create_access_token(reader_identity, secret=SECRET, expires_delta=timedelta(seconds=-1))

        with pytest.raises(UnauthenticatedError) as exc_info:
            decode_access_token(token, secret=SECRET)
        assert exc_info.value.status_code == 401

    def test_wrong_secret_rejected(self, reader_identity):
        token = create_access_token(reader_identity, secret=SECRET)

        with pytest.raises(UnauthenticatedError):
            decode_access_token(token, secret="another-secret")

    def test_unknown_role_rejected(self):
        token = jwt.encode({"id": "x", "role": "superuser", "name": "X"}, SECRET, algorithm="HS256")

        with pytest.raises(UnauthenticatedError):
            decode_access_token(token, secret=SECRET)

    def test_missing_id_rejected(self):
        token = jwt.encode({"role": "reader", "name": "X"}, SECRET, algorithm="HS256")

        with pytest.raises(UnauthenticatedError):
            decode_access_token(token, secret=SECRET)


@pytest.mark.asyncio
class TestAuthorizationGate:
    """Tests for AuthorizationGate."""

    async def test_missing_token(self, test_settings):
        gate = AuthorizationGate()

        with pytest.raises(UnauthenticatedError) as exc_info:
            await gate(fake_request(), credentials=None, settings=test_settings)
        assert exc_info.value.message == "Token requerido"

    async def test_invalid_token(self, test_settings):
        gate = AuthorizationGate()

        with pytest.raises(UnauthenticatedError) as exc_info:
            await gate(fake_request(), credentials=bearer("not-a-jwt"), settings=test_settings)
        assert exc_info.value.message == "Token inválido"

    async def test_any_role_admitted_without_allow_list(self, test_settings, reader_identity):
        token = create_access_token(reader_identity, secret=test_settings.jwt_secret)
        request = fake_request()

        identity = await AuthorizationGate()(request, credentials=bearer(token), settings=test_settings)

        assert identity == reader_identity
        assert request.state.user == reader_identity

    async def test_role_outside_allow_list(self, test_settings, reader_identity):
        token = create_access_token(reader_identity, secret=test_settings.jwt_secret)

        with pytest.raises(UnauthorizedError) as exc_info:
            await catalog_editors(fake_request(), credentials=bearer(token), settings=test_settings)
        assert exc_info.value.status_code == 403

    async def test_editor_is_not_admin(self, test_settings):
        editor = Identity(id="e1", role=Role.EDITOR, name="Editor")
        token = create_access_token(editor, secret=test_settings.jwt_secret)

        assert await catalog_editors(fake_request(), credentials=bearer(token), settings=test_settings) == editor
        with pytest.raises(UnauthorizedError):
            await admins_only(fake_request(), credentials=bearer(token), settings=test_settings)


class TestOwnershipRule:
    """Tests for the self-or-admin rule."""

    def test_self_allowed(self, reader_identity):
        ensure_self_or_admin(reader_identity, reader_identity.id)

    def test_admin_allowed(self, admin_identity):
        ensure_self_or_admin(admin_identity, "someone-else")

    def test_other_user_denied(self, reader_identity):
        with pytest.raises(UnauthorizedError):
            ensure_self_or_admin(reader_identity, "someone-else")
