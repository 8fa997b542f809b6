"""
Tests for token verification and the ownership rule.
"""
import base64
import json
import uuid

import pytest

from bike_service_api.app.core.exceptions import ForbiddenError, UnauthorizedError
from bike_service_api.app.core.security import (
    JWTTokenService,
    _b64_url_encode,
    ensure_owner_or_admin,
    is_owner_or_admin,
)
from bike_service_api.app.schemas.auth import TokenPayload, UserRole


@pytest.fixture
def token_service() -> JWTTokenService:
    return JWTTokenService("unit-secret")


def claims(role="appuser", **overrides) -> dict:
    data = {"id": uuid.uuid4(), "user_id": uuid.uuid4(), "role": role}
    data.update(overrides)
    return data


class TestVerifyToken:
    def test_round_trip(self, token_service):
        issued = claims(role=UserRole.ADMIN)

        payload = token_service.verify_token(token_service.create_access_token(issued))

        assert payload.id == issued["id"]
        assert payload.user_id == issued["user_id"]
        assert payload.role == UserRole.ADMIN
        assert payload.is_admin

    def test_token_is_standard_hs256(self, token_service):
        token = token_service.create_access_token(claims())

        header = json.loads(_pad_decode(token.split(".")[0]))

        assert header == {"alg": "HS256", "typ": "JWT"}

    def test_wrong_secret(self, token_service):
        token = JWTTokenService("other-secret").create_access_token(claims())

        with pytest.raises(UnauthorizedError):
            token_service.verify_token(token)

    def test_tampered_payload(self, token_service):
        header, _, signature = token_service.create_access_token(claims()).split(".")
        forged = _b64_url_encode(json.dumps({**_jsonable(claims(role="admin")), "exp": 9999999999}).encode())

        with pytest.raises(UnauthorizedError):
            token_service.verify_token(f"{header}.{forged}.{signature}")

    def test_expired(self, token_service):
        token = token_service.create_access_token(claims(), expires_delta=-1)

        with pytest.raises(UnauthorizedError):
            token_service.verify_token(token)

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "!!!.@@@.###"])
    def test_malformed(self, token_service, token):
        with pytest.raises(UnauthorizedError):
            token_service.verify_token(token)

    @pytest.mark.parametrize(
        "bad_claims",
        [
            {"user_id": "not-a-uuid"},
            {"role": "superuser"},
            {"id": None},
        ],
    )
    def test_invalid_claims(self, token_service, bad_claims):
        token = token_service.create_access_token(claims(**bad_claims))

        with pytest.raises(UnauthorizedError):
            token_service.verify_token(token)


class TestOwnership:
    def test_owner_is_allowed(self):
        payload = TokenPayload(id=uuid.uuid4(), user_id=uuid.uuid4(), role=UserRole.APP_USER)

        assert is_owner_or_admin(payload, payload.user_id)

    def test_admin_is_allowed_on_any_resource(self):
        payload = TokenPayload(id=uuid.uuid4(), user_id=uuid.uuid4(), role=UserRole.ADMIN)

        assert is_owner_or_admin(payload, uuid.uuid4())

    def test_stranger_is_denied(self):
        payload = TokenPayload(id=uuid.uuid4(), user_id=uuid.uuid4(), role=UserRole.APP_USER)

        assert not is_owner_or_admin(payload, uuid.uuid4())
        with pytest.raises(ForbiddenError):
            ensure_owner_or_admin(payload, uuid.uuid4(), "bike", "some-id")


def _pad_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _jsonable(data: dict) -> dict:
    return {key: str(value) for key, value in data.items()}
