"""
Token verification and ownership checks.

Tokens are issued by the user service and signed with a shared secret.
This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC‑SHA256 signatures and base64url encoding, so tokens created
by ``create_access_token`` interoperate with standard HS256 JWTs.  The
verified claims are turned into a ``TokenPayload``:

* ``id`` – identity (session) id, a UUID
* ``user_id`` – the caller's user id, a UUID
* ``role`` – ``admin`` or ``appuser``
* ``exp`` – expiration as a UNIX timestamp

The ownership rule applied before every mutating or single‑entity read
is: administrators pass, everyone else must own the resource.
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError as PydanticValidationError

from ..schemas.auth import TokenPayload, UserRole
from .exceptions import ForbiddenError, UnauthorizedError


logger = logging.getLogger(__name__)


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


class JWTTokenService:
    """Create and verify HS256 tokens with a shared secret."""

    def __init__(self, secret_key: str, default_ttl_seconds: int = 24 * 60 * 60) -> None:
        self._secret_key = secret_key
        self._default_ttl_seconds = default_ttl_seconds

    def create_access_token(self, claims: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
        """Create a signed JWT token with the given claims.

        The claims are extended with an ``exp`` field.  ``UUID`` and
        ``UserRole`` values are converted to strings.

        Parameters
        ----------
        claims : dict
            Claims to embed, normally ``id``, ``user_id`` and ``role``.
        expires_delta : Optional[int]
            Lifetime of the token in seconds.  A negative value
            produces an already expired token.
        """
        to_encode = {
            key: value.value if isinstance(value, UserRole) else str(value) if isinstance(value, UUID) else value
            for key, value in claims.items()
        }
        lifetime = self._default_ttl_seconds if expires_delta is None else expires_delta
        to_encode["exp"] = int(time.time()) + lifetime
        header = {"alg": "HS256", "typ": "JWT"}
        header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
        payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        signature_b64 = _b64_url_encode(_sign(signing_input, self._secret_key))
        return f"{header_b64}.{payload_b64}.{signature_b64}"

    def decode(self, token: str) -> Dict[str, Any]:
        """Verify the signature and expiry and return the raw claims.

        Raises ``UnauthorizedError`` if the token is malformed, the
        signature does not match or the token has expired.
        """
        parts = token.split(".")
        if len(parts) != 3:
            raise UnauthorizedError("malformed token")
        header_b64, payload_b64, signature_b64 = parts
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        try:
            actual_sig = _b64_url_decode(signature_b64)
            claims = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        except (ValueError, UnicodeDecodeError) as exc:
            raise UnauthorizedError("malformed token") from exc
        # Constant‑time comparison to prevent timing attacks
        if not hmac.compare_digest(_sign(signing_input, self._secret_key), actual_sig):
            raise UnauthorizedError("invalid signature")
        if not isinstance(claims, dict):
            raise UnauthorizedError("malformed claims")
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or int(exp) < int(time.time()):
            raise UnauthorizedError("token expired")
        return claims

    def verify_token(self, token: str) -> TokenPayload:
        """Verify ``token`` and return the caller identity."""
        claims = self.decode(token)
        try:
            return TokenPayload(
                id=claims.get("id"),
                user_id=claims.get("user_id"),
                role=claims.get("role"),
            )
        except PydanticValidationError as exc:
            logger.warning("Token carries invalid claims: %s", exc.errors()[0].get("loc"))
            raise UnauthorizedError("invalid token claims") from exc


security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenPayload:
    """Dependency that returns the authenticated caller.

    If the request has no ``Authorization`` header, or the token fails
    verification, an HTTP 401 error is raised.  The token service is
    taken from the application's service container.
    """
    if credentials is None:
        logger.warning("Unauthorized access attempt path=%s ip=%s", request.url.path, _client_ip(request))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token_service: JWTTokenService = request.app.state.container.token_service
    try:
        return token_service.verify_token(credentials.credentials)
    except UnauthorizedError as exc:
        logger.warning("Token rejected path=%s reason=%s", request.url.path, exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# ---------------------------------------------------------------------------
# Ownership policy
# ---------------------------------------------------------------------------

def is_owner_or_admin(payload: TokenPayload, owner_id: UUID) -> bool:
    """Return True if the caller may act on a resource owned by ``owner_id``."""
    return payload.role == UserRole.ADMIN or payload.user_id == owner_id


def ensure_owner_or_admin(payload: TokenPayload, owner_id: UUID, resource: str, resource_id) -> None:
    """Raise ``ForbiddenError`` unless ``is_owner_or_admin`` allows the caller."""
    if not is_owner_or_admin(payload, owner_id):
        logger.warning(
            "Access denied resource=%s id=%s requester_id=%s owner_id=%s",
            resource,
            resource_id,
            payload.user_id,
            owner_id,
        )
        raise ForbiddenError("Access denied")
