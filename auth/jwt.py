"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON claims signed with HMAC-SHA256::

    <base64url(json claims)>.<hex hmac-sha256>

The secret is handed to ``TokenService`` once at startup (see
``main.create_app``) and never changes for the life of the process.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Any, Callable, Dict

from pydantic import ValidationError

from utils.schemas import Claims, Role


class TokenError(Exception):
    """Base class for every reason a token is rejected."""


class MalformedToken(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class TokenExpired(TokenError):
    pass


class TokenService:
    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret.encode()
        self.expiry_seconds = expiry_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, account_id: int, login: str, role: Role | str) -> str:
        """Create a signed token for the account, valid for ``expiry_seconds``."""
        now = int(self._clock())
        payload: Dict[str, Any] = {
            "id": account_id,
            "login": login,
            "role": Role(role).value,
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + self._sign(raw)

    def verify(self, token: str) -> Claims:
        """
        Verify ``token`` and return its claims.

        Raises ``MalformedToken``, ``InvalidSignature`` or ``TokenExpired``.
        Callers must not tell the client which one occurred.
        """
        parts = token.split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise MalformedToken("bad format")
        try:
            raw = urlsafe_b64decode(parts[0].encode())
        except (binascii.Error, ValueError) as exc:
            raise MalformedToken("bad encoding") from exc

        if not hmac.compare_digest(parts[1].encode(), self._sign(raw).encode()):
            raise InvalidSignature("bad signature")

        try:
            claims = Claims.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            raise MalformedToken("bad claims") from exc

        if claims.exp <= self._clock():
            raise TokenExpired("token expired")
        return claims
