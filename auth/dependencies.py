"""
FastAPI dependencies for authentication.

``get_current_identity`` is the guard used by every protected route: it
reads the ``Authorization: Bearer <token>`` header, verifies the token and
returns the request's own ``Claims``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from auth.jwt import TokenError, TokenService
from core.errors import Forbidden, Unauthenticated
from utils.schemas import Claims

logger = logging.getLogger(__name__)


def get_token_service(request: Request) -> TokenService:
    """The process-wide token service built by ``create_app``."""
    return request.app.state.token_service


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token part of a ``Bearer <token>`` header, or ``None``."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> Claims:
    """
    Missing token → ``Unauthenticated`` (401).
    Present but malformed, tampered or expired → ``Forbidden`` (403).
    On success the account id is also recorded on ``request.state``.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise Unauthenticated("Access token required")
    try:
        claims = tokens.verify(token)
    except TokenError as exc:
        logger.info("Rejected token: %s", type(exc).__name__)
        raise Forbidden("Invalid token") from exc
    # Read back by the access log in main.create_app.
    request.state.account_id = claims.id
    return claims
