"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import asyncio
import logging

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12
# bcrypt reads at most 72 bytes; newer releases raise instead of truncating.
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode()[:_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt (auto-salted, so equal inputs differ)."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash.  Fails closed."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be checked; denying login")
        return False


async def hash_password_async(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """``hash_password`` on a worker thread so the event loop keeps serving."""
    return await asyncio.to_thread(hash_password, password, rounds)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)
