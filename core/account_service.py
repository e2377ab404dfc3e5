"""
Account flows — registration and login.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenService
from auth.password import DEFAULT_ROUNDS, hash_password_async, verify_password_async
from core.errors import Conflict, Unauthenticated
from database.helpers import get_account_by_login, insert_account
from database.models import Account
from utils.schemas import Role
from utils.validators import LOGIN_RULES, REGISTER_RULES, ensure_valid

logger = logging.getLogger(__name__)

LOGIN_TAKEN = "Login is already taken"
BAD_CREDENTIALS = "Invalid login or password"


class AccountService:
    """Register and authenticate accounts against one request's session."""

    def __init__(
        self,
        session: AsyncSession,
        tokens: TokenService,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        self.session = session
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds

    async def register(self, payload: Dict[str, Any]) -> Account:
        """
        Validate, check login uniqueness, hash and persist.

        Raises ``ValidationFailed`` or ``Conflict``.  The returned account is
        only ever exposed through ``AccountOut``, which carries no hash.
        """
        ensure_valid(payload, REGISTER_RULES)
        login: str = payload["login"]

        if await get_account_by_login(self.session, login) is not None:
            logger.info("Registration rejected, login taken: %s", login)
            raise Conflict(LOGIN_TAKEN)

        password_hash = await hash_password_async(payload["password"], self.bcrypt_rounds)
        try:
            account = await insert_account(self.session, login, password_hash, Role.USER)
            await self.session.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same login.
            await self.session.rollback()
            logger.info("Registration rejected on insert, login taken: %s", login)
            raise Conflict(LOGIN_TAKEN) from exc

        logger.info("Registered account %s (%s)", account.login, account.id)
        return account

    async def login(self, payload: Dict[str, Any]) -> Tuple[str, Account]:
        """
        Return ``(token, account)`` for valid credentials.

        Unknown login and wrong password raise the same ``Unauthenticated``.
        """
        ensure_valid(payload, LOGIN_RULES)
        account = await get_account_by_login(self.session, payload["login"])
        if account is None:
            logger.info("Login failed for %s", payload["login"])
            raise Unauthenticated(BAD_CREDENTIALS)

        if not await verify_password_async(payload["password"], account.password_hash):
            logger.info("Login failed for %s", payload["login"])
            raise Unauthenticated(BAD_CREDENTIALS)

        token = self.tokens.issue(account.id, account.login, account.role)
        logger.info("Login: %s (%s)", account.login, account.id)
        return token, account
