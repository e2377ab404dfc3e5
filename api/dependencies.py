"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import get_current_identity, get_token_service
from auth.jwt import TokenService
from core.account_service import AccountService
from core.task_service import TaskService
from database.session import get_db_session

__all__ = [
    "db_session",
    "get_account_service",
    "get_current_identity",
    "get_task_service",
]


async def db_session(session: AsyncSession = Depends(get_db_session)) -> AsyncGenerator[AsyncSession, None]:
    """Re-export so routes import from a single place."""
    yield session


def get_account_service(
    request: Request,
    session: AsyncSession = Depends(db_session),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(session, tokens, request.app.state.settings.bcrypt_rounds)


def get_task_service(session: AsyncSession = Depends(db_session)) -> TaskService:
    return TaskService(session)
