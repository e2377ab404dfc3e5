"""
Authentication routes — register, login.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status

from api.dependencies import get_account_service
from core.account_service import AccountService
from utils.schemas import AccountOut, AccountSummary, LoginResponse, RegisterResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: Optional[Dict[str, Any]] = Body(None),
    accounts: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """Register a new account."""
    account = await accounts.register(payload or {})
    return RegisterResponse(
        message="Account registered successfully",
        user=AccountOut.model_validate(account),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: Optional[Dict[str, Any]] = Body(None),
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    """Login with login + password."""
    token, account = await accounts.login(payload or {})
    return LoginResponse(
        message="Login successful",
        token=token,
        user=AccountSummary.model_validate(account),
    )
