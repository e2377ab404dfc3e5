"""
Pydantic schemas shared by the API, the services and the validators.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# Enumerations
# ═══════════════════════════════════════════════════════════════════════════════


class Role(str, Enum):
    USER = "USER"


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ErrorCode(str, Enum):
    REQUIRED = "REQUIRED"
    INVALID_LENGTH = "INVALID_LENGTH"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_VALUE = "INVALID_VALUE"


# ═══════════════════════════════════════════════════════════════════════════════
# Validation report
# ═══════════════════════════════════════════════════════════════════════════════


class FieldError(BaseModel):
    field: str
    code: ErrorCode
    message: str


class ValidationReport(BaseModel):
    """400 body: ``{timestamp, status, error, fieldErrors}``."""

    timestamp: str
    status: int = 400
    error: str = "Bad Request"
    field_errors: List[FieldError] = Field(default_factory=list, serialization_alias="fieldErrors")


class ErrorResponse(BaseModel):
    timestamp: str
    status: int
    error: str
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════════════════════


class Claims(BaseModel):
    """Verified token payload, attached to each authenticated request."""

    model_config = ConfigDict(frozen=True)

    id: int
    login: str
    role: Role
    iat: int
    exp: int


# ═══════════════════════════════════════════════════════════════════════════════
# Accounts
# ═══════════════════════════════════════════════════════════════════════════════


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    login: str
    role: Role
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class AccountSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    login: str
    role: Role


class RegisterResponse(BaseModel):
    message: str
    user: AccountOut


class LoginResponse(BaseModel):
    message: str
    token: str
    user: AccountSummary


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════════════════════


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    user_id: int
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class MessageResponse(BaseModel):
    message: str
