"""
Database helper functions — parameterized row operations for accounts and tasks.

Every task read or write takes both the task id and the owner id and filters
on both in the same statement.  A task owned by somebody else is therefore
indistinguishable from one that does not exist.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Account, Task, utcnow
from utils.schemas import Role, TaskStatus

logger = logging.getLogger(__name__)

# Ids are int4 in Postgres; anything outside cannot exist and must not reach the driver.
MAX_ROW_ID = 2**31 - 1


def _storable_id(row_id: int) -> bool:
    return 1 <= row_id <= MAX_ROW_ID


# ── Accounts ────────────────────────────────────────────────────────


async def get_account_by_login(session: AsyncSession, login: str) -> Optional[Account]:
    """Case-sensitive lookup by login."""
    result = await session.execute(select(Account).where(Account.login == login))
    return result.scalar_one_or_none()


async def insert_account(
    session: AsyncSession,
    login: str,
    password_hash: str,
    role: Role = Role.USER,
) -> Account:
    """Insert an account row.  Raises ``IntegrityError`` on a duplicate login."""
    account = Account(
        login=login,
        password_hash=password_hash,
        role=role.value,
        created_at=utcnow(),
    )
    session.add(account)
    await session.flush()
    return account


# ── Tasks ───────────────────────────────────────────────────────────


async def list_tasks_for_owner(session: AsyncSession, owner_id: int) -> List[Task]:
    """All tasks owned by ``owner_id``, newest first."""
    result = await session.execute(
        select(Task)
        .where(Task.user_id == owner_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    return list(result.scalars().all())


async def get_owned_task(session: AsyncSession, task_id: int, owner_id: int) -> Optional[Task]:
    """Return the task only if it exists *and* belongs to ``owner_id``."""
    if not _storable_id(task_id):
        return None
    result = await session.execute(
        select(Task).where(Task.id == task_id, Task.user_id == owner_id)
    )
    return result.scalar_one_or_none()


async def insert_task(
    session: AsyncSession,
    owner_id: int,
    title: str,
    description: Optional[str] = None,
    status: TaskStatus = TaskStatus.PENDING,
) -> Task:
    now = utcnow()
    task = Task(
        title=title,
        description=description,
        status=status.value,
        user_id=owner_id,
        created_at=now,
        updated_at=now,
    )
    session.add(task)
    await session.flush()
    return task


async def update_owned_task(
    session: AsyncSession,
    task_id: int,
    owner_id: int,
    title: str,
    description: Optional[str],
    status: TaskStatus,
) -> Optional[Task]:
    """Apply new field values and refresh ``updated_at``; ``None`` if not owned."""
    task = await get_owned_task(session, task_id, owner_id)
    if task is None:
        return None
    task.title = title
    task.description = description
    task.status = status.value
    task.updated_at = utcnow()
    await session.flush()
    return task


async def delete_owned_task(session: AsyncSession, task_id: int, owner_id: int) -> bool:
    """Delete in one owner-scoped statement.  ``False`` if nothing matched."""
    if not _storable_id(task_id):
        return False
    result = await session.execute(
        delete(Task).where(Task.id == task_id, Task.user_id == owner_id)
    )
    await session.flush()
    return (result.rowcount or 0) > 0
