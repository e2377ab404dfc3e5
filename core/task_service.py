"""
Task flows — every operation is scoped to the calling identity.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFound
from database.helpers import (
    delete_owned_task,
    get_owned_task,
    insert_task,
    list_tasks_for_owner,
    update_owned_task,
)
from database.models import Task
from utils.schemas import Claims, TaskStatus
from utils.validators import TASK_RULES, ensure_valid

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


class TaskService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_owned(self, identity: Claims) -> List[Task]:
        return await list_tasks_for_owner(self.session, identity.id)

    async def get(self, identity: Claims, task_id: int) -> Task:
        task = await get_owned_task(self.session, task_id, identity.id)
        if task is None:
            raise NotFound(TASK_NOT_FOUND)
        return task

    async def create(self, identity: Claims, payload: Dict[str, Any]) -> Task:
        ensure_valid(payload, TASK_RULES)
        status = TaskStatus(payload.get("status") or TaskStatus.PENDING)
        task = await insert_task(
            self.session,
            owner_id=identity.id,
            title=payload["title"],
            description=payload.get("description"),
            status=status,
        )
        await self.session.commit()
        logger.info("Task %s created by account %s", task.id, identity.id)
        return task

    async def update(self, identity: Claims, task_id: int, payload: Dict[str, Any]) -> Task:
        """
        Replace the task's fields.

        ``description`` and ``status`` keep their stored values when the
        keys are absent; an explicit ``null`` description clears it.
        """
        current = await self.get(identity, task_id)
        ensure_valid(payload, TASK_RULES)

        description = payload["description"] if "description" in payload else current.description
        status = TaskStatus(payload.get("status") or current.status)
        task = await update_owned_task(
            self.session,
            task_id,
            identity.id,
            title=payload["title"],
            description=description,
            status=status,
        )
        if task is None:
            raise NotFound(TASK_NOT_FOUND)
        await self.session.commit()
        logger.info("Task %s updated by account %s", task_id, identity.id)
        return task

    async def delete(self, identity: Claims, task_id: int) -> None:
        if not await delete_owned_task(self.session, task_id, identity.id):
            raise NotFound(TASK_NOT_FOUND)
        await self.session.commit()
        logger.info("Task %s deleted by account %s", task_id, identity.id)
