"""
Task routes.  Every endpoint requires a bearer token.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, status

from api.dependencies import get_current_identity, get_task_service
from core.task_service import TaskService
from utils.schemas import Claims, MessageResponse, TaskOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskOut])
async def list_tasks(
    identity: Claims = Depends(get_current_identity),
    tasks: TaskService = Depends(get_task_service),
) -> List[TaskOut]:
    """The caller's tasks, newest first."""
    return [TaskOut.model_validate(t) for t in await tasks.list_owned(identity)]


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: Optional[Dict[str, Any]] = Body(None),
    identity: Claims = Depends(get_current_identity),
    tasks: TaskService = Depends(get_task_service),
) -> TaskOut:
    return TaskOut.model_validate(await tasks.create(identity, payload or {}))


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: int,
    identity: Claims = Depends(get_current_identity),
    tasks: TaskService = Depends(get_task_service),
) -> TaskOut:
    return TaskOut.model_validate(await tasks.get(identity, task_id))


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    payload: Optional[Dict[str, Any]] = Body(None),
    identity: Claims = Depends(get_current_identity),
    tasks: TaskService = Depends(get_task_service),
) -> TaskOut:
    return TaskOut.model_validate(await tasks.update(identity, task_id, payload or {}))


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    identity: Claims = Depends(get_current_identity),
    tasks: TaskService = Depends(get_task_service),
) -> MessageResponse:
    await tasks.delete(identity, task_id)
    return MessageResponse(message="Task deleted successfully")
