"""
Tasks API endpoints.

CRUD operations for tasks.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from focusplan.api.deps import CurrentUser, Tasks, http_error
from focusplan.core.exceptions import FocusPlanError, NotFoundError
from focusplan.models.enums import TaskStatus
from focusplan.models.task import Task, TaskCreate, TaskDeletionResult, TaskUpdate

router = APIRouter()


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user: CurrentUser,
    service: Tasks,
):
    """Create a new task."""
    return await service.create(user.id, task)


@router.get("", response_model=list[Task])
async def list_tasks(
    user: CurrentUser,
    service: Tasks,
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    include_done: bool = Query(False),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """List tasks with optional filters."""
    return await service.list(
        user.id,
        status=status_filter,
        include_done=include_done,
        limit=limit,
        offset=offset,
    )


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: UUID,
    user: CurrentUser,
    service: Tasks,
):
    """Get a task by ID."""
    try:
        return await service.get(user.id, task_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: UUID,
    update: TaskUpdate,
    user: CurrentUser,
    service: Tasks,
):
    """Update a task."""
    try:
        return await service.update(user.id, task_id, update)
    except FocusPlanError as e:
        raise http_error(e) from e


@router.delete("/{task_id}", response_model=TaskDeletionResult)
async def delete_task(
    task_id: UUID,
    user: CurrentUser,
    service: Tasks,
):
    """Delete a task with its blocks, sessions and calendar events."""
    try:
        return await service.delete_task(user.id, task_id)
    except FocusPlanError as e:
        raise http_error(e) from e
