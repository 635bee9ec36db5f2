"""
Execution tracking API endpoints.
"""

from uuid import UUID

from fastapi import APIRouter

from focusplan.api.deps import CurrentUser, Exec, http_error
from focusplan.core.exceptions import FocusPlanError
from focusplan.models.session import ExecutionSession
from focusplan.models.task import Task

router = APIRouter()


@router.post("/{task_id}/start", response_model=ExecutionSession)
async def start(task_id: UUID, user: CurrentUser, exec_service: Exec):
    """Start tracking a task."""
    try:
        return await exec_service.start(user.id, task_id)
    except FocusPlanError as e:
        raise http_error(e) from e


@router.post("/{task_id}/stop", response_model=ExecutionSession)
async def stop(task_id: UUID, user: CurrentUser, exec_service: Exec):
    """Pause tracking. The task stays in progress."""
    try:
        return await exec_service.stop(user.id, task_id)
    except FocusPlanError as e:
        raise http_error(e) from e


@router.post("/{task_id}/done", response_model=Task)
async def done(task_id: UUID, user: CurrentUser, exec_service: Exec):
    """Complete a task, closing any open session."""
    try:
        return await exec_service.done(user.id, task_id)
    except FocusPlanError as e:
        raise http_error(e) from e


@router.get("/{task_id}/sessions", response_model=list[ExecutionSession])
async def list_sessions(task_id: UUID, user: CurrentUser, exec_service: Exec):
    try:
        return await exec_service.list_sessions(user.id, task_id)
    except FocusPlanError as e:
        raise http_error(e) from e
