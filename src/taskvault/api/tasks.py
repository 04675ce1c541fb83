"""Task API routes.

Routes translate HTTP to service calls and map TaskNotFoundError to 404.
The authenticated user is passed to every service call; a task owned by
someone else comes back as 404, the same as a task that does not exist.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.auth.dependencies import CurrentUser, get_current_user
from taskvault.db.engine import get_db
from taskvault.db.models import TaskStatus
from taskvault.schemas.task import StatusChange, TaskCreate, TaskRead
from taskvault.services.task_service import TaskNotFoundError, TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


def _not_found(e: TaskNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    search: Optional[str] = Query(
        None, min_length=1, description="Case-insensitive match on title or description"
    ),
    user: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks with optional filters."""
    return await svc.list_tasks(user, status=status, search=search)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: int,
    user: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Get one of the caller's tasks by ID."""
    try:
        return await svc.get_task_by_id(task_id, user)
    except TaskNotFoundError as e:
        raise _not_found(e)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    user: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a new task in OPEN status."""
    return await svc.create_task(body.title, body.description, user)


@router.patch("/{task_id}/status", response_model=TaskRead)
async def update_task_status(
    task_id: int,
    body: StatusChange,
    user: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Change the status of one of the caller's tasks."""
    try:
        return await svc.update_task_status(task_id, body.status, user)
    except TaskNotFoundError as e:
        raise _not_found(e)


@router.delete("/{task_id}", status_code=204, response_class=Response)
async def delete_task(
    task_id: int,
    user: CurrentUser = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Delete one of the caller's tasks."""
    try:
        await svc.delete_task(task_id, user)
    except TaskNotFoundError as e:
        raise _not_found(e)
    return Response(status_code=204)
