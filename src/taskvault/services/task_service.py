"""Task service — CRUD and filtered listing, scoped to the task owner.

Every method takes the caller explicitly and every statement it issues
filters on ``Task.user_id == caller.id``. A task that belongs to somebody
else is reported exactly like a task that does not exist (TaskNotFoundError),
so responses never reveal whether another user's task id is in use.

Status updates and deletes are single conditional statements
(``UPDATE/DELETE ... WHERE id = :id AND user_id = :owner``) and decide
"not found" from the affected row count, so there is no window between a
read and the write for a concurrent request to slip into.

Status has no transition graph: any status may be set from any other.
"""

import uuid
from typing import Optional, Protocol

import structlog
from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.db.models import Task, TaskStatus

logger = structlog.get_logger()


class Owner(Protocol):
    """Anything carrying the resolved caller's user id."""

    id: uuid.UUID


class TaskNotFoundError(Exception):
    """Raised when a task does not exist or is not owned by the caller."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f'Task with ID "{task_id}" not found')


class TaskService:
    """Ownership-scoped task operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(
        self,
        user: Owner,
        status: Optional[TaskStatus] = None,
        search: Optional[str] = None,
    ) -> list[Task]:
        """List the caller's tasks with optional filters.

        ``status`` is an exact match. ``search`` is a case-insensitive
        substring match against title or description; ``%`` and ``_`` in
        it are matched literally. Both filters combine with AND.
        """
        query = select(Task).where(Task.user_id == user.id).order_by(Task.id)
        if status:
            query = query.where(Task.status == status)
        if search:
            query = query.where(
                or_(
                    Task.title.icontains(search, autoescape=True),
                    Task.description.icontains(search, autoescape=True),
                )
            )

        result = await self.db.execute(query)
        tasks = list(result.scalars().all())
        logger.debug(
            "tasks.listed",
            user_id=str(user.id),
            status=status.value if status else None,
            search=search,
            count=len(tasks),
        )
        return tasks

    async def get_task_by_id(self, task_id: int, user: Owner) -> Task:
        """Fetch one of the caller's tasks.

        Raises:
            TaskNotFoundError: if no task with this id belongs to the caller
        """
        task = await self._select_owned(task_id, user)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def _select_owned(
        self, task_id: int, user: Owner, refresh: bool = False
    ) -> Optional[Task]:
        query = select(Task).where(Task.id == task_id, Task.user_id == user.id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalars().first()

    # ─── Create ──────────────────────────────────────────

    async def create_task(self, title: str, description: str, user: Owner) -> Task:
        """Create a task in OPEN status owned by the caller."""
        task = Task(
            title=title,
            description=description,
            status=TaskStatus.OPEN,
            user_id=user.id,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)

        logger.info("tasks.created", task_id=task.id, user_id=str(user.id))
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task_status(
        self,
        task_id: int,
        status: TaskStatus,
        user: Owner,
    ) -> Task:
        """Set the status of one of the caller's tasks.

        Raises:
            TaskNotFoundError: if no task with this id belongs to the caller
        """
        result = await self.db.execute(
            update(Task)
            .where(Task.id == task_id, Task.user_id == user.id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise TaskNotFoundError(task_id)
        await self.db.commit()

        logger.info(
            "tasks.status_changed",
            task_id=task_id,
            user_id=str(user.id),
            status=status.value,
        )
        # Reload so the returned row reflects the committed update.
        task = await self._select_owned(task_id, user, refresh=True)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, task_id: int, user: Owner) -> None:
        """Delete one of the caller's tasks.

        Raises:
            TaskNotFoundError: if no task with this id belongs to the caller
        """
        result = await self.db.execute(
            delete(Task).where(Task.id == task_id, Task.user_id == user.id)
        )
        if result.rowcount == 0:
            raise TaskNotFoundError(task_id)
        await self.db.commit()

        logger.info("tasks.deleted", task_id=task_id, user_id=str(user.id))
