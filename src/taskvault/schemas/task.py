"""Pydantic schemas for tasks.

- TaskCreate: what you POST to create a task
- StatusChange: body for PATCH /tasks/:id/status
- TaskRead: what the API returns
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from taskvault.db.models import TaskStatus


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)


class StatusChange(BaseModel):
    """Any status may be set from any other."""
    status: TaskStatus


class TaskRead(BaseModel):
    id: int
    title: str
    description: str
    status: TaskStatus
    user_id: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
