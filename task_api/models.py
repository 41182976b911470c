"""Pydantic models for the Task Store API.

Python attributes are snake_case; the JSON wire format is camelCase
(``createdAt``, ``inProgress``, ``byPriority``).
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class TaskStatus(str, Enum):
    """Lifecycle status of a task. Any value may move to any other."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CamelModel(BaseModel):
    """Base for response models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(BaseModel):
    """Request body for creating a new task.

    Fields are optional here so that missing values surface as a
    ``TaskValidationError`` from the store rather than a schema error.
    """

    title: str | None = Field(default=None, description="The task title (required)")
    description: str | None = Field(default=None, description="The task description (required)")
    priority: str | None = Field(
        default=None,
        description="low, medium or high (case-insensitive); defaults to medium",
    )


class TaskUpdate(BaseModel):
    """Request body for updating an existing task.

    Empty strings are treated the same as omitted fields.
    """

    title: str | None = Field(default=None, description="New title for the task")
    description: str | None = Field(default=None, description="New description for the task")
    status: str | None = Field(
        default=None,
        description="pending, in-progress or completed (case-insensitive)",
    )
    priority: str | None = Field(
        default=None,
        description="low, medium or high (case-insensitive)",
    )


class Task(CamelModel):
    """A task record held by the store. Immutable; updates replace the record."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Unique identifier for the task")
    title: str = Field(..., description="The task title")
    description: str = Field(..., description="The task description")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Current status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    created_at: datetime = Field(..., description="When the task was created")
    updated_at: datetime = Field(..., description="When the task was last updated")


class PriorityCounts(CamelModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class TaskStats(CamelModel):
    """Task counts by status and by priority."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    by_priority: PriorityCounts = Field(default_factory=PriorityCounts)


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every endpoint. Unset fields are dropped from the JSON."""

    success: bool = True
    message: str | None = None
    count: int | None = None
    data: T | None = None


class ErrorResponse(BaseModel):
    """Envelope for failed requests."""

    success: bool = False
    message: str


class HealthResponse(BaseModel):
    """Response from the health check endpoint."""

    success: bool = True
    message: str = "API is running!"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
