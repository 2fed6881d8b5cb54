"""Generation task state tracking."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..errors import InvalidTransitionError
from .request import GenerationRequest
from .result import GenerationResult


class TaskStatus(str, Enum):
    """Task status enum."""
    PENDING = "pending"
    GENERATING = "generating"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.SUCCESS, TaskStatus.ERROR)


_ALLOWED_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.GENERATING},
    TaskStatus.GENERATING: {TaskStatus.SUCCESS, TaskStatus.ERROR},
    TaskStatus.SUCCESS: set(),
    TaskStatus.ERROR: set(),
}


class GenerationTask(BaseModel):
    """Lifecycle record of one generation request."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Task identifier")
    request: GenerationRequest = Field(..., description="What was asked for")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Current state")
    progress_message: str = Field(default="Waiting in queue...", description="Latest progress text")
    result: Optional[GenerationResult] = Field(None, description="Set on success")
    error: Optional[str] = Field(None, description="Set on error, shown verbatim")
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    class Config:
        """Pydantic config."""
        frozen = False

    def transition(self, status: TaskStatus) -> None:
        """Move to ``status``, refusing anything but pending→generating→terminal."""
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Task {self.id}: cannot move from {self.status.value} to {status.value}"
            )
        self.status = status
        self.updated_at = datetime.now()

    def report(self, message: str) -> None:
        """Record a progress message while generating."""
        if self.status is not TaskStatus.GENERATING:
            raise InvalidTransitionError(
                f"Task {self.id}: progress reported while {self.status.value}"
            )
        self.progress_message = message
        self.updated_at = datetime.now()

    def succeed(self, result: GenerationResult) -> None:
        self.transition(TaskStatus.SUCCESS)
        self.result = result

    def fail(self, error: str) -> None:
        self.transition(TaskStatus.ERROR)
        self.error = error
        self.progress_message = "Failed"
