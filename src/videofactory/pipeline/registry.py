"""In-memory task registry."""

import logging
from typing import Dict, List

from ..models import GenerationRequest, GenerationResult, GenerationTask, TaskStatus

logger = logging.getLogger(__name__)


class TaskRegistry:
    """Ordered queue of generation tasks.

    Callers may only append requests and read snapshots. All mutation goes
    through the single `TaskWriter` handed out by `claim_writer`, which the
    task orchestrator takes when it is constructed.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, GenerationTask] = {}
        self._writer_claimed = False

    def submit(self, request: GenerationRequest) -> str:
        """Queue ``request`` as a pending task and return its id."""
        task = GenerationTask(request=request)
        self._tasks[task.id] = task
        logger.debug(f"Queued task {task.id}: '{request.prompt[:60]}'")
        return task.id

    def get(self, task_id: str) -> GenerationTask:
        """Return a snapshot of one task.

        Raises:
            KeyError: If no task has this id.
        """
        return self._tasks[task_id].model_copy(deep=True)

    def tasks(self) -> List[GenerationTask]:
        return [task.model_copy(deep=True) for task in self._tasks.values()]

    def pending_ids(self) -> List[str]:
        return [task.id for task in self._tasks.values() if task.status is TaskStatus.PENDING]

    def has_generating(self) -> bool:
        return any(task.status is TaskStatus.GENERATING for task in self._tasks.values())

    def evict_finished(self) -> int:
        """Drop tasks in a terminal state; return how many were removed."""
        finished = [task_id for task_id, task in self._tasks.items() if task.status.is_terminal]
        for task_id in finished:
            del self._tasks[task_id]
        return len(finished)

    def claim_writer(self) -> "TaskWriter":
        """Hand out the only mutable handle on this registry.

        Raises:
            RuntimeError: If a writer was already claimed.
        """
        if self._writer_claimed:
            raise RuntimeError("Task registry already has a writer")
        self._writer_claimed = True
        return TaskWriter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks


class TaskWriter:
    """Mutating access to the tasks of one registry, addressed by task id."""

    def __init__(self, tasks: Dict[str, GenerationTask]) -> None:
        self._tasks = tasks

    def start(self, task_id: str) -> GenerationRequest:
        task = self._tasks[task_id]
        task.transition(TaskStatus.GENERATING)
        task.progress_message = "Starting..."
        return task.request

    def report(self, task_id: str, message: str) -> None:
        self._tasks[task_id].report(message)

    def succeed(self, task_id: str, result: GenerationResult) -> None:
        self._tasks[task_id].succeed(result)

    def fail(self, task_id: str, error: str) -> None:
        self._tasks[task_id].fail(error)

    def snapshot(self, task_id: str) -> GenerationTask:
        return self._tasks[task_id].model_copy(deep=True)
