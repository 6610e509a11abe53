"""
Task Registry - ordered in-memory set of tasks with a selection pointer.
"""

import logging
from typing import List, Optional

from timearc.domain.errors import EmptyTaskName, LastTaskDeletion, TaskNotFound
from timearc.domain.models import Task

logger = logging.getLogger(__name__)


class TaskRegistry:
    """
    Owns the task list. Never empty; the selected index is always valid.
    Duplicate names are allowed.
    """

    def __init__(self, default_task_name: str = "Default"):
        self._tasks: List[Task] = [Task(name=self.clean_name(default_task_name))]
        self._selected_index: int = 0

    @staticmethod
    def clean_name(name: Optional[str]) -> str:
        """Trim a task name, raising EmptyTaskName when nothing is left"""
        cleaned = (name or "").strip()
        if not cleaned:
            raise EmptyTaskName("Task name must not be empty")
        return cleaned

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    @property
    def names(self) -> List[str]:
        return [t.name for t in self._tasks]

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def selected(self) -> Task:
        return self._tasks[self._selected_index]

    def __len__(self) -> int:
        return len(self._tasks)

    def index_of(self, task_id: str) -> int:
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                return idx
        raise TaskNotFound(task_id)

    def get(self, task_id: str) -> Task:
        return self._tasks[self.index_of(task_id)]

    def select(self, task_id: str) -> Task:
        """Point the selection at task_id and return that task"""
        self._selected_index = self.index_of(task_id)
        return self.selected

    def add_task(self, name: str) -> Task:
        """
        Append a task and select it.

        Raises:
            EmptyTaskName: name is empty or whitespace only
        """
        task = Task(name=self.clean_name(name))
        self._tasks.append(task)
        self._selected_index = len(self._tasks) - 1
        logger.debug(f"Added task {task.name!r} ({task.id})")
        return task

    def rename_task(self, task_id: str, name: str) -> Task:
        """Rename in place. Ledger entries keep the old name."""
        task = self.get(task_id)
        task.name = self.clean_name(name)
        return task

    def delete_task(self, task_id: str) -> Task:
        """
        Remove a task, keeping the selection on a valid index.

        Deleting the selected task moves the selection to the previous one;
        deleting an earlier task keeps the same task selected.

        Raises:
            LastTaskDeletion: only one task remains
            TaskNotFound: no such task
        """
        idx = self.index_of(task_id)
        if len(self._tasks) <= 1:
            raise LastTaskDeletion("Cannot delete the last remaining task")

        removed = self._tasks.pop(idx)
        if idx < self._selected_index or (idx == self._selected_index and idx > 0):
            self._selected_index -= 1
        self._selected_index = min(self._selected_index, len(self._tasks) - 1)
        logger.debug(f"Deleted task {removed.name!r}; selected index now {self._selected_index}")
        return removed
