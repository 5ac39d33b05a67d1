from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Tuple, Union

from .errors import InvalidIndex, UnsupportedOperation
from .models import Kind, Priority, Task

logger = logging.getLogger(__name__)


class TaskManager:
    """
    Ordered, in-memory task list.

    Insertion order is kept unless one of the sort operations is called.
    Index arguments are 0-based; callers convert from user-facing numbers.
    Failures raise an EriiError and leave the list untouched.
    """

    def __init__(self) -> None:
        self._tasks: List[Task] = []

    def __len__(self) -> int:
        return len(self._tasks)

    def list_size(self) -> int:
        return len(self._tasks)

    # ---- mutation ----

    def add_task(self, task: Task) -> int:
        self._tasks.append(task)
        logger.debug("Task added kind=%s priority=%s total=%s", task.name, task.priority, len(self._tasks))
        return len(self._tasks)

    def load_task(self, task: Task) -> None:
        """Hydrate from storage; no notification."""
        self._tasks.append(task)

    def sort_list_by_priority(self) -> None:
        self._tasks.sort(key=lambda t: t.priority.rank)
        logger.debug("Tasks sorted by priority")

    def sort_list_by_type(self) -> None:
        self._tasks.sort(key=lambda t: t.name)
        logger.debug("Tasks sorted by type")

    def mark_task_as_done(self, index: int) -> Task:
        task = self._get(index)
        if not task.completable:
            raise UnsupportedOperation("mark as done", task.name)
        task.done = True
        logger.debug("Task completed index=%s kind=%s", index, task.name)
        return task

    def set_priority(self, index: int, priority: Priority) -> Task:
        task = self._get(index)
        task.priority = priority
        logger.debug("Task priority changed index=%s priority=%s", index, priority)
        return task

    def delete_task(self, index: int) -> Task:
        self._check_index(index)
        task = self._tasks.pop(index)
        logger.debug("Task deleted index=%s kind=%s total=%s", index, task.name, len(self._tasks))
        return task

    # ---- queries ----

    def list_tasks(self) -> List[Task]:
        return list(self._tasks)

    def get_all_tasks(self) -> List[Task]:
        """Snapshot of the list; changing it does not affect the manager."""
        return list(self._tasks)

    def list_tasks_on(self, when: Union[datetime, date]) -> List[Task]:
        """
        datetime -> Deadlines due exactly at that instant.
        date     -> Events whose [start, end] range contains that day.
        """
        # datetime is a subclass of date, so it must be checked first.
        if isinstance(when, datetime):
            return [
                t for t in self._tasks
                if t.kind is Kind.DEADLINE and t.by == when
            ]
        return [
            t for t in self._tasks
            if t.kind is Kind.EVENT and t.start <= when <= t.end
        ]

    def find_tasks(self, keyword: str) -> List[Task]:
        return [task for _, task in self.find_tasks_numbered(keyword)]

    def find_tasks_numbered(self, keyword: str) -> List[Tuple[int, Task]]:
        """Matches paired with their 1-based list numbers."""
        needle = keyword.lower()
        return [
            (i, t) for i, t in enumerate(self._tasks, start=1)
            if needle in t.description.lower()
        ]

    # ---- helpers ----

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._tasks):
            raise InvalidIndex(index, len(self._tasks))

    def _get(self, index: int) -> Task:
        self._check_index(index)
        return self._tasks[index]
