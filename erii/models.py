from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional

from .errors import InvalidPriority, InvalidTask

DISPLAY_DATE_FORMAT = "%b %d %Y"  # e.g. "Sep 30 2021"


class Priority(Enum):
    """Urgency levels, most urgent first. Rank is declaration order."""

    SS = "SS"
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"

    @property
    def rank(self) -> int:
        return _PRIORITY_ORDER.index(self)

    @classmethod
    def parse(cls, text: str) -> Priority:
        key = (text or "").strip().upper()
        try:
            return cls[key]
        except KeyError:
            raise InvalidPriority(text) from None

    def __str__(self) -> str:
        return self.value


_PRIORITY_ORDER = tuple(Priority)


class Kind(Enum):
    # Values double as the type tag used by sort-by-type.
    TODO = "Todo"
    DEADLINE = "Deadline"
    EVENT = "Event"


@dataclass
class Task:
    """
    One tracked task. Common fields plus the payload of its kind:
      Deadline -> by
      Event    -> start, end
    """

    kind: Kind
    description: str
    priority: Priority
    done: bool = False
    by: Optional[datetime] = None
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def completable(self) -> bool:
        return self.kind in COMPLETABLE_KINDS

    def status_icon(self) -> str:
        return "[X]" if self.done else "[ ]"

    def render(self) -> str:
        return RENDERERS[self.kind](self)

    def __str__(self) -> str:
        return self.render()


def _render_todo(task: Task) -> str:
    return f"[T]{task.status_icon()} {task.description} <{task.priority}>"


def _render_deadline(task: Task) -> str:
    # Display drops the time of day; the stored record keeps it.
    by = task.by.strftime(DISPLAY_DATE_FORMAT) if task.by else "?"
    return f"[D]{task.status_icon()} {task.description} <{task.priority}> (by: {by})"


def _render_event(task: Task) -> str:
    start = task.start.strftime(DISPLAY_DATE_FORMAT) if task.start else "?"
    end = task.end.strftime(DISPLAY_DATE_FORMAT) if task.end else "?"
    return (
        f"[E]{task.status_icon()} {task.description} <{task.priority}> "
        f"(from: {start} to: {end})"
    )


RENDERERS: Dict[Kind, Callable[[Task], str]] = {
    Kind.TODO: _render_todo,
    Kind.DEADLINE: _render_deadline,
    Kind.EVENT: _render_event,
}

COMPLETABLE_KINDS: FrozenSet[Kind] = frozenset({Kind.TODO, Kind.DEADLINE, Kind.EVENT})


def _clean_description(description: str) -> str:
    text = (description or "").strip()
    if not text:
        raise InvalidTask("Task description must not be empty.")
    return text


def _check_priority(priority: Priority) -> Priority:
    if not isinstance(priority, Priority):
        raise InvalidTask(f"Invalid priority: {priority!r}")
    return priority


def new_todo(description: str, priority: Priority) -> Task:
    return Task(
        kind=Kind.TODO,
        description=_clean_description(description),
        priority=_check_priority(priority),
    )


def new_deadline(
    description: str,
    by: datetime,
    priority: Priority,
    *,
    now: Optional[datetime] = None,
) -> Task:
    """
    Build a Deadline. When `now` is given the due date-time must be after it;
    hydration from storage leaves it out so past deadlines still load.
    """
    if by is None:
        raise InvalidTask("A deadline needs a due date and time.")
    if now is not None and not by > now:
        raise InvalidTask("The provided date and time must be after the current time.")
    return Task(
        kind=Kind.DEADLINE,
        description=_clean_description(description),
        priority=_check_priority(priority),
        by=by.replace(second=0, microsecond=0),
    )


def new_event(
    description: str,
    start: date,
    end: date,
    priority: Priority,
    *,
    today: Optional[date] = None,
) -> Task:
    if start is None or end is None:
        raise InvalidTask("An event needs both a start date and an end date.")
    if today is not None and not start > today:
        raise InvalidTask("The provided date must be after the current date.")
    if not end > start:
        raise InvalidTask("The end date must be after the start date.")
    return Task(
        kind=Kind.EVENT,
        description=_clean_description(description),
        priority=_check_priority(priority),
        start=start,
        end=end,
    )
