from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from .errors import InvalidIndex, ParseError
from .models import Priority, Task, new_deadline, new_event, new_todo

DATETIME_FORMAT = "%Y-%m-%d %H:%M"
DATE_FORMAT = "%Y-%m-%d"

_TODO_SPLIT = re.compile(r" ?/ ?")
_DEADLINE_SPLIT = re.compile(r" ?/by | ?/ ?")
_EVENT_SPLIT = re.compile(r" ?/from | ?/to | ?/ ?")


def parse_priority(text: str) -> Priority:
    return Priority.parse(text)


def parse_datetime(text: str) -> datetime:
    try:
        return datetime.strptime(text.strip(), DATETIME_FORMAT)
    except ValueError as e:
        raise ParseError(
            f"Invalid date and time '{text}'. Please enter in yyyy-MM-dd HH:mm format."
        ) from e


def parse_date(text: str) -> date:
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise ParseError(
            f"Invalid date '{text}'. Please enter the date in yyyy-MM-dd format."
        ) from e


def parse_when(text: str):
    """Full date-time when a time is present, otherwise a plain date."""
    text = text.strip()
    if " " in text:
        return parse_datetime(text)
    return parse_date(text)


def parse_todo(text: str) -> Task:
    """'slain a dragon /S'"""
    parts = _TODO_SPLIT.split(text.strip())
    if len(parts) < 2 or not parts[1].strip():
        raise ParseError(
            "Incorrect format. Please ensure the task description is followed by "
            "'/' and a priority value (e.g., 'slain a dragon /SS')."
        )
    return new_todo(parts[0], parse_priority(parts[1]))


def parse_deadline(text: str, now: Optional[datetime] = None) -> Task:
    """'submit report /by 2021-09-30 18:30 /SS'"""
    parts = _DEADLINE_SPLIT.split(text.strip())
    if len(parts) < 3:
        raise ParseError(
            "Incorrect format. Please follow the correct input format "
            "'description /by yyyy-MM-dd HH:mm /priority'."
        )
    by = parse_datetime(parts[1])
    priority = parse_priority(parts[2])
    return new_deadline(parts[0], by, priority, now=now or datetime.now())


def parse_event(text: str, today: Optional[date] = None) -> Task:
    """'project meeting /from 2021-09-30 /to 2021-10-01 /S'"""
    parts = _EVENT_SPLIT.split(text.strip())
    if len(parts) < 4:
        raise ParseError(
            "Incorrect format. Please ensure the task description is followed by "
            "'/from', a start date, '/to', an end date, and then a priority value."
        )
    start = parse_date(parts[1])
    end = parse_date(parts[2])
    priority = parse_priority(parts[3])
    return new_event(parts[0], start, end, priority, today=today or date.today())


def parse_task_number(text: str, size: int) -> int:
    """1-based task number -> 0-based index."""
    try:
        index = int(text.strip().rstrip(".")) - 1
    except ValueError:
        raise ParseError("Please enter a valid task number.") from None
    if index < 0 or index >= size:
        raise InvalidIndex(index, size)
    return index
