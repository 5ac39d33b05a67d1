from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .errors import EriiError, InvalidTask, StorageError
from .models import Kind, Priority, Task, new_deadline, new_event, new_todo

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tasks (
    position    INTEGER PRIMARY KEY,
    kind        TEXT NOT NULL,
    description TEXT NOT NULL,
    priority    TEXT NOT NULL,
    done        INTEGER NOT NULL DEFAULT 0,
    due_at      TEXT, -- ISO date-time: YYYY-MM-DDTHH:MM (Deadline only)
    starts_on   TEXT, -- ISO date: YYYY-MM-DD (Event only)
    ends_on     TEXT  -- ISO date: YYYY-MM-DD (Event only)
);
"""

RECORD_FIELDS = ("kind", "description", "priority", "done", "due_at", "starts_on", "ends_on")


@contextmanager
def connect(db_path: Path) -> Iterator[sqlite3.Connection]:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def init_db(db_path: Path) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)


def _parse_iso(text: Optional[str], parse) -> Any:
    if text is None:
        return None
    try:
        return parse(text)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Corrupt stored value: {text!r}") from e


def task_to_record(task: Task) -> Dict[str, Any]:
    """Storage form of a task; independent of the display string."""
    return {
        "kind": task.kind.value,
        "description": task.description,
        "priority": task.priority.name,
        "done": bool(task.done),
        "due_at": task.by.isoformat(timespec="minutes") if task.by else None,
        "starts_on": task.start.isoformat() if task.start else None,
        "ends_on": task.end.isoformat() if task.end else None,
    }


def _parse_done(value: Any) -> bool:
    # SQLite hands back 0/1; JSON exports carry true/false.
    if value in (0, 1) and not isinstance(value, float):
        return bool(value)
    raise StorageError(f"Invalid done flag in record: {value!r}")


def record_to_task(record: Dict[str, Any]) -> Task:
    """Inverse of task_to_record. Builds through the model constructors, without a clock."""
    if not isinstance(record, dict):
        raise StorageError(f"Task record must be an object, got: {record!r}")
    try:
        kind = Kind(record.get("kind"))
    except ValueError as e:
        raise StorageError(f"Unknown task kind in record: {record.get('kind')!r}") from e
    try:
        priority = Priority.parse(str(record.get("priority", "")))
    except EriiError as e:
        raise StorageError(f"Unknown priority in record: {record.get('priority')!r}") from e

    description = record.get("description")
    if not isinstance(description, str):
        raise StorageError(f"Invalid description in record: {description!r}")
    by = _parse_iso(record.get("due_at"), datetime.fromisoformat)
    start = _parse_iso(record.get("starts_on"), date.fromisoformat)
    end = _parse_iso(record.get("ends_on"), date.fromisoformat)
    done = _parse_done(record.get("done", False))

    if kind is not Kind.DEADLINE and by is not None:
        raise StorageError(f"{kind.value} record carries a due date: {description!r}")
    if kind is not Kind.EVENT and (start is not None or end is not None):
        raise StorageError(f"{kind.value} record carries a date range: {description!r}")

    try:
        if kind is Kind.DEADLINE:
            task = new_deadline(description, by, priority)
        elif kind is Kind.EVENT:
            task = new_event(description, start, end, priority)
        else:
            task = new_todo(description, priority)
    except InvalidTask as e:
        raise StorageError(f"Invalid stored task: {e}") from e
    task.done = done
    return task


def _row_to_task(row: sqlite3.Row) -> Task:
    return record_to_task({name: row[name] for name in RECORD_FIELDS})


def save_tasks(db_path: Path, tasks: Iterable[Task]) -> None:
    """Replace the stored sequence with `tasks`, keeping their order."""
    records = [task_to_record(t) for t in tasks]
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.execute("DELETE FROM tasks")
        conn.executemany(
            """
            INSERT INTO tasks (position, kind, description, priority, done, due_at, starts_on, ends_on)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    position,
                    r["kind"],
                    r["description"],
                    r["priority"],
                    int(r["done"]),
                    r["due_at"],
                    r["starts_on"],
                    r["ends_on"],
                )
                for position, r in enumerate(records)
            ],
        )
    logger.debug("Saved %s tasks to %s", len(records), db_path)


def load_tasks(db_path: Path) -> List[Task]:
    if not db_path.exists():
        return []
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        rows = conn.execute("SELECT * FROM tasks ORDER BY position ASC").fetchall()
        tasks = [_row_to_task(r) for r in rows]
    logger.debug("Loaded %s tasks from %s", len(tasks), db_path)
    return tasks


def decode_json(raw: str) -> dict:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Not a valid JSON export: {e}") from e


def export_json(db_path: Path) -> dict:
    return {"tasks": [task_to_record(t) for t in load_tasks(db_path)]}


def import_json(db_path: Path, data: dict) -> int:
    """Replace stored tasks with the records in `data`. Returns the count."""
    records = data.get("tasks", []) if isinstance(data, dict) else None
    if not isinstance(records, list):
        raise StorageError("Expected an object with a \"tasks\" list.")
    tasks = [record_to_task(r) for r in records]
    save_tasks(db_path, tasks)
    return len(tasks)
