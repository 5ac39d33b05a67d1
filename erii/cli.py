from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, TextIO, Tuple

from .config import default_db_path, default_log_path
from . import db
from .errors import EriiError
from .logging_setup import setup_logging
from .manager import TaskManager
from .models import Task, new_deadline, new_event, new_todo
from . import parser as parsing

logger = logging.getLogger(__name__)

RULE = "_" * 60


def _arg_type(parse: Callable) -> Callable:
    """Wrap a parser function so argparse reports its message."""

    def convert(value: str):
        try:
            return parse(value)
        except EriiError as e:
            raise argparse.ArgumentTypeError(str(e)) from e

    convert.__name__ = parse.__name__
    return convert


def _db_path_from_args(ns: argparse.Namespace) -> Path:
    if getattr(ns, "db", None):
        return Path(ns.db).expanduser().resolve()
    return default_db_path()


def _load_manager(path: Path) -> TaskManager:
    manager = TaskManager()
    for task in db.load_tasks(path):
        manager.load_task(task)
    return manager


def _save(path: Path, manager: TaskManager) -> None:
    db.save_tasks(path, manager.get_all_tasks())


def _print_numbered(pairs: Iterable[Tuple[int, Task]], out: TextIO) -> None:
    for number, task in pairs:
        print(f"{number}.{task}", file=out)


def _print_list(manager: TaskManager, out: TextIO) -> None:
    tasks = manager.list_tasks()
    if not tasks:
        print("\nYour list is empty.", file=out)
        return
    print("\nHere are the tasks in your list:", file=out)
    _print_numbered(enumerate(tasks, start=1), out)
    print(RULE, file=out)


def _print_added(task: Task, count: int, out: TextIO) -> None:
    print("\nGot it. I've added this task:", file=out)
    print(f"  {task}", file=out)
    print(f"\nNow you have {count} tasks in the list.", file=out)
    print(RULE, file=out)


def _print_removed(task: Task, count: int, out: TextIO) -> None:
    print("\nNoted. I've removed this task:", file=out)
    print(f"  {task}", file=out)
    print(f"\nNow you have {count} tasks in the list.", file=out)
    print(RULE, file=out)


def _print_completed(task: Task, out: TextIO) -> None:
    print("\nTask completed", file=out)
    print(task, file=out)


def _print_found(manager: TaskManager, keyword: str, out: TextIO) -> None:
    matches = manager.find_tasks_numbered(keyword)
    print("\nHere are the matching tasks in your list:", file=out)
    if matches:
        _print_numbered(matches, out)
    else:
        print("\nNo matching tasks found.", file=out)
    print(RULE, file=out)


def _print_on(manager: TaskManager, when: date, out: TextIO) -> None:
    tasks = manager.list_tasks_on(when)
    if isinstance(when, datetime):
        print(f"\nDeadline Tasks on {when.strftime('%d %b %Y %H:%M')}:", file=out)
        empty = "No deadline tasks found for this date and time."
    else:
        print(f"\nEvent Tasks on {when.strftime('%d %b %Y')}:", file=out)
        empty = "No event tasks found for this date."
    for task in tasks:
        print(task, file=out)
    if not tasks:
        print(empty, file=out)


def _sort(manager: TaskManager, by: str, out: TextIO) -> None:
    if by == "priority":
        manager.sort_list_by_priority()
    else:
        manager.sort_list_by_type()
    print(f"\nTasks sorted by {by}.", file=out)


def cmd_init(ns: argparse.Namespace) -> int:
    path = _db_path_from_args(ns)
    db.init_db(path)
    print(f"Initialized database at: {path}")
    return 0


def cmd_list(ns: argparse.Namespace) -> int:
    manager = _load_manager(_db_path_from_args(ns))
    _print_list(manager, sys.stdout)
    return 0


def _add(ns: argparse.Namespace, task: Task) -> int:
    path = _db_path_from_args(ns)
    manager = _load_manager(path)
    count = manager.add_task(task)
    _save(path, manager)
    _print_added(task, count, sys.stdout)
    return 0


def cmd_todo(ns: argparse.Namespace) -> int:
    return _add(ns, new_todo(ns.description, ns.priority))


def cmd_deadline(ns: argparse.Namespace) -> int:
    return _add(ns, new_deadline(ns.description, ns.by, ns.priority, now=datetime.now()))


def cmd_event(ns: argparse.Namespace) -> int:
    task = new_event(ns.description, ns.start, ns.end, ns.priority, today=date.today())
    return _add(ns, task)


def cmd_done(ns: argparse.Namespace) -> int:
    path = _db_path_from_args(ns)
    manager = _load_manager(path)
    task = manager.mark_task_as_done(parsing.parse_task_number(ns.number, len(manager)))
    _save(path, manager)
    _print_completed(task, sys.stdout)
    return 0


def cmd_delete(ns: argparse.Namespace) -> int:
    path = _db_path_from_args(ns)
    manager = _load_manager(path)
    task = manager.delete_task(parsing.parse_task_number(ns.number, len(manager)))
    _save(path, manager)
    _print_removed(task, len(manager), sys.stdout)
    return 0


def cmd_priority(ns: argparse.Namespace) -> int:
    path = _db_path_from_args(ns)
    manager = _load_manager(path)
    task = manager.set_priority(parsing.parse_task_number(ns.number, len(manager)), ns.priority)
    _save(path, manager)
    print(f"\nPriority updated:\n  {task}")
    return 0


def cmd_sort(ns: argparse.Namespace) -> int:
    path = _db_path_from_args(ns)
    manager = _load_manager(path)
    _sort(manager, ns.by, sys.stdout)
    _save(path, manager)
    return 0


def cmd_on(ns: argparse.Namespace) -> int:
    manager = _load_manager(_db_path_from_args(ns))
    _print_on(manager, ns.when, sys.stdout)
    return 0


def cmd_find(ns: argparse.Namespace) -> int:
    manager = _load_manager(_db_path_from_args(ns))
    _print_found(manager, ns.keyword, sys.stdout)
    return 0


def cmd_export(ns: argparse.Namespace) -> int:
    path = _db_path_from_args(ns)
    data = db.export_json(path)
    out = Path(ns.out).expanduser().resolve()
    out.write_text(json.dumps(data, indent=2), encoding="utf-8")
    print(f"Exported to: {out}")
    return 0


def cmd_import(ns: argparse.Namespace) -> int:
    path = _db_path_from_args(ns)
    data_path = Path(ns.file).expanduser().resolve()
    data = db.decode_json(data_path.read_text(encoding="utf-8"))
    count = db.import_json(path, data)
    print(f"Imported {count} tasks from: {data_path} into {path}")
    return 0


def cmd_shell(ns: argparse.Namespace) -> int:
    path = _db_path_from_args(ns)
    ControlPanel(_load_manager(path), path).run()
    return 0


MENU = """
How may I assist you today?
1. List tasks
2. Add a task
3. Add a deadline task
4. Add an event task
5. Mark a task as done
6. Delete a task
7. List tasks on a specific date
8. Search for a task by keyword
9. Sort tasks (by priority or type)
X. Exit
Enter the symbol corresponding to your choice: """


class ControlPanel:
    """Numbered menu loop over free-text input; saves after every change."""

    def __init__(
        self,
        manager: TaskManager,
        db_path: Path,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.manager = manager
        self.db_path = db_path
        self.stdin = stdin or sys.stdin
        self.out = stdout or sys.stdout
        self._actions = {
            "1": self._list,
            "2": self._add_todo,
            "3": self._add_deadline,
            "4": self._add_event,
            "5": self._mark_done,
            "6": self._delete,
            "7": self._search_by_date,
            "8": self._find,
            "9": self._sort,
        }

    def _ask(self, prompt: str) -> Optional[str]:
        print(prompt, file=self.out)
        line = self.stdin.readline()
        if not line:
            return None
        return line.strip()

    def run(self) -> None:
        while True:
            choice = self._ask(MENU)
            if choice is None:
                break
            if choice.upper() == "X":
                print("\nSaving changes...", file=self.out)
                _save(self.db_path, self.manager)
                print("\nThank you for using Erii. さよなら!", file=self.out)
                return
            action = self._actions.get(choice)
            if action is None:
                print("\nUnknown command. Please try again.", file=self.out)
                continue
            try:
                action()
            except EriiError as e:
                logger.debug("Menu action %s failed: %s", choice, e)
                print(f"\n{e}", file=self.out)
        _save(self.db_path, self.manager)

    def _list(self) -> None:
        _print_list(self.manager, self.out)

    def _add(self, prompt: str, parse: Callable[[str], Task]) -> None:
        line = self._ask(prompt)
        if line is None:
            return
        task = parse(line)
        count = self.manager.add_task(task)
        _save(self.db_path, self.manager)
        _print_added(task, count, self.out)

    def _add_todo(self) -> None:
        self._add(
            "\nPlease enter the task description and priority (e.g., slain a dragon /S):",
            parsing.parse_todo,
        )

    def _add_deadline(self) -> None:
        self._add(
            "\nPlease enter the deadline task description, deadline date and priority "
            "(e.g., submit report /by 2021-09-30 18:30 /SS):",
            parsing.parse_deadline,
        )

    def _add_event(self) -> None:
        self._add(
            "\nPlease enter the event description, start date, end date and priority "
            "(e.g., project meeting /from 2021-09-30 /to 2021-10-01 /S):",
            parsing.parse_event,
        )

    def _task_index(self, prompt: str) -> Optional[int]:
        line = self._ask(prompt)
        if line is None:
            return None
        return parsing.parse_task_number(line, len(self.manager))

    def _mark_done(self) -> None:
        index = self._task_index("\nPlease enter the task number to mark as done:")
        if index is None:
            return
        task = self.manager.mark_task_as_done(index)
        _save(self.db_path, self.manager)
        _print_completed(task, self.out)

    def _delete(self) -> None:
        index = self._task_index("\nChoose the task you want to delete:")
        if index is None:
            return
        task = self.manager.delete_task(index)
        _save(self.db_path, self.manager)
        _print_removed(task, len(self.manager), self.out)

    def _search_by_date(self) -> None:
        choice = self._ask(
            "\nPlease select the type of task to search:\n"
            "1. Deadline Task\n2. Event Task\nYour choice (1/2):"
        )
        if choice == "1":
            line = self._ask(
                "\nPlease enter the date and time in yyyy-MM-dd HH:mm format to list deadline tasks."
            )
            parse = parsing.parse_datetime
        elif choice == "2":
            line = self._ask("\nPlease enter the date in yyyy-MM-dd format to list event tasks.")
            parse = parsing.parse_date
        else:
            print("\nInvalid choice. Please enter 1 or 2.", file=self.out)
            return
        if line is None:
            return
        _print_on(self.manager, parse(line), self.out)

    def _find(self) -> None:
        keyword = self._ask("\nEnter a keyword to search for tasks:")
        if keyword is None:
            return
        _print_found(self.manager, keyword, self.out)

    def _sort(self) -> None:
        choice = self._ask("\nSort by:\n1. Priority\n2. Type\nYour choice (1/2):")
        if choice not in ("1", "2"):
            print("\nInvalid choice. Please enter 1 or 2.", file=self.out)
            return
        _sort(self.manager, "priority" if choice == "1" else "type", self.out)
        _save(self.db_path, self.manager)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="erii",
        description="Erii: a personal to-do, deadline and event tracker (Python + SQLite).",
    )
    p.add_argument(
        "--db",
        help="Path to SQLite DB (default: ~/.erii/erii.db or ERII_DB env var)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr.")
    sub = p.add_subparsers(dest="cmd", required=True)

    priority = _arg_type(parsing.parse_priority)

    s = sub.add_parser("init", help="Initialize the database.")
    s.set_defaults(func=cmd_init)

    s = sub.add_parser("list", help="List tasks.")
    s.set_defaults(func=cmd_list)

    s = sub.add_parser("todo", help="Add a to-do.")
    s.add_argument("description", help="What needs doing.")
    s.add_argument("-p", "--priority", type=priority, required=True, help="SS, S, A, B, C or D.")
    s.set_defaults(func=cmd_todo)

    s = sub.add_parser("deadline", help="Add a task with a due date and time.")
    s.add_argument("description", help="What needs doing.")
    s.add_argument("--by", type=_arg_type(parsing.parse_datetime), required=True,
                   help="Due date-time, 'YYYY-MM-DD HH:MM'.")
    s.add_argument("-p", "--priority", type=priority, required=True, help="SS, S, A, B, C or D.")
    s.set_defaults(func=cmd_deadline)

    s = sub.add_parser("event", help="Add an event spanning a date range.")
    s.add_argument("description", help="What is happening.")
    s.add_argument("--from", dest="start", type=_arg_type(parsing.parse_date), required=True,
                   help="Start date in YYYY-MM-DD.")
    s.add_argument("--to", dest="end", type=_arg_type(parsing.parse_date), required=True,
                   help="End date in YYYY-MM-DD.")
    s.add_argument("-p", "--priority", type=priority, required=True, help="SS, S, A, B, C or D.")
    s.set_defaults(func=cmd_event)

    s = sub.add_parser("done", help="Mark a task as done.")
    s.add_argument("number", help="Task number as shown by 'list'.")
    s.set_defaults(func=cmd_done)

    s = sub.add_parser("delete", help="Delete a task.")
    s.add_argument("number", help="Task number as shown by 'list'.")
    s.set_defaults(func=cmd_delete)

    s = sub.add_parser("priority", help="Change a task's priority.")
    s.add_argument("number", help="Task number as shown by 'list'.")
    s.add_argument("priority", type=priority, help="SS, S, A, B, C or D.")
    s.set_defaults(func=cmd_priority)

    s = sub.add_parser("sort", help="Reorder the list.")
    s.add_argument("by", choices=["priority", "type"])
    s.set_defaults(func=cmd_sort)

    s = sub.add_parser("on", help="Deadlines due at a date-time, or events on a date.")
    s.add_argument("when", type=_arg_type(parsing.parse_when),
                   help="'YYYY-MM-DD HH:MM' for deadlines, 'YYYY-MM-DD' for events.")
    s.set_defaults(func=cmd_on)

    s = sub.add_parser("find", help="Search task descriptions.")
    s.add_argument("keyword", help="Case-insensitive keyword.")
    s.set_defaults(func=cmd_find)

    s = sub.add_parser("export", help="Export tasks to JSON.")
    s.add_argument("--out", required=True, help="Output JSON file path.")
    s.set_defaults(func=cmd_export)

    s = sub.add_parser("import", help="Replace tasks with those in a JSON export.")
    s.add_argument("file", help="JSON file previously exported by erii export.")
    s.set_defaults(func=cmd_import)

    s = sub.add_parser("shell", help="Interactive menu.")
    s.set_defaults(func=cmd_shell)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    setup_logging(verbose=ns.verbose, log_file=default_log_path())
    try:
        return int(ns.func(ns))
    except EriiError as e:
        logger.debug("Command %s failed: %s", ns.cmd, e)
        print(str(e), file=sys.stderr)
        return 1
