from datetime import date, datetime
from pathlib import Path

import pytest

from erii import db
from erii.errors import StorageError
from erii.manager import TaskManager
from erii.models import Priority, new_deadline, new_event, new_todo


def _sample():
    done = new_todo("slain a dragon", Priority.S)
    done.done = True
    return [
        done,
        new_deadline("submit report", datetime(2021, 9, 30, 18, 30), Priority.SS),
        new_event("project meeting", date(2021, 9, 30), date(2021, 10, 2), Priority.B),
        new_todo("buy groceries", Priority.D),
    ]


def test_save_load_round_trip(tmp_path: Path):
    db_path = tmp_path / "t.db"
    tasks = _sample()
    db.save_tasks(db_path, tasks)

    loaded = db.load_tasks(db_path)
    assert loaded == tasks
    # keeps the minutes the display string drops
    assert loaded[1].by == datetime(2021, 9, 30, 18, 30)


def test_hydrated_manager_matches_saved_order(tmp_path: Path):
    db_path = tmp_path / "t.db"
    m = TaskManager()
    for t in _sample():
        m.add_task(t)
    m.sort_list_by_priority()
    db.save_tasks(db_path, m.get_all_tasks())

    m2 = TaskManager()
    for t in db.load_tasks(db_path):
        m2.load_task(t)
    assert m2.list_tasks() == m.list_tasks()


def test_save_replaces_previous_contents(tmp_path: Path):
    db_path = tmp_path / "t.db"
    db.save_tasks(db_path, _sample())
    db.save_tasks(db_path, [new_todo("only", Priority.A)])
    assert [t.description for t in db.load_tasks(db_path)] == ["only"]


def test_load_missing_file_is_empty(tmp_path: Path):
    assert db.load_tasks(tmp_path / "missing.db") == []


def test_record_is_independent_of_display():
    t = new_deadline("submit report", datetime(2021, 9, 30, 18, 30), Priority.SS)
    rec = db.task_to_record(t)
    assert rec == {
        "kind": "Deadline",
        "description": "submit report",
        "priority": "SS",
        "done": False,
        "due_at": "2021-09-30T18:30",
        "starts_on": None,
        "ends_on": None,
    }
    assert db.record_to_task(rec) == t


def test_record_to_task_rejects_bad_records():
    with pytest.raises(StorageError):
        db.record_to_task({"kind": "Chore", "description": "x", "priority": "A"})
    with pytest.raises(StorageError):
        db.record_to_task({"kind": "Todo", "description": "x", "priority": "Z"})
    with pytest.raises(StorageError):
        db.record_to_task({"kind": "Deadline", "description": "x", "priority": "A"})
    with pytest.raises(StorageError):
        db.record_to_task({"kind": "Event", "description": "x", "priority": "A",
                           "starts_on": "not-a-date", "ends_on": "2021-10-01"})


def test_export_import_json(tmp_path: Path):
    src = tmp_path / "a.db"
    dst = tmp_path / "b.db"
    db.save_tasks(src, _sample())

    data = db.export_json(src)
    assert len(data["tasks"]) == 4
    assert db.import_json(dst, data) == 4
    assert db.load_tasks(dst) == db.load_tasks(src)


def test_import_rejects_records_breaking_task_rules(tmp_path: Path):
    db_path = tmp_path / "t.db"
    db.save_tasks(db_path, [new_todo("keep me", Priority.A)])

    bad = [
        {"kind": "Todo", "description": "", "priority": "A", "done": False},
        {"kind": "Event", "description": "trip", "priority": "A",
         "starts_on": "2021-10-05", "ends_on": "2021-10-01"},
        {"kind": "Todo", "description": "x", "priority": "A", "due_at": "2021-09-30T18:30"},
        {"kind": "Todo", "description": "x", "priority": "A", "done": "false"},
        "not a record",
    ]
    for record in bad:
        with pytest.raises(StorageError):
            db.import_json(db_path, {"tasks": [record]})
    with pytest.raises(StorageError):
        db.import_json(db_path, {"tasks": "nope"})

    assert [t.description for t in db.load_tasks(db_path)] == ["keep me"]


def test_done_flag_accepts_bool_and_int():
    rec = {"kind": "Todo", "description": "x", "priority": "A"}
    assert db.record_to_task({**rec, "done": True}).done is True
    assert db.record_to_task({**rec, "done": 1}).done is True
    assert db.record_to_task({**rec, "done": 0}).done is False


def test_decode_json_wraps_syntax_errors():
    with pytest.raises(StorageError):
        db.decode_json("{not json")
