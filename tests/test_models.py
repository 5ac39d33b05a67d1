from datetime import date, datetime

import pytest

from erii.errors import InvalidPriority, InvalidTask
from erii.models import Kind, Priority, new_deadline, new_event, new_todo


def test_priority_rank_follows_declaration():
    assert [p.rank for p in Priority] == [0, 1, 2, 3, 4, 5]
    assert Priority.SS.rank < Priority.S.rank < Priority.D.rank


def test_priority_parse_is_case_insensitive():
    assert Priority.parse(" ss ") is Priority.SS
    assert Priority.parse("a") is Priority.A


def test_priority_parse_rejects_unknown():
    with pytest.raises(InvalidPriority):
        Priority.parse("E")


def test_todo_render_and_icon():
    t = new_todo("slain a dragon", Priority.S)
    assert t.name == "Todo"
    assert t.status_icon() == "[ ]"
    assert str(t) == "[T][ ] slain a dragon <S>"
    t.done = True
    assert t.render() == "[T][X] slain a dragon <S>"


def test_deadline_render_drops_time_of_day():
    t = new_deadline("submit report", datetime(2021, 9, 30, 18, 30), Priority.SS)
    assert t.kind is Kind.DEADLINE
    assert t.by == datetime(2021, 9, 30, 18, 30)
    assert str(t) == "[D][ ] submit report <SS> (by: Sep 30 2021)"


def test_event_render():
    t = new_event("project meeting", date(2021, 9, 30), date(2021, 10, 1), Priority.B)
    assert str(t) == "[E][ ] project meeting <B> (from: Sep 30 2021 to: Oct 01 2021)"


def test_description_is_stripped_and_required():
    assert new_todo("  read  ", Priority.C).description == "read"
    with pytest.raises(InvalidTask):
        new_todo("   ", Priority.C)


def test_constructor_rejects_non_priority():
    with pytest.raises(InvalidTask):
        new_todo("read", "S")


def test_deadline_must_be_after_now_when_given():
    now = datetime(2021, 9, 30, 18, 30)
    with pytest.raises(InvalidTask):
        new_deadline("late", now, Priority.A, now=now)
    assert new_deadline("ok", datetime(2021, 9, 30, 18, 31), Priority.A, now=now)
    # hydration path: no reference clock
    assert new_deadline("old", datetime(2000, 1, 1), Priority.A).by.year == 2000


def test_event_end_must_follow_start():
    with pytest.raises(InvalidTask):
        new_event("x", date(2021, 10, 1), date(2021, 10, 1), Priority.A)
    with pytest.raises(InvalidTask):
        new_event("x", date(2021, 10, 2), date(2021, 10, 1), Priority.A)


def test_event_start_must_be_after_today_when_given():
    with pytest.raises(InvalidTask):
        new_event("x", date(2021, 9, 30), date(2021, 10, 1), Priority.A, today=date(2021, 9, 30))
    t = new_event("x", date(2021, 10, 1), date(2021, 10, 2), Priority.A, today=date(2021, 9, 30))
    assert t.start == date(2021, 10, 1)


def test_all_kinds_share_one_completion_flag():
    t = new_event("x", date(2021, 10, 1), date(2021, 10, 2), Priority.A)
    assert t.completable
    t.done = True
    assert t.status_icon() == "[X]"
