import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError

from constants import DEFAULT_REMINDERS_MIN
from models.notification import parse_notification, ReminderNotification, OverdueNotification, CommentNotification
from models.task import TaskModel, normalize_reminder_offsets

DEADLINE = datetime(2026, 3, 10, 17, 0, 0)


@pytest.mark.parametrize("raw, expected", [
    ([1440, 60, 1440, 10080], [10080, 1440, 60]),
    ("[30, 60]", [60, 30]),
    ("7200, 1440, abc", [7200, 1440]),
    (45, [45]),
    ([0, -5, "15", None], [15]),
    ([10**10, 525601, 525600], [525600]),
    (None, []),
])
def test_normalize_reminder_offsets(raw, expected):
    assert normalize_reminder_offsets(raw) == expected


def test_task_with_deadline_adopts_default_offsets():
    task = TaskModel(title="T", created_by="mgr", deadline=DEADLINE)
    assert task.reminder_offsets == DEFAULT_REMINDERS_MIN


def test_task_keeps_explicit_offsets_sorted():
    task = TaskModel(title="T", created_by="mgr", deadline=DEADLINE, reminder_offsets="60,1440")
    assert task.reminder_offsets == [1440, 60]


def test_task_without_deadline_drops_offsets():
    task = TaskModel(title="T", created_by="mgr", reminder_offsets=[60])
    assert task.reminder_offsets == []


def test_task_deadline_stored_as_naive_utc():
    aware = datetime(2026, 3, 10, 19, 0, tzinfo=timezone(timedelta(hours=2)))
    task = TaskModel(title="T", created_by="mgr", deadline=aware)
    assert task.deadline == DEADLINE
    assert task.deadline.tzinfo is None


def test_parse_notification_picks_variant():
    base = {"user_id": "u", "task_id": "t", "message": "m", "scheduled_for": DEADLINE}

    reminder = parse_notification({**base, "type": "reminder", "reminder_offset": 60, "_id": "abc"})
    overdue = parse_notification({**base, "type": "overdue"})
    comment = parse_notification({**base, "type": "comment", "comment_id": "c1"})

    assert isinstance(reminder, ReminderNotification) and reminder.reminder_offset == 60
    assert isinstance(overdue, OverdueNotification)
    assert isinstance(comment, CommentNotification) and comment.comment_id == "c1"


def test_reminder_requires_offset():
    with pytest.raises(ValidationError):
        parse_notification({"type": "reminder", "user_id": "u", "task_id": "t", "message": "m"})


def test_unknown_type_rejected():
    with pytest.raises(ValidationError):
        parse_notification({"type": "digest", "user_id": "u", "task_id": "t", "message": "m"})


def test_notification_defaults():
    n = OverdueNotification(user_id="u", task_id="t", message="m")
    dumped = n.model_dump()
    assert dumped["type"] == "overdue"
    assert dumped["read"] is False and dumped["sent"] is False
    assert "reminder_offset" not in dumped
