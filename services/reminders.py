"""
Reminder evaluation: turns task deadlines and reminder offsets into reminder/overdue notifications.

Deduplication is check-then-insert against the notifications collection, so only one
evaluator may run at a time (the scheduler enforces max_instances=1).
"""

from datetime import datetime, timedelta
from typing import List, Optional

from config import config
from constants import TaskStatus, NotificationTypes
from logging_config import get_logger
from models.notification import ReminderNotification, OverdueNotification, NotificationBase
from utils.time import utcnow

logger = get_logger("reminders")


def format_time_remaining(minutes: int) -> str:
    """Human-readable offset: whole days from 1440, whole hours from 60, else minutes."""
    if minutes >= 1440:
        days = minutes // 1440
        return f"{days} {'day' if days == 1 else 'days'}"
    if minutes >= 60:
        hours = minutes // 60
        return f"{hours} {'hour' if hours == 1 else 'hours'}"
    return f"{minutes} {'minute' if minutes == 1 else 'minutes'}"


def is_reminder_due(now: datetime, reminder_time: datetime, grace_minutes: int) -> bool:
    """True from the fire time up to and including `grace_minutes` after it."""
    elapsed = now - reminder_time
    return timedelta(0) <= elapsed <= timedelta(minutes=grace_minutes)


async def _reminder_exists(db, user_id: str, task_id: str, offset: int) -> bool:
    existing = await db.notifications.find_one({
        "user_id": user_id,
        "task_id": task_id,
        "type": NotificationTypes.REMINDER,
        "reminder_offset": offset,
    })
    return existing is not None


async def _overdue_exists(db, user_id: str, task_id: str) -> bool:
    existing = await db.notifications.find_one({
        "user_id": user_id,
        "task_id": task_id,
        "type": NotificationTypes.OVERDUE,
    })
    return existing is not None


async def check_and_create_reminders(db, now: Optional[datetime] = None, grace_minutes: Optional[int] = None) -> List[NotificationBase]:
    """
    Scan open tasks and insert the reminder and overdue notifications that are due now
    and have not been created before. Returns the newly inserted notifications.
    """
    now = now or utcnow()
    grace = config.REMINDER_GRACE_MINUTES if grace_minutes is None else grace_minutes

    tasks = await db.tasks.find({
        "status": {"$ne": TaskStatus.DONE},
        "deadline": {"$ne": None},
    }).to_list(None)

    staged: List[NotificationBase] = []

    for task in tasks:
        deadline = task.get("deadline")
        offsets = task.get("reminder_offsets") or []
        # Preserve order, drop repeated assignees
        assignees = list(dict.fromkeys(str(uid) for uid in (task.get("assigned_team_members") or [])))
        if not deadline or not offsets or not assignees:
            continue

        task_id = task["id"]
        title = task.get("title", "")

        for offset in offsets:
            try:
                reminder_time = deadline - timedelta(minutes=offset)
            except (OverflowError, TypeError):
                logger.warning(
                    f"Skipping unusable reminder offset on task {task_id}",
                    extra={"data": {"task_id": task_id, "offset": offset}}
                )
                continue
            if not is_reminder_due(now, reminder_time, grace):
                continue

            for user_id in assignees:
                if await _reminder_exists(db, user_id, task_id, offset):
                    continue
                staged.append(ReminderNotification(
                    user_id=user_id,
                    task_id=task_id,
                    reminder_offset=offset,
                    message=f'Task "{title}" is due in {format_time_remaining(offset)}',
                    scheduled_for=reminder_time,
                ))

        if now > deadline:
            for user_id in assignees:
                if await _overdue_exists(db, user_id, task_id):
                    continue
                staged.append(OverdueNotification(
                    user_id=user_id,
                    task_id=task_id,
                    message=f'Task "{title}" is now overdue!',
                    scheduled_for=deadline,
                ))

    if staged:
        await db.notifications.insert_many([n.model_dump() for n in staged])
        logger.info(
            f"Created {len(staged)} reminder notification(s)",
            extra={"data": {
                "reminder": sum(1 for n in staged if n.type == NotificationTypes.REMINDER),
                "overdue": sum(1 for n in staged if n.type == NotificationTypes.OVERDUE),
                "tasks_scanned": len(tasks),
            }}
        )
    else:
        logger.debug(f"No reminders due", extra={"data": {"tasks_scanned": len(tasks)}})

    return staged
