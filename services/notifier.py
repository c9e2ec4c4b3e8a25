"""
Event-driven notifications for comments, mentions and task updates.

Each call is a one-off event, so notifications are written straight away with no
dedup check. Emailable ones (updates) are later picked up by the outbox.
"""

from typing import Iterable, List, Optional

from constants import MESSAGE_SNIPPET_LENGTH
from logging_config import get_logger
from models.notification import CommentNotification, MentionNotification, UpdateNotification, NotificationBase
from utils.mentions import extract_handles, local_part
from utils.time import utcnow

logger = get_logger("notifier")


def _unique(ids: Iterable) -> List[str]:
    return list(dict.fromkeys(str(i) for i in ids if i))


async def _author_name(db, author_id: str) -> str:
    author = await db.users.find_one({"id": str(author_id)}, {"name": 1})
    return (author or {}).get("name") or "Someone"


async def _project_owner_ids(db, task: dict) -> List[str]:
    """
    Managers to loop in on a task: the task's creator, plus the owning project's
    creator and managers when the project resolves.
    """
    owners = [task.get("created_by")]
    project_id = task.get("assigned_project")
    if project_id:
        project = await db.projects.find_one({"id": project_id}, {"created_by": 1, "managers": 1})
        if project:
            owners += [project.get("created_by"), *(project.get("managers") or [])]
    return _unique(owners)


async def _insert(db, notifications: List[NotificationBase]) -> List[NotificationBase]:
    await db.notifications.insert_many([n.model_dump() for n in notifications], ordered=False)
    return notifications


async def create_comment_notifications(
    db,
    task_id: str,
    comment_id: Optional[str],
    author_id: str,
    comment_body: str,
    exclude_user_ids: Iterable[str] = (),
) -> List[NotificationBase]:
    """
    Notify the task's assignees and project owner that `author_id` commented.

    `exclude_user_ids` only decides whether anyone is left to notify; when someone is,
    every recipient except the author is written, excluded ids included.
    """
    task = await db.tasks.find_one({"id": task_id}, {"assigned_team_members": 1, "title": 1, "assigned_project": 1, "created_by": 1})
    if not task:
        return []

    author_id = str(author_id)
    recipients = [
        uid for uid in _unique([*(task.get("assigned_team_members") or []), *await _project_owner_ids(db, task)])
        if uid != author_id
    ]
    excluded = {author_id, *(str(uid) for uid in exclude_user_ids or ())}
    if not [uid for uid in recipients if uid not in excluded]:
        return []

    author_name = await _author_name(db, author_id)
    message = f'{author_name} commented on "{task.get("title", "")}": {(comment_body or "")[:MESSAGE_SNIPPET_LENGTH]}'
    now = utcnow()

    created = await _insert(db, [
        CommentNotification(user_id=uid, task_id=task_id, comment_id=comment_id, message=message, scheduled_for=now)
        for uid in recipients
    ])
    logger.info(f"Comment notifications created", extra={"data": {"task_id": task_id, "recipients": len(created)}})
    return created


async def create_mention_notifications(
    db,
    task_id: str,
    comment_id: str,
    author_id: str,
    comment_body: str,
) -> List[NotificationBase]:
    """Notify every user mentioned in the comment, except its author."""
    comment = await db.comments.find_one({"id": comment_id}, {"mentions": 1})
    task = await db.tasks.find_one({"id": task_id}, {"title": 1})
    if not comment or not task:
        return []

    author_id = str(author_id)
    recipients = [uid for uid in _unique(comment.get("mentions") or []) if uid != author_id]
    if not recipients:
        return []

    author_name = await _author_name(db, author_id)
    message = f'{author_name} mentioned you on "{task.get("title", "")}": {(comment_body or "")[:MESSAGE_SNIPPET_LENGTH]}'
    now = utcnow()

    created = await _insert(db, [
        MentionNotification(user_id=uid, task_id=task_id, comment_id=comment_id, message=message, scheduled_for=now)
        for uid in recipients
    ])
    logger.info(f"Mention notifications created", extra={"data": {"task_id": task_id, "recipients": len(created)}})
    return created


async def create_update_notifications(db, task_id: str, author_id: str) -> List[NotificationBase]:
    """Notify the task's assignees (except the editor) that the task changed."""
    task = await db.tasks.find_one({"id": task_id}, {"assigned_team_members": 1, "title": 1})
    if not task:
        return []

    author_id = str(author_id)
    recipients = [uid for uid in _unique(task.get("assigned_team_members") or []) if uid != author_id]
    if not recipients:
        return []

    author_name = await _author_name(db, author_id)
    message = f'{author_name} updated "{task.get("title", "")}".'
    now = utcnow()

    created = await _insert(db, [
        UpdateNotification(user_id=uid, task_id=task_id, message=message, scheduled_for=now)
        for uid in recipients
    ])
    logger.info(f"Update notifications created", extra={"data": {"task_id": task_id, "recipients": len(created)}})
    return created


async def resolve_mention_user_ids(db, task_id: str, text: str) -> List[str]:
    """
    Map @handles in `text` to users on the task (creator + assignees) whose
    email local part matches the handle.
    """
    handles = extract_handles(text)
    if not handles:
        return []

    task = await db.tasks.find_one({"id": task_id}, {"created_by": 1, "assigned_team_members": 1})
    if not task:
        return []

    member_ids = _unique([task.get("created_by"), *(task.get("assigned_team_members") or [])])
    if not member_ids:
        return []

    members = await db.users.find({"id": {"$in": member_ids}}, {"id": 1, "email": 1}).to_list(None)
    resolved = []
    for member in members:
        handle = local_part(member.get("email"))
        if handle and handle in handles and member["id"] not in resolved:
            resolved.append(member["id"])
    return resolved
