from datetime import datetime
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from constants import TaskStatus, EMAILED_NOTIFICATION_TYPES
from logging_config import get_logger
from utils.email import MailSender, render_notification_email
from utils.time import utcnow

logger = get_logger("outbox")


class OutboxSender:
    """
    Drains due, unsent notifications through a MailSender.
    Each notification is sent and marked independently: a failed send leaves it unsent
    for the next run and never stops the rest of the batch.
    """

    def __init__(self, db, mailer: MailSender):
        self.db = db
        self.mailer = mailer

    async def _due_notifications(self, now: datetime) -> List[dict]:
        return await self.db.notifications.find({
            "sent": False,
            "read": False,
            "type": {"$in": EMAILED_NOTIFICATION_TYPES},
            "scheduled_for": {"$lte": now},
        }).to_list(None)

    async def _lookup(self, collection: str, ids: set, projection: dict) -> dict:
        if not ids:
            return {}
        docs = await self.db[collection].find({"id": {"$in": list(ids)}}, projection).to_list(None)
        return {doc["id"]: doc for doc in docs}

    async def send_pending_emails(self, now: Optional[datetime] = None) -> List[str]:
        """Email every due notification; returns the ids that were marked sent."""
        now = now or utcnow()
        due = await self._due_notifications(now)
        if not due:
            return []

        users = await self._lookup("users", {n["user_id"] for n in due}, {"id": 1, "name": 1, "email": 1})
        tasks = await self._lookup("tasks", {n["task_id"] for n in due}, {"id": 1, "title": 1, "deadline": 1, "status": 1})

        sent_ids = []
        for notification in due:
            user = users.get(notification["user_id"])
            to = (user or {}).get("email")
            if not to:
                logger.info(
                    "Skipping notification: recipient has no email",
                    extra={"data": {"notification_id": notification["id"], "user_id": notification["user_id"]}}
                )
                continue

            task = tasks.get(notification["task_id"])
            if task and task.get("status") == TaskStatus.DONE:
                logger.debug(f"Skipping notification for completed task", extra={"data": {"notification_id": notification["id"]}})
                continue

            subject, html = render_notification_email(notification, task)
            try:
                # Mail senders are synchronous; run them off the event loop
                await run_in_threadpool(self.mailer.send, to=to, subject=subject, html=html)
            except Exception as e:
                logger.error(
                    f"Email send failed for notification {notification['id']}: {e}",
                    exc_info=True,
                    extra={"data": {"notification_id": notification["id"], "type": notification.get("type")}}
                )
                continue

            await self.db.notifications.update_one({"id": notification["id"]}, {"$set": {"sent": True}})
            sent_ids.append(notification["id"])

        logger.info(
            f"Outbox drained: {len(sent_ids)}/{len(due)} sent",
            extra={"data": {"due": len(due), "sent": len(sent_ids)}}
        )
        return sent_ids
