from typing import List, Optional

from logging_config import get_logger

logger = get_logger("notifications")


def parse_mongo_data(data):
    if isinstance(data, list):
        return [parse_mongo_data(item) for item in data]
    if isinstance(data, dict):
        if "_id" in data:
            data["_id"] = str(data["_id"])
        return {k: parse_mongo_data(v) for k, v in data.items()}
    return data


async def get_unread_notifications(db, user_id: str) -> List[dict]:
    """Unread notifications for a user, newest `scheduled_for` first, each with its task attached."""
    notifications = await db.notifications.find({
        "user_id": user_id,
        "read": False
    }).sort("scheduled_for", -1).to_list(None)

    task_ids = list({n["task_id"] for n in notifications})
    tasks = {}
    if task_ids:
        docs = await db.tasks.find({"id": {"$in": task_ids}}, {"_id": 0, "id": 1, "title": 1, "deadline": 1}).to_list(None)
        tasks = {t["id"]: t for t in docs}

    for notification in notifications:
        notification["task"] = tasks.get(notification["task_id"])
    return parse_mongo_data(notifications)


async def mark_notifications_as_read(db, notification_ids: List[str], user_id: Optional[str] = None) -> int:
    """Flag notifications as read; `user_id` restricts the update to that user's notifications."""
    if not notification_ids:
        return 0
    query = {"id": {"$in": list(notification_ids)}}
    if user_id is not None:
        query["user_id"] = user_id
    result = await db.notifications.update_many(query, {"$set": {"read": True}})
    return result.modified_count


async def mark_notifications_as_sent(db, notification_ids: List[str]) -> int:
    """Flag notifications as delivered without emailing them (in-app only flows)."""
    if not notification_ids:
        return 0
    result = await db.notifications.update_many(
        {"id": {"$in": list(notification_ids)}},
        {"$set": {"sent": True}}
    )
    logger.debug(f"Marked notifications as sent", extra={"data": {"count": result.modified_count}})
    return result.modified_count
