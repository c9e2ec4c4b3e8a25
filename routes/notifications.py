from fastapi import APIRouter, Body, Depends, HTTPException
from typing import List
from models.user import UserModel
from routes.deps import get_current_user, get_db
from services.notifications import get_unread_notifications, mark_notifications_as_read
from logging_config import get_logger

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
logger = get_logger("routes.notifications")


@router.get("", response_model=List[dict])
async def list_unread_notifications(
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Unread notifications for the current user, most recent first."""
    return await get_unread_notifications(db, current_user.id)


@router.get("/unread-count")
async def get_unread_count(
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Get count of unread notifications."""
    count = await db.notifications.count_documents({
        "user_id": current_user.id,
        "read": False
    })
    return {"count": count}


@router.patch("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Mark a notification as read."""
    result = await db.notifications.update_one(
        {"id": notification_id, "user_id": current_user.id},
        {"$set": {"read": True}}
    )
    if result.matched_count == 0:
        logger.warning(f"Notification not found for mark-as-read", extra={"data": {"notification_id": notification_id}})
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"message": "Marked as read"}


@router.post("/mark-read")
async def mark_selected_read(
    ids: List[str] = Body(..., embed=True),
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Mark a batch of the current user's notifications as read."""
    updated = await mark_notifications_as_read(db, ids, user_id=current_user.id)
    return {"updated": updated}


@router.post("/mark-all-read")
async def mark_all_read(
    current_user: UserModel = Depends(get_current_user),
    db=Depends(get_db)
):
    """Mark all notifications as read for the current user."""
    await db.notifications.update_many(
        {"user_id": current_user.id, "read": False},
        {"$set": {"read": True}}
    )
    return {"message": "All notifications marked as read"}
