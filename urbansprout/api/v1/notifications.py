"""In-app notification endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId

from urbansprout.database import get_database
from urbansprout.api.deps import get_current_user
from urbansprout.utils.pagination import page_meta, page_window
from urbansprout.utils.validators import validate_object_id

router = APIRouter()


def notification_to_dict(notification: dict) -> dict:
    return {
        "id": str(notification["_id"]),
        "type": notification["type"],
        "title": notification["title"],
        "message": notification["message"],
        "related_id": notification.get("related_id"),
        "related_model": notification.get("related_model"),
        "is_read": notification.get("is_read", False),
        "created_at": notification.get("created_at"),
    }


async def get_own_notification(notification_id: str, user: dict, db: AsyncIOMotorDatabase) -> dict:
    if not validate_object_id(notification_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid notification ID"
        )

    notification = await db.notifications.find_one({"_id": ObjectId(notification_id)})

    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )

    if notification["user_id"] != user["_id"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this notification"
        )

    return notification


@router.get("")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get the current user's notifications, newest first.
    """
    query = {"user_id": current_user["_id"]}
    if unread_only:
        query["is_read"] = False

    cursor = db.notifications.find(query).sort("created_at", -1).skip(page_window(page, limit)).limit(limit)
    notifications = await cursor.to_list(length=limit)
    total = await db.notifications.count_documents(query)
    unread_count = await db.notifications.count_documents({"user_id": current_user["_id"], "is_read": False})

    return {
        "success": True,
        "data": {
            "notifications": [notification_to_dict(n) for n in notifications],
            "unread_count": unread_count,
            "pagination": page_meta(total, page, limit),
        },
    }


@router.get("/unread-count")
async def unread_count(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    count = await db.notifications.count_documents({"user_id": current_user["_id"], "is_read": False})
    return {"success": True, "data": {"unread_count": count}}


@router.put("/read-all")
async def mark_all_read(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    await db.notifications.update_many(
        {"user_id": current_user["_id"], "is_read": False},
        {"$set": {"is_read": True}}
    )
    return {"success": True, "message": "All notifications marked as read"}


@router.delete("/clear-all")
async def clear_all(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    result = await db.notifications.delete_many({"user_id": current_user["_id"]})
    return {
        "success": True,
        "message": "All notifications cleared successfully",
        "data": {"deleted_count": result.deleted_count},
    }


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    notification = await get_own_notification(notification_id, current_user, db)

    await db.notifications.update_one({"_id": notification["_id"]}, {"$set": {"is_read": True}})
    notification["is_read"] = True

    return {
        "success": True,
        "message": "Notification marked as read",
        "data": notification_to_dict(notification),
    }


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    notification = await get_own_notification(notification_id, current_user, db)
    await db.notifications.delete_one({"_id": notification["_id"]})
    return {"success": True, "message": "Notification deleted successfully"}
