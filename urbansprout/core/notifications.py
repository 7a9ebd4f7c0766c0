"""In-app notifications"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from urbansprout.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


async def notify(
    db: AsyncIOMotorDatabase,
    user_id: str,
    user_email: str,
    type: NotificationType,
    title: str,
    message: str,
    related_id: Optional[str] = None,
    related_model: Optional[str] = None,
) -> Optional[str]:
    """
    Store a notification for a user.

    Notifications are a side channel: a failure is logged and None returned.
    """
    notification = Notification(
        user_id=str(user_id),
        user_email=user_email or "",
        type=type,
        title=title,
        message=message,
        related_id=str(related_id) if related_id else None,
        related_model=related_model,
    )

    try:
        result = await db.notifications.insert_one(notification.model_dump(exclude={"id"}))
        return str(result.inserted_id)
    except Exception as e:
        logger.error(f"Failed to store {type} notification for {user_id}: {str(e)}")
        return None
