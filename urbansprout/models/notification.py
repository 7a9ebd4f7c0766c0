"""In-app notification model"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum


class NotificationType(str, Enum):
    BLOG_APPROVED = "blog_approved"
    BLOG_REJECTED = "blog_rejected"
    ORDER_PLACED = "order_placed"
    ORDER_STATUS_UPDATE = "order_status_update"
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"
    BLOG_LIKE = "blog_like"
    BLOG_COMMENT = "blog_comment"
    GENERAL = "general"


class Notification(BaseModel):
    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    user_email: str
    type: NotificationType
    title: str
    message: str
    related_id: Optional[str] = None
    related_model: Optional[str] = None
    is_read: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        use_enum_values = True
