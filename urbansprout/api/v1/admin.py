"""Admin endpoints for order fulfilment and blog moderation"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from bson import ObjectId
from typing import Optional
import logging
import re

from urbansprout.database import get_database
from urbansprout.api.deps import require_admin
from urbansprout.api.v1.blog import get_post_or_404, post_to_response
from urbansprout.core.email import send_order_status_update_email, wants_customer_email
from urbansprout.core.inventory import commit_stock, restore_stock
from urbansprout.core.notifications import notify
from urbansprout.core.orders import order_to_response, history_entry
from urbansprout.models.blog import BlogStatus, ApprovalStatus
from urbansprout.models.notification import NotificationType
from urbansprout.models.order import OrderStatus, STOCK_COMMITTED_STATUSES
from urbansprout.schemas.blog import ModerationRequest
from urbansprout.schemas.order import OrderStatusUpdate
from urbansprout.utils.pagination import page_meta, page_window
from urbansprout.utils.validators import validate_object_id

logger = logging.getLogger(__name__)

router = APIRouter()

SORTABLE_ORDER_FIELDS = ["created_at", "updated_at", "total", "status", "order_number"]


def status_notification(status_value: str, order_number: str) -> tuple:
    """Notification type, title and message for an order status change"""
    if status_value == OrderStatus.SHIPPED.value:
        return (
            NotificationType.ORDER_SHIPPED,
            "Order Shipped!",
            f"Great news! Your order #{order_number} has been shipped and is on its way to you.",
        )
    if status_value == OrderStatus.DELIVERED.value:
        return (
            NotificationType.ORDER_DELIVERED,
            "Order Delivered!",
            f"Your order #{order_number} has been delivered successfully. Thank you for shopping with UrbanSprout!",
        )
    if status_value == OrderStatus.CANCELLED.value:
        return (
            NotificationType.ORDER_CANCELLED,
            "Order Cancelled",
            f"Your order #{order_number} has been cancelled. If you have any questions, please contact our support team.",
        )
    return (
        NotificationType.ORDER_STATUS_UPDATE,
        "Order Status Updated",
        f"Your order #{order_number} status has been updated to: {status_value.upper()}",
    )


# Orders

@router.get("/orders")
async def list_all_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List all orders (admin only)
    """
    query = {}

    if status_filter:
        query["status"] = status_filter

    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"order_number": {"$regex": pattern, "$options": "i"}},
            {"shipping_address.full_name": {"$regex": pattern, "$options": "i"}},
        ]

    sort_field = sort_by if sort_by in SORTABLE_ORDER_FIELDS else "created_at"
    direction = -1 if sort_order == "desc" else 1

    cursor = db.orders.find(query).sort(sort_field, direction).skip(page_window(page, limit)).limit(limit)
    orders = await cursor.to_list(length=limit)
    total = await db.orders.count_documents(query)

    return {
        "success": True,
        "data": {
            "orders": [order_to_response(order) for order in orders],
            "pagination": page_meta(total, page, limit),
        },
    }


@router.put("/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    status_data: OrderStatusUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Move an order to a new status (admin only)

    Stock is taken when an uncommitted order moves into processing, shipped
    or delivered, and put back when a committed order is cancelled or
    returned.
    """
    if not validate_object_id(order_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid order ID"
        )

    order = await db.orders.find_one({"_id": ObjectId(order_id)})

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    new_status = status_data.status.value
    previous_status = order.get("status")
    was_committed = bool(order.get("stock_committed"))
    items = order.get("items", [])

    restoring = new_status in (OrderStatus.CANCELLED.value, OrderStatus.RETURNED.value) and was_committed
    committing = new_status in STOCK_COMMITTED_STATUSES and not was_committed

    if committing:
        logger.info(f"Committing stock for order {order['order_number']}: {previous_status} -> {new_status}")
        await commit_stock(items, db)

    now = datetime.utcnow()
    update = {
        "status": new_status,
        "stock_committed": (was_committed or committing) and not restoring,
        "updated_at": now,
    }

    if new_status == OrderStatus.CANCELLED.value:
        update["cancelled_at"] = now
        update["cancellation_reason"] = status_data.note or "Cancelled by admin"
    elif new_status == OrderStatus.RETURNED.value:
        update["returned_at"] = now
        update["return_reason"] = status_data.note or "Returned by admin"

    # Only applies while the order is still in the state read above
    claimed = await db.orders.find_one_and_update(
        {
            "_id": ObjectId(order_id),
            "status": previous_status,
            "stock_committed": True if was_committed else {"$ne": True},
        },
        {
            "$set": update,
            "$push": {
                "status_history": history_entry(
                    new_status,
                    status_data.note or f"Status updated to {new_status}",
                    admin["_id"]
                ),
            },
        },
        projection={"_id": 1}
    )

    if not claimed:
        logger.warning(f"Status update of order {order['order_number']} lost to a concurrent update")
        if committing:
            await restore_stock(items, db)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Order was updated by another request, please refresh and try again"
        )

    if restoring:
        logger.info(f"Restoring stock for order {order['order_number']}: {previous_status} -> {new_status}")
        await restore_stock(items, db)

    logger.info(f"Order {order['order_number']} status {previous_status} -> {new_status} by {admin['_id']}")

    updated_order = await db.orders.find_one({"_id": ObjectId(order_id)})

    customer = None
    if validate_object_id(order["user_id"]):
        customer = await db.users.find_one({"_id": ObjectId(order["user_id"])})

    notification_type, title, message = status_notification(new_status, order["order_number"])
    await notify(
        db,
        order["user_id"],
        customer.get("email") if customer else None,
        notification_type,
        title,
        message,
        related_id=order_id,
        related_model="Order",
    )

    if wants_customer_email(customer):
        try:
            await send_order_status_update_email(customer["email"], customer.get("name"), updated_order, new_status)
        except Exception as e:
            logger.error(f"Failed to send status email for {order['order_number']}: {str(e)}")

    return {
        "success": True,
        "message": f"Order status updated to {new_status}",
        "data": order_to_response(updated_order),
    }


# Blog moderation

@router.put("/blog/{post_id}/moderate")
async def moderate_post(
    post_id: str,
    moderation: ModerationRequest,
    admin: dict = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Approve (publish) or reject a submitted post (admin only)
    """
    reason = (moderation.reason or "").strip()

    if not moderation.approve and not reason:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Rejection reason is required"
        )

    post = await get_post_or_404(post_id, db)
    now = datetime.utcnow()

    if moderation.approve:
        update = {
            "$set": {
                "status": BlogStatus.PUBLISHED.value,
                "approval_status": ApprovalStatus.APPROVED.value,
                "approved_by": admin["_id"],
                "approved_at": now,
                "updated_at": now,
            },
            "$unset": {"rejection_reason": ""},
        }
        notification = (
            NotificationType.BLOG_APPROVED,
            "Blog Post Approved!",
            f"Your blog post \"{post['title']}\" has been approved and is now live on the feed!",
        )
    else:
        update = {
            "$set": {
                "status": BlogStatus.REJECTED.value,
                "approval_status": ApprovalStatus.REJECTED.value,
                "rejection_reason": reason,
                "updated_at": now,
            },
        }
        notification = (
            NotificationType.BLOG_REJECTED,
            "Blog Post Needs Revision",
            f"Your blog post \"{post['title']}\" needs some revisions. Reason: {reason}",
        )

    await db.blogs.update_one({"_id": post["_id"]}, update)

    author_id = post.get("author_id")
    if not author_id:
        author = await db.users.find_one({"email": post.get("author_email")}, {"_id": 1})
        author_id = str(author["_id"]) if author else None

    if author_id:
        notification_type, title, message = notification
        await notify(
            db,
            author_id,
            post.get("author_email"),
            notification_type,
            title,
            message,
            related_id=post_id,
            related_model="Blog",
        )

    logger.info(f"Blog post {post_id} {'approved' if moderation.approve else 'rejected'} by {admin['_id']}")
    updated = await db.blogs.find_one({"_id": post["_id"]})

    return {
        "success": True,
        "message": "Blog post approved successfully" if moderation.approve else "Blog post rejected successfully",
        "data": post_to_response(updated),
    }
