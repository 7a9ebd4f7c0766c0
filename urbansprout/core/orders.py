"""Order placement shared by checkout, COD and wishlist purchases"""

import logging
from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from urbansprout.core.email import (
    send_order_confirmation_email,
    send_payment_confirmation_email,
    wants_customer_email,
)
from urbansprout.core.notifications import notify
from urbansprout.models.notification import NotificationType
from urbansprout.models.order import Order, StatusHistoryEntry
from urbansprout.schemas.order import OrderResponse, OrderItemResponse, StatusHistoryResponse

logger = logging.getLogger(__name__)


def history_entry(status: str, note: str, user_id: Optional[str] = None) -> dict:
    return StatusHistoryEntry(status=status, note=note, updated_by=user_id).model_dump()


def order_to_response(order: dict) -> OrderResponse:
    """Convert database order document to OrderResponse"""
    return OrderResponse(
        id=str(order["_id"]),
        order_number=order["order_number"],
        user_id=str(order["user_id"]),
        items=[OrderItemResponse(**item) for item in order.get("items", [])],
        shipping_address=order["shipping_address"],
        payment_method=order.get("payment_method", "Cash on Delivery"),
        payment_status=order.get("payment_status", "pending"),
        subtotal=order.get("subtotal", order.get("total", 0.0)),
        shipping=order.get("shipping", 0.0),
        tax=order.get("tax", 0.0),
        total=order.get("total", 0.0),
        status=order.get("status", "pending"),
        status_history=[StatusHistoryResponse(**entry) for entry in order.get("status_history", [])],
        razorpay_order_id=order.get("razorpay_order_id"),
        razorpay_payment_id=order.get("razorpay_payment_id"),
        cancelled_at=order.get("cancelled_at"),
        cancellation_reason=order.get("cancellation_reason"),
        notes=order.get("notes"),
        created_at=order.get("created_at", datetime.utcnow()),
        updated_at=order.get("updated_at", datetime.utcnow()),
    )


async def place_order(
    db: AsyncIOMotorDatabase,
    user: dict,
    order: Order,
    clear_cart: bool = True,
    transaction_id: Optional[str] = None,
) -> dict:
    """
    Persist an order and run the post-placement side effects.

    The customer's server cart is emptied when ``clear_cart`` is set. Email
    and notification failures are logged and never undo the order.
    """
    doc = order.to_document()
    result = await db.orders.insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info(f"Order {doc['order_number']} placed by {user['_id']} ({doc['payment_method']}, {doc['total']:.2f})")

    if clear_cart:
        await db.carts.update_one(
            {"user_id": user["_id"]},
            {"$set": {"items": [], "updated_at": datetime.utcnow()}}
        )

    await notify(
        db,
        user["_id"],
        user.get("email"),
        NotificationType.ORDER_PLACED,
        "Order Placed Successfully!",
        f"Your order #{doc['order_number']} has been placed successfully!",
        related_id=str(doc["_id"]),
        related_model="Order",
    )

    if wants_customer_email(user):
        try:
            await send_order_confirmation_email(user["email"], user.get("name"), doc)
            if transaction_id:
                await send_payment_confirmation_email(user["email"], user.get("name"), doc, transaction_id)
        except Exception as e:
            logger.error(f"Failed to send confirmation email for {doc['order_number']}: {str(e)}")
    elif user.get("role") == "admin":
        logger.info(f"Skipping confirmation email for admin user {user.get('email')}")

    return doc
