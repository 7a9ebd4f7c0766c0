"""Customer order and review endpoints"""

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from bson import ObjectId
from typing import List, Optional, Tuple
import logging

from urbansprout.config import settings
from urbansprout.database import get_database
from urbansprout.api.deps import get_current_user, is_admin
from urbansprout.core.inventory import price_order_items, restore_stock
from urbansprout.core.notifications import notify
from urbansprout.core.orders import place_order, order_to_response, history_entry
from urbansprout.models.notification import NotificationType
from urbansprout.models.order import (
    Order,
    OrderStatus,
    PaymentMethod,
    CUSTOMER_CANCELLABLE_STATUSES,
)
from urbansprout.models.review import Review
from urbansprout.schemas.order import (
    CodOrderCreate,
    OrderItemInput,
    CancelOrderRequest,
    ReviewCreate,
    ReviewResponse,
)
from urbansprout.utils.cart import compute_order_totals
from urbansprout.utils.validators import validate_object_id

logger = logging.getLogger(__name__)

router = APIRouter()


async def price_cod_items(items: List[OrderItemInput], db: AsyncIOMotorDatabase) -> Tuple[list, float]:
    """
    Price cash on delivery lines.

    Lines for catalogue products use the current catalogue price. Lines for
    products the catalogue doesn't know keep the name and price they were
    sent with.
    """
    catalogue_items = []
    loose_items = []

    for item in items:
        known = validate_object_id(item.product_id) and await db.products.find_one(
            {"_id": ObjectId(item.product_id)}, {"_id": 1}
        )
        if known:
            catalogue_items.append(item)
        elif item.name and item.price is not None:
            logger.warning(f"Pricing unknown product {item.product_id} from the order payload")
            loose_items.append({
                "product_id": item.product_id,
                "name": item.name,
                "price": item.price,
                "quantity": item.quantity,
                "image": item.image,
            })
        else:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Product not found: {item.product_id}"
            )

    order_items, subtotal = await price_order_items(catalogue_items, db)
    order_items.extend(loose_items)
    subtotal += sum(line["price"] * line["quantity"] for line in loose_items)
    return order_items, subtotal


def review_to_response(review: dict) -> ReviewResponse:
    return ReviewResponse(
        id=str(review["_id"]),
        user_id=str(review["user_id"]),
        user_name=review.get("user_name"),
        order_id=str(review["order_id"]),
        product_id=str(review["product_id"]),
        product_name=review.get("product_name", ""),
        rating=review["rating"],
        comment=review.get("comment", ""),
        verified_purchase=review.get("verified_purchase", True),
        created_at=review.get("created_at", datetime.utcnow()),
    )


async def refresh_product_rating(product_id: str, db: AsyncIOMotorDatabase):
    """Store the average rating and review count on the product"""
    stats = await db.reviews.aggregate([
        {"$match": {"product_id": product_id, "status": "approved"}},
        {"$group": {"_id": None, "average": {"$avg": "$rating"}, "count": {"$sum": 1}}},
    ]).to_list(length=1)

    average, count = (round(stats[0]["average"], 1), stats[0]["count"]) if stats else (0, 0)

    if validate_object_id(product_id):
        await db.products.update_one(
            {"_id": ObjectId(product_id)},
            {"$set": {"rating": average, "reviews": count, "updated_at": datetime.utcnow()}}
        )


# Orders

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_cod_order(
    order_data: CodOrderCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Place a cash on delivery order.

    Stock is not taken until an admin moves the order to processing.
    """
    order_items, subtotal = await price_cod_items(order_data.items, db)
    totals = compute_order_totals(
        subtotal,
        tax_rate=settings.checkout_tax_rate,
        shipping_fee=settings.checkout_shipping_fee,
        free_shipping_threshold=settings.checkout_free_shipping_threshold,
    )

    order = Order(
        user_id=current_user["_id"],
        items=order_items,
        shipping_address=order_data.shipping_address.to_address(),
        payment_method=PaymentMethod.CASH_ON_DELIVERY,
        status=OrderStatus.PENDING,
        notes=order_data.notes,
        status_history=[history_entry(OrderStatus.PENDING.value, "Order placed", current_user["_id"])],
        **totals,
    )

    doc = await place_order(db, current_user, order)

    return {
        "success": True,
        "message": "Order created successfully",
        "data": {"order": order_to_response(doc)},
    }


@router.get("/my")
async def list_my_orders(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get the current user's orders, newest first.
    """
    cursor = db.orders.find({"user_id": current_user["_id"]}).sort("created_at", -1)
    orders = await cursor.to_list(length=None)

    return {
        "success": True,
        "data": [order_to_response(order) for order in orders],
    }


# Reviews (declared before /{order_id})

@router.post("/reviews", status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Review a product from one of the user's delivered orders.
    """
    if not validate_object_id(review_data.order_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid order ID"
        )

    order = await db.orders.find_one({
        "_id": ObjectId(review_data.order_id),
        "user_id": current_user["_id"],
    })

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )

    if order.get("status") != OrderStatus.DELIVERED.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You can only review products from delivered orders"
        )

    line = next(
        (item for item in order.get("items", []) if item["product_id"] == review_data.product_id),
        None
    )
    if not line:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product not found in this order"
        )

    existing = await db.reviews.find_one({
        "user_id": current_user["_id"],
        "order_id": review_data.order_id,
        "product_id": review_data.product_id,
    })
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You have already reviewed this product for this order"
        )

    review = Review(
        user_id=current_user["_id"],
        user_name=current_user.get("name"),
        order_id=review_data.order_id,
        product_id=review_data.product_id,
        product_name=line["name"],
        rating=review_data.rating,
        comment=review_data.comment or "",
    )
    review_doc = review.model_dump(exclude={"id"})
    result = await db.reviews.insert_one(review_doc)
    review_doc["_id"] = result.inserted_id

    await refresh_product_rating(review_data.product_id, db)
    logger.info(f"Review added for product {review_data.product_id} by {current_user['_id']}")

    return {
        "success": True,
        "message": "Review submitted successfully",
        "data": review_to_response(review_doc),
    }


@router.get("/reviews/product/{product_id}")
async def list_product_reviews(
    product_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Public list of a product's reviews with the average rating.
    """
    cursor = db.reviews.find({"product_id": product_id, "status": "approved"}).sort("created_at", -1)
    reviews = await cursor.to_list(length=None)

    average = round(sum(r["rating"] for r in reviews) / len(reviews), 1) if reviews else 0

    return {
        "success": True,
        "data": {
            "reviews": [review_to_response(r) for r in reviews],
            "average_rating": average,
            "total_reviews": len(reviews),
        },
    }


@router.get("/reviews/my")
async def list_my_reviews(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    cursor = db.reviews.find({"user_id": current_user["_id"]}).sort("created_at", -1)
    reviews = await cursor.to_list(length=None)

    return {
        "success": True,
        "data": [review_to_response(r) for r in reviews],
    }


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get order by ID (owner or admin)
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

    if order["user_id"] != current_user["_id"] and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this order"
        )

    return {"success": True, "data": order_to_response(order)}


@router.put("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    request: Optional[CancelOrderRequest] = None,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Cancel an order that hasn't shipped yet.
    Stock goes back on the shelf if it had been taken.
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

    if order["user_id"] != current_user["_id"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to cancel this order"
        )

    if order.get("status") not in CUSTOMER_CANCELLABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot cancel order with status '{order.get('status')}'"
        )

    stock_committed = bool(order.get("stock_committed"))
    reason = (request.reason if request else None) or "Cancelled by customer"
    now = datetime.utcnow()

    claimed = await db.orders.find_one_and_update(
        {
            "_id": ObjectId(order_id),
            "status": {"$in": [s.value for s in CUSTOMER_CANCELLABLE_STATUSES]},
            "stock_committed": True if stock_committed else {"$ne": True},
        },
        {
            "$set": {
                "status": OrderStatus.CANCELLED.value,
                "stock_committed": False,
                "cancelled_at": now,
                "cancellation_reason": reason,
                "updated_at": now,
            },
            "$push": {
                "status_history": history_entry(OrderStatus.CANCELLED.value, reason, current_user["_id"]),
            },
        },
        projection={"_id": 1}
    )

    if not claimed:
        logger.warning(f"Cancel of order {order['order_number']} lost to a concurrent update")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Order was updated by another request, please refresh and try again"
        )

    if stock_committed:
        await restore_stock(order.get("items", []), db)

    await notify(
        db,
        current_user["_id"],
        current_user.get("email"),
        NotificationType.ORDER_CANCELLED,
        "Order Cancelled",
        f"Your order #{order['order_number']} has been cancelled.",
        related_id=order_id,
        related_model="Order",
    )
    logger.info(f"Order {order['order_number']} cancelled by customer {current_user['_id']}")

    updated_order = await db.orders.find_one({"_id": ObjectId(order_id)})

    return {
        "success": True,
        "message": "Order cancelled successfully",
        "data": order_to_response(updated_order),
    }
