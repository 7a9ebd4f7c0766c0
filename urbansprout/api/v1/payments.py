"""Payments endpoints using Razorpay"""

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError
import logging
from razorpay.errors import BadRequestError, ServerError, GatewayError

from urbansprout.config import settings
from urbansprout.database import get_database
from urbansprout.api.deps import get_current_user
from urbansprout.core.inventory import price_order_items, commit_stock, restore_stock
from urbansprout.core.orders import place_order, order_to_response, history_entry
from urbansprout.core.razorpay_client import (
    gateway_configured,
    create_gateway_order,
    verify_payment_signature,
)
from urbansprout.models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from urbansprout.schemas.payment import GatewayOrderRequest, VerifyPaymentRequest
from urbansprout.utils.cart import clean_gateway_notes, compute_order_totals

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-order")
async def create_payment_order(
    request: GatewayOrderRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Create a Razorpay order for the amount about to be paid.

    The amount is in rupees; oversized note values (base64 images and the
    like) are replaced before they reach the gateway.
    """
    if not request.amount or request.amount <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid amount"
        )

    if not gateway_configured():
        logger.error("Razorpay credentials not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment gateway not configured"
        )

    notes = clean_gateway_notes(request.notes, limit=settings.notes_value_limit)

    try:
        gateway_order = await create_gateway_order(
            amount=request.amount,
            currency=request.currency,
            receipt=request.receipt,
            notes=notes
        )
    except BadRequestError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to create payment order: {str(e)}"
        )
    except (ServerError, GatewayError) as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to create payment order: {str(e)}"
        )

    logger.info(f"Payment order {gateway_order.get('id')} created for {current_user['_id']}")

    return {
        "success": True,
        "data": gateway_order,
        "key_id": settings.razorpay_key_id,
    }


@router.post("/verify-payment")
async def verify_payment(
    request: VerifyPaymentRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Verify a completed Razorpay checkout and create the paid order.

    Verifying the same payment twice returns the order created the first time.
    """
    if not request.razorpay_order_id or not request.razorpay_payment_id or not request.razorpay_signature:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing payment verification data"
        )

    if not request.order_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing order data"
        )

    if not verify_payment_signature(
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payment signature"
        )

    existing = await db.orders.find_one({"razorpay_payment_id": request.razorpay_payment_id})
    if existing:
        logger.info(f"Payment {request.razorpay_payment_id} already verified as {existing['order_number']}")
        return {
            "success": True,
            "message": "Payment already verified",
            "data": {"order": order_to_response(existing)},
        }

    order_data = request.order_data
    order_items, subtotal = await price_order_items(order_data.items, db)
    totals = compute_order_totals(
        subtotal,
        tax_rate=settings.checkout_tax_rate,
        shipping_fee=settings.checkout_shipping_fee,
        free_shipping_threshold=settings.checkout_free_shipping_threshold,
    )

    if abs(totals["total"] - order_data.total) >= 0.01:
        logger.warning(
            f"Client total {order_data.total:.2f} differs from catalogue total {totals['total']:.2f} "
            f"for payment {request.razorpay_payment_id}"
        )

    await commit_stock(order_items, db)

    order = Order(
        user_id=current_user["_id"],
        items=order_items,
        shipping_address=order_data.shipping_address.to_address(),
        payment_method=PaymentMethod.UPI,
        payment_status=PaymentStatus.PAID,
        status=OrderStatus.PROCESSING,
        stock_committed=True,
        razorpay_order_id=request.razorpay_order_id,
        razorpay_payment_id=request.razorpay_payment_id,
        status_history=[history_entry(OrderStatus.PROCESSING.value, "Payment verified", current_user["_id"])],
        **totals,
    )

    try:
        doc = await place_order(db, current_user, order, transaction_id=request.razorpay_payment_id)
    except DuplicateKeyError as e:
        await restore_stock(order_items, db)
        existing = await db.orders.find_one({"razorpay_payment_id": request.razorpay_payment_id})
        if not existing:
            logger.error(f"Failed to store order for payment {request.razorpay_payment_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Payment verification failed"
            )

        # A concurrent verification of the same payment stored the order first
        logger.info(f"Payment {request.razorpay_payment_id} already stored as {existing['order_number']}, stock returned")
        return {
            "success": True,
            "message": "Payment already verified",
            "data": {"order": order_to_response(existing)},
        }
    except PyMongoError as e:
        logger.error(f"Failed to store order for payment {request.razorpay_payment_id}: {str(e)}")
        await restore_stock(order_items, db)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment verification failed"
        )

    return {
        "success": True,
        "message": "Payment verified and order created successfully",
        "data": {"order": order_to_response(doc)},
    }
