"""Razorpay checkout schemas"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

from urbansprout.schemas.order import OrderItemInput, ShippingAddressInput


class GatewayOrderRequest(BaseModel):
    """Request schema for creating a Razorpay order"""
    amount: float
    currency: Optional[str] = None
    receipt: Optional[str] = None
    notes: Optional[Dict[str, Any]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "amount": 1298.0,
                "currency": "INR",
                "receipt": "order_1718000000000",
                "notes": {"user_id": "665f191e810c19729de860ea"}
            }
        }


class CheckoutOrderData(BaseModel):
    """The cart being paid for"""
    items: List[OrderItemInput] = Field(min_length=1)
    shipping_address: ShippingAddressInput
    total: float = Field(gt=0)


class VerifyPaymentRequest(BaseModel):
    """Checkout handler response plus the cart being paid for"""
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    order_data: Optional[CheckoutOrderData] = None
