"""Order, checkout and review schemas"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime

from urbansprout.models.order import OrderStatus, PaymentMethod, PaymentStatus
from urbansprout.models.common import ShippingAddress
from urbansprout.utils.cart import item_id


class ShippingAddressInput(BaseModel):
    """Address as entered at checkout (pincode or postal_code)"""
    full_name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = ""
    state: Optional[str] = None
    pincode: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None

    @model_validator(mode="after")
    def _strip_required(self):
        if not self.full_name.strip() or not self.address.strip():
            raise ValueError("Shipping address is required")
        return self

    def to_address(self) -> ShippingAddress:
        return ShippingAddress(
            full_name=self.full_name.strip(),
            address=self.address.strip(),
            city=self.city.strip(),
            state=self.state,
            postal_code=self.postal_code or self.pincode or "",
            country=self.country or "India",
            phone=self.phone,
        )


class OrderItemInput(BaseModel):
    """Checkout line as sent by the store page"""
    product_id: str
    quantity: int = Field(default=1, ge=1)
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _resolve_product_id(cls, data):
        if isinstance(data, dict) and not data.get("product_id"):
            pid = item_id(data)
            if pid:
                data = {**data, "product_id": pid}
        return data


class CodOrderCreate(BaseModel):
    """Cash on delivery order"""
    items: List[OrderItemInput] = Field(min_length=1)
    shipping_address: ShippingAddressInput
    total: float = Field(gt=0)
    notes: Optional[str] = "Cash on Delivery order"

    class Config:
        json_schema_extra = {
            "example": {
                "items": [{"product_id": "665f1f77bcf86cd799439011", "quantity": 1, "price": 649.0}],
                "shipping_address": {
                    "full_name": "Asha Menon",
                    "address": "12 MG Road",
                    "city": "Kochi",
                    "state": "Kerala",
                    "pincode": "682001",
                    "country": "India",
                    "phone": "+91 98470 12345"
                },
                "total": 649.0
            }
        }


class WishlistPurchaseRequest(BaseModel):
    items: List[OrderItemInput] = Field(min_length=1)
    shipping_address: ShippingAddressInput
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    price: float
    quantity: int
    image: Optional[str] = None


class StatusHistoryResponse(BaseModel):
    status: str
    note: Optional[str] = None
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


class OrderResponse(BaseModel):
    """Response schema for order"""
    id: str
    order_number: str
    user_id: str
    items: List[OrderItemResponse]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    subtotal: float
    shipping: float
    tax: float
    total: float
    status: OrderStatus
    status_history: List[StatusHistoryResponse] = []
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CancelOrderRequest(BaseModel):
    reason: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    note: Optional[str] = None


class ReviewCreate(BaseModel):
    order_id: str
    product_id: str
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default="", max_length=1000)


class ReviewResponse(BaseModel):
    id: str
    user_id: str
    user_name: Optional[str] = None
    order_id: str
    product_id: str
    product_name: str
    rating: int
    comment: str = ""
    verified_purchase: bool = True
    created_at: datetime
