"""Order models"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum
import secrets

from urbansprout.models.common import ShippingAddress


class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    """Payment methods offered at checkout"""
    CREDIT_CARD = "Credit Card"
    UPI = "UPI"
    CASH_ON_DELIVERY = "Cash on Delivery"


# Orders in these states have had their stock taken off the shelf
STOCK_COMMITTED_STATUSES = [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED]
CUSTOMER_CANCELLABLE_STATUSES = [OrderStatus.PENDING, OrderStatus.PROCESSING]


def generate_order_number() -> str:
    """Generate unique order number"""
    timestamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")
    return f"ORD-{timestamp}-{secrets.token_hex(3).upper()}"


class OrderItem(BaseModel):
    """Order line"""
    product_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    image: Optional[str] = None


class StatusHistoryEntry(BaseModel):
    """One status transition"""
    status: OrderStatus
    note: Optional[str] = None
    updated_by: Optional[str] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True


class Order(BaseModel):
    """Order model"""
    id: Optional[str] = Field(None, alias="_id")
    order_number: str = Field(default_factory=generate_order_number)
    user_id: str
    items: List[OrderItem]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY
    payment_status: PaymentStatus = PaymentStatus.PENDING
    subtotal: float = Field(ge=0)
    shipping: float = Field(default=0, ge=0)
    tax: float = Field(default=0, ge=0)
    total: float = Field(ge=0)
    status: OrderStatus = OrderStatus.PENDING
    stock_committed: bool = False
    status_history: List[StatusHistoryEntry] = []
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    returned_at: Optional[datetime] = None
    return_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        use_enum_values = True

    def to_document(self) -> dict:
        """Dictionary ready for insert_one (no _id)"""
        return self.model_dump(exclude={"id"})
