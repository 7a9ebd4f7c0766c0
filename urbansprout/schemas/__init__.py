"""Pydantic schemas for request/response validation"""

from urbansprout.schemas.common import ErrorResponse
from urbansprout.schemas.store import (
    ProductResponse,
    CartLine,
    WishlistLine,
    ItemsPayload,
    CartAddRequest,
    CartMergeRequest,
    WishlistRemoveRequest,
)
from urbansprout.schemas.order import (
    ShippingAddressInput,
    OrderItemInput,
    CodOrderCreate,
    WishlistPurchaseRequest,
    OrderResponse,
    CancelOrderRequest,
    OrderStatusUpdate,
    ReviewCreate,
    ReviewResponse,
)
from urbansprout.schemas.payment import GatewayOrderRequest, VerifyPaymentRequest, CheckoutOrderData
from urbansprout.schemas.blog import (
    BlogCreate,
    BlogUpdate,
    CommentCreate,
    ModerationRequest,
    CommentResponse,
    BlogPostResponse,
)
from urbansprout.schemas.garden import (
    GardenPlantInput,
    AddToGardenRequest,
    JournalEntryCreate,
    GardenStatusUpdate,
)
from urbansprout.schemas.plant import PlantResponse, PlantSuggestion

__all__ = [
    "ErrorResponse",
    "ProductResponse",
    "CartLine",
    "WishlistLine",
    "ItemsPayload",
    "CartAddRequest",
    "CartMergeRequest",
    "WishlistRemoveRequest",
    "ShippingAddressInput",
    "OrderItemInput",
    "CodOrderCreate",
    "WishlistPurchaseRequest",
    "OrderResponse",
    "CancelOrderRequest",
    "OrderStatusUpdate",
    "ReviewCreate",
    "ReviewResponse",
    "GatewayOrderRequest",
    "VerifyPaymentRequest",
    "CheckoutOrderData",
    "BlogCreate",
    "BlogUpdate",
    "CommentCreate",
    "ModerationRequest",
    "CommentResponse",
    "BlogPostResponse",
    "GardenPlantInput",
    "AddToGardenRequest",
    "JournalEntryCreate",
    "GardenStatusUpdate",
    "PlantResponse",
    "PlantSuggestion",
]
