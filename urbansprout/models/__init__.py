"""MongoDB models using Pydantic"""

from urbansprout.models.common import ShippingAddress
from urbansprout.models.product import Product, StockStatus, AppliedDiscount
from urbansprout.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    PaymentMethod,
    StatusHistoryEntry,
)
from urbansprout.models.cart import Cart, CartItem, Wishlist, WishlistItem
from urbansprout.models.blog import BlogPost, Comment, Reaction, BlogStatus, ApprovalStatus
from urbansprout.models.notification import Notification, NotificationType
from urbansprout.models.review import Review
from urbansprout.models.garden import GardenEntry, GardenPlant, JournalEntry, GardenStatus, GrowthStage
from urbansprout.models.plant import Plant

__all__ = [
    "ShippingAddress",
    "Product",
    "StockStatus",
    "AppliedDiscount",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "StatusHistoryEntry",
    "Cart",
    "CartItem",
    "Wishlist",
    "WishlistItem",
    "BlogPost",
    "Comment",
    "Reaction",
    "BlogStatus",
    "ApprovalStatus",
    "Notification",
    "NotificationType",
    "Review",
    "GardenEntry",
    "GardenPlant",
    "JournalEntry",
    "GardenStatus",
    "GrowthStage",
    "Plant",
]
