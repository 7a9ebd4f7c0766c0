"""Catalog, cart and wishlist schemas"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class ProductResponse(BaseModel):
    """Product as shown in the store"""
    id: str
    name: str
    category: str
    description: Optional[str] = None
    sku: Optional[str] = None
    regular_price: float
    discount_price: Optional[float] = None
    current_price: float
    discount_percentage: int = 0
    stock: int
    stock_status: str
    images: List[str] = []
    featured: bool = False
    rating: float = 0
    reviews: int = 0
    tags: List[str] = []
    created_at: Optional[datetime] = None


class CartLine(BaseModel):
    """Cart line populated with product data"""
    product_id: str
    quantity: int
    product: Optional[ProductResponse] = None


class WishlistLine(BaseModel):
    product_id: str
    added_at: Optional[datetime] = None
    product: Optional[ProductResponse] = None


class ItemsPayload(BaseModel):
    """Full replacement of a cart or wishlist.

    Each entry may identify its product as product_id, product, productId,
    id or _id; quantity defaults to 1. Anything other than a list is
    rejected with 400 by the endpoint.
    """
    items: Any = None

    class Config:
        json_schema_extra = {
            "example": {
                "items": [
                    {"id": "665f1f77bcf86cd799439011", "quantity": 2},
                    {"product_id": "665f191e810c19729de860ea"}
                ]
            }
        }


class CartAddRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartMergeRequest(BaseModel):
    """Guest data collected before sign-in"""
    cart: List[Dict[str, Any]] = []
    wishlist: List[Dict[str, Any]] = []


class WishlistRemoveRequest(BaseModel):
    product_id: str
