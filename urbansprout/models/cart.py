"""Cart and wishlist documents"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class CartItem(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class Cart(BaseModel):
    """One cart per user"""
    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    items: List[CartItem] = []
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True


class WishlistItem(BaseModel):
    product_id: str
    added_at: datetime = Field(default_factory=datetime.utcnow)


class Wishlist(BaseModel):
    """One wishlist per user"""
    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    items: List[WishlistItem] = []
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
