"""Product models"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum

PLACEHOLDER_PREFIX = "Placeholder for"


class StockStatus(str, Enum):
    """Stock status enumeration"""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class AppliedDiscount(BaseModel):
    """Discount currently applied to a product"""
    discount_id: Optional[str] = None
    discount_name: Optional[str] = None
    discount_type: Optional[str] = None
    discount_value: Optional[float] = None
    calculated_price: Optional[float] = None
    applied_at: Optional[datetime] = None


class Product(BaseModel):
    """Product model"""
    id: Optional[str] = Field(None, alias="_id")
    name: str
    category: str
    description: Optional[str] = None
    sku: Optional[str] = None
    regular_price: float = Field(ge=0)
    discount_price: Optional[float] = Field(None, ge=0)
    stock: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    images: List[str] = []
    featured: bool = False
    published: bool = True
    archived: bool = False
    rating: float = Field(default=0, ge=0, le=5)
    reviews: int = 0
    tags: List[str] = []
    applied_discount: Optional[AppliedDiscount] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "Monstera Deliciosa",
                "category": "Indoor Plants",
                "description": "Easy-care tropical plant with split leaves",
                "sku": "PLT-MON-001",
                "regular_price": 799.0,
                "discount_price": 649.0,
                "stock": 25,
                "images": ["https://example.com/monstera.jpg"],
                "tags": ["indoor", "tropical"]
            }
        }

    @property
    def current_price(self) -> float:
        """Applied discount price, else discount price, else regular price"""
        if self.applied_discount and self.applied_discount.calculated_price:
            return self.applied_discount.calculated_price
        return self.discount_price or self.regular_price

    @property
    def discount_percentage(self) -> int:
        if self.regular_price and self.current_price < self.regular_price:
            return round((self.regular_price - self.current_price) / self.regular_price * 100)
        return 0

    @property
    def stock_status(self) -> StockStatus:
        if self.stock == 0:
            return StockStatus.OUT_OF_STOCK
        if self.stock <= self.low_stock_threshold:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    @property
    def purchasable(self) -> bool:
        return self.published and not self.archived

    @property
    def primary_image(self) -> Optional[str]:
        return self.images[0] if self.images else None
