"""Product review model"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class Review(BaseModel):
    """Verified-purchase product review"""
    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    user_name: Optional[str] = None
    order_id: str
    product_id: str
    product_name: str
    rating: int = Field(ge=1, le=5)
    comment: str = Field(default="", max_length=1000)
    verified_purchase: bool = True
    status: str = "approved"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
