"""Common models and base classes"""

from pydantic import BaseModel
from typing import Optional


class ShippingAddress(BaseModel):
    """Shipping address stored on orders"""
    full_name: str
    address: str
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str = "India"
    phone: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "full_name": "Asha Menon",
                "address": "12 MG Road",
                "city": "Kochi",
                "state": "Kerala",
                "postal_code": "682001",
                "country": "India",
                "phone": "+91 98470 12345"
            }
        }
