"""Plant catalogue schemas"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PlantResponse(BaseModel):
    """Catalogue plant as listed and searched"""
    id: str
    plant_name: str
    image_url: str
    description: str
    benefits: str
    days_to_grow: int
    maintenance: str
    sunlight: str
    space: str
    experience: str
    time: Optional[str] = None
    category: str
    price: str
    difficulty: str
    growing_time: str
    created_at: Optional[datetime] = None


class PlantSuggestion(BaseModel):
    """Quiz match, shaped so it can be added to a garden as is"""
    id: str
    name: str
    image: str
    description: str
    benefits: str
    growing_time: str
    days_to_grow: int
    maintenance: str
    sunlight: str
    space: str
    category: str
    price: str
    difficulty: str
