"""Plant catalogue model"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum


class Sunlight(str, Enum):
    FULL_SUN = "full_sun"
    PARTIAL_SUN = "partial_sun"
    SHADE = "shade"


class Space(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Experience(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TimeCommitment(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PlantCategory(str, Enum):
    VEGETABLES = "vegetables"
    FRUITS = "fruits"
    HERBS = "herbs"
    FLOWERS = "flowers"
    SUCCULENTS = "succulents"


class Plant(BaseModel):
    """Growing guide for one plant, matched against the suggestion quiz"""
    id: Optional[str] = Field(None, alias="_id")
    plant_name: str
    image_url: str
    description: str
    benefits: str
    days_to_grow: int = 60
    maintenance: str
    sunlight: Sunlight
    space: Space
    experience: Experience
    time: Optional[TimeCommitment] = None
    category: PlantCategory
    price: str = "₹20-40"
    difficulty: str = "Easy"
    growing_time: str
    is_active: bool = True
    archived: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        use_enum_values = True
