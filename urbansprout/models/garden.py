"""Garden journal models"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum
import uuid

JOURNAL_CONTENT_MAX_LENGTH = 1000
JOURNAL_NOTES_MAX_LENGTH = 500
CAPTION_MAX_LENGTH = 200
GARDEN_NOTES_MAX_LENGTH = 1000


class GardenStatus(str, Enum):
    PLANTED = "planted"
    GROWING = "growing"
    FIRST_HARVEST = "first_harvest"
    MULTIPLE_HARVESTS = "multiple_harvests"
    COMPLETED = "completed"
    FAILED = "failed"


class GrowthStage(str, Enum):
    PLANTED = "planted"
    GERMINATING = "germinating"
    GROWING = "growing"
    FLOWERING = "flowering"
    FRUITING = "fruiting"
    HARVESTED = "harvested"


class GardenCategory(str, Enum):
    VEGETABLES = "Vegetables"
    HERBS = "Herbs"
    FRUITS = "Fruits"


class GardenDifficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


# Catalogue categories without a garden counterpart are kept as herbs
CATEGORY_ALIASES = {
    "vegetables": GardenCategory.VEGETABLES,
    "herbs": GardenCategory.HERBS,
    "fruits": GardenCategory.FRUITS,
    "flowers": GardenCategory.HERBS,
    "succulents": GardenCategory.HERBS,
}

DIFFICULTY_ALIASES = {
    "easy": GardenDifficulty.EASY,
    "medium": GardenDifficulty.MEDIUM,
    "moderate": GardenDifficulty.MEDIUM,
    "hard": GardenDifficulty.HARD,
}


def normalize_garden_category(value: Optional[str]) -> GardenCategory:
    return CATEGORY_ALIASES.get((value or "").strip().lower(), GardenCategory.HERBS)


def normalize_difficulty(value: Optional[str]) -> GardenDifficulty:
    return DIFFICULTY_ALIASES.get((value or "").strip().lower(), GardenDifficulty.EASY)


class GardenPlant(BaseModel):
    """Snapshot of the plant taken when it was added to the garden"""
    name: str = Field(min_length=1)
    category: GardenCategory = GardenCategory.HERBS
    description: str = ""
    image: str = ""
    growing_time: str = ""
    sunlight: str = ""
    space: str = ""
    difficulty: GardenDifficulty = GardenDifficulty.EASY
    price: str = ""

    class Config:
        use_enum_values = True


class JournalImage(BaseModel):
    url: str = Field(min_length=1)
    caption: Optional[str] = Field(None, max_length=CAPTION_MAX_LENGTH)


class JournalEntry(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    date: datetime = Field(default_factory=datetime.utcnow)
    content: str = Field(min_length=1, max_length=JOURNAL_CONTENT_MAX_LENGTH)
    images: List[JournalImage] = []
    growth_stage: GrowthStage = GrowthStage.GROWING
    notes: str = Field(default="", max_length=JOURNAL_NOTES_MAX_LENGTH)

    class Config:
        use_enum_values = True


class GardenEntry(BaseModel):
    """A plant in a user's garden, with its journal"""
    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    plant: GardenPlant
    added_date: datetime = Field(default_factory=datetime.utcnow)
    status: GardenStatus = GardenStatus.PLANTED
    journal_entries: List[JournalEntry] = []
    current_growth_stage: GrowthStage = GrowthStage.PLANTED
    last_watered: Optional[datetime] = None
    last_fertilized: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=GARDEN_NOTES_MAX_LENGTH)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        use_enum_values = True
