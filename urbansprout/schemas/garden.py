"""Garden and plant journal schemas"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime

from urbansprout.models.garden import (
    GardenPlant,
    GardenStatus,
    GrowthStage,
    JournalImage,
    JOURNAL_CONTENT_MAX_LENGTH,
    JOURNAL_NOTES_MAX_LENGTH,
    GARDEN_NOTES_MAX_LENGTH,
    normalize_garden_category,
    normalize_difficulty,
)

# Field names used by catalogue plants and quiz suggestions
PLANT_FIELD_ALIASES = {
    "plant_name": "name",
    "plantName": "name",
    "image_url": "image",
    "imageUrl": "image",
    "growingTime": "growing_time",
}


def _apply_aliases(data: dict, aliases: dict) -> dict:
    resolved = dict(data)
    for alias, field in aliases.items():
        if alias in resolved:
            value = resolved.pop(alias)
            if not resolved.get(field):
                resolved[field] = value
    return resolved


class GardenPlantInput(BaseModel):
    """Plant to add, either a quiz suggestion or a catalogue plant"""
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    growing_time: Optional[str] = None
    sunlight: Optional[str] = None
    space: Optional[str] = None
    difficulty: Optional[str] = None
    price: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _resolve_aliases(cls, data):
        if isinstance(data, dict):
            return _apply_aliases(data, PLANT_FIELD_ALIASES)
        return data

    def to_garden_plant(self) -> GardenPlant:
        return GardenPlant(
            name=(self.name or "").strip(),
            category=normalize_garden_category(self.category),
            description=self.description or "",
            image=self.image or "",
            growing_time=self.growing_time or "",
            sunlight=self.sunlight or "",
            space=self.space or "",
            difficulty=normalize_difficulty(self.difficulty),
            price=self.price or "",
        )


class AddToGardenRequest(BaseModel):
    plant: Optional[GardenPlantInput] = None

    class Config:
        json_schema_extra = {
            "example": {
                "plant": {
                    "name": "Cherry Tomato",
                    "category": "vegetables",
                    "growing_time": "60-80 days",
                    "sunlight": "Full Sun",
                    "space": "Medium",
                    "difficulty": "Moderate",
                    "price": "₹20-40"
                }
            }
        }


class JournalEntryCreate(BaseModel):
    content: Optional[str] = Field(None, max_length=JOURNAL_CONTENT_MAX_LENGTH)
    images: List[JournalImage] = []
    growth_stage: Optional[GrowthStage] = None
    notes: str = Field(default="", max_length=JOURNAL_NOTES_MAX_LENGTH)

    @model_validator(mode="before")
    @classmethod
    def _resolve_aliases(cls, data):
        if isinstance(data, dict):
            return _apply_aliases(data, {"growthStage": "growth_stage"})
        return data


class GardenStatusUpdate(BaseModel):
    """Fields left out are not changed"""
    status: Optional[GardenStatus] = None
    current_growth_stage: Optional[GrowthStage] = None
    last_watered: Optional[datetime] = None
    last_fertilized: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=GARDEN_NOTES_MAX_LENGTH)

    class Config:
        use_enum_values = True

    @model_validator(mode="before")
    @classmethod
    def _resolve_aliases(cls, data):
        if isinstance(data, dict):
            return _apply_aliases(data, {
                "currentGrowthStage": "current_growth_stage",
                "lastWatered": "last_watered",
                "lastFertilized": "last_fertilized",
            })
        return data
