"""Plant catalogue endpoints (read only) and the suggestion quiz"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from typing import Optional
import re
import logging

from urbansprout.database import get_database
from urbansprout.models.plant import Sunlight, Space, Experience, TimeCommitment
from urbansprout.schemas.plant import PlantResponse, PlantSuggestion
from urbansprout.utils.pagination import page_meta, page_window
from urbansprout.utils.validators import validate_object_id

logger = logging.getLogger(__name__)

router = APIRouter()

SUGGESTION_LIMIT = 6

QUIZ_ANSWERS = {
    "sunlight": Sunlight,
    "space": Space,
    "experience": Experience,
    "time": TimeCommitment,
}

QUIZ_CRITERIA = tuple(QUIZ_ANSWERS)

# Tried in order once the exact match comes back empty
PARTIAL_MATCHES = [
    ("sunlight", "space", "experience"),
    ("sunlight", "space", "time"),
    ("sunlight", "experience", "time"),
    ("space", "experience", "time"),
    ("sunlight", "space"),
    ("sunlight", "experience"),
    ("space", "experience"),
    ("experience", "time"),
]


def active_plants_filter() -> dict:
    return {"is_active": True, "archived": False}


def plant_to_response(doc: dict) -> PlantResponse:
    return PlantResponse(
        id=str(doc["_id"]),
        plant_name=doc["plant_name"],
        image_url=doc.get("image_url", ""),
        description=doc.get("description", ""),
        benefits=doc.get("benefits", ""),
        days_to_grow=doc.get("days_to_grow", 60),
        maintenance=doc.get("maintenance", ""),
        sunlight=doc.get("sunlight", ""),
        space=doc.get("space", ""),
        experience=doc.get("experience", ""),
        time=doc.get("time"),
        category=doc.get("category", ""),
        price=doc.get("price", ""),
        difficulty=doc.get("difficulty", ""),
        growing_time=doc.get("growing_time", ""),
        created_at=doc.get("created_at"),
    )


def plant_to_suggestion(doc: dict) -> PlantSuggestion:
    return PlantSuggestion(
        id=str(doc["_id"]),
        name=doc["plant_name"],
        image=doc.get("image_url", ""),
        description=doc.get("description", ""),
        benefits=doc.get("benefits", ""),
        growing_time=doc.get("growing_time", ""),
        days_to_grow=doc.get("days_to_grow", 60),
        maintenance=doc.get("maintenance", ""),
        sunlight=doc.get("sunlight", ""),
        space=doc.get("space", ""),
        category=doc.get("category", ""),
        price=doc.get("price", ""),
        difficulty=doc.get("difficulty", ""),
    )


async def _paged_plants(query: dict, page: int, limit: int, db: AsyncIOMotorDatabase) -> dict:
    cursor = db.plants.find(query).sort("plant_name", 1).skip(page_window(page, limit)).limit(limit)
    plants = await cursor.to_list(length=limit)
    total = await db.plants.count_documents(query)

    return {
        "plants": [plant_to_response(p) for p in plants],
        "pagination": page_meta(total, page, limit),
    }


@router.get("")
async def list_plants(
    sunlight: Optional[str] = None,
    space: Optional[str] = None,
    experience: Optional[str] = None,
    time: Optional[str] = None,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List catalogue plants, filtered by any quiz criterion, category or name.
    Public endpoint - no authentication required.
    """
    query = active_plants_filter()

    for field, value in (
        ("sunlight", sunlight),
        ("space", space),
        ("experience", experience),
        ("time", time),
        ("category", category),
    ):
        if value:
            query[field] = value.lower()

    if difficulty:
        query["difficulty"] = difficulty

    if search:
        query["plant_name"] = {"$regex": re.escape(search), "$options": "i"}

    return {"success": True, "data": await _paged_plants(query, page, limit, db)}


@router.get("/quiz")
async def suggest_plants(
    sunlight: Optional[str] = None,
    space: Optional[str] = None,
    experience: Optional[str] = None,
    time: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Suggest up to six plants for the quiz answers.

    Exact matches win; otherwise the first combination of three, then two,
    of the four answers that matches anything is used. No match at all
    gives an empty list.
    """
    answers = {"sunlight": sunlight, "space": space, "experience": experience, "time": time}
    if not all(answers.values()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="All quiz parameters are required: sunlight, space, experience, time"
        )

    answers = {field: value.strip().lower() for field, value in answers.items()}
    for field, choices in QUIZ_ANSWERS.items():
        if answers[field] not in {c.value for c in choices}:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid quiz answer for {field}"
            )

    plants = []
    for criteria in [QUIZ_CRITERIA] + PARTIAL_MATCHES:
        query = {**active_plants_filter(), **{field: answers[field] for field in criteria}}
        plants = await db.plants.find(query).limit(SUGGESTION_LIMIT).to_list(length=SUGGESTION_LIMIT)
        if plants:
            if criteria is not QUIZ_CRITERIA:
                logger.info(f"No exact quiz match, suggesting plants matching {', '.join(criteria)}")
            break

    return {
        "success": True,
        "data": {
            "plants": [plant_to_suggestion(p) for p in plants],
            "total": len(plants),
            "query": answers,
        },
    }


@router.get("/search")
async def search_plants(
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Full-text search over plant names, descriptions and benefits,
    best matches first.
    """
    if not q or not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query is required"
        )

    query = {**active_plants_filter(), "$text": {"$search": q.strip()}}
    score = {"score": {"$meta": "textScore"}}

    cursor = db.plants.find(query, score).sort([("score", {"$meta": "textScore"})])
    plants = await cursor.skip(page_window(page, limit)).limit(limit).to_list(length=limit)
    total = await db.plants.count_documents(query)

    return {
        "success": True,
        "data": {
            "plants": [plant_to_response(p) for p in plants],
            "pagination": page_meta(total, page, limit),
        },
    }


@router.get("/category/{category}")
async def plants_by_category(
    category: str,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    query = {**active_plants_filter(), "category": category.lower()}
    return {"success": True, "data": await _paged_plants(query, page, limit, db)}


# Declared last so it doesn't shadow the routes above
@router.get("/{plant_id}")
async def get_plant(
    plant_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    if not validate_object_id(plant_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid plant ID"
        )

    plant = await db.plants.find_one({"_id": ObjectId(plant_id), **active_plants_filter()})

    if not plant:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Plant not found"
        )

    return {"success": True, "data": plant_to_response(plant)}
