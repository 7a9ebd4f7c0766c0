"""My Garden endpoints: plants a user is growing and their journals"""

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from bson import ObjectId
from datetime import datetime
import logging

from urbansprout.database import get_database
from urbansprout.api.deps import get_current_user
from urbansprout.models.garden import GardenEntry, JournalEntry, GrowthStage
from urbansprout.schemas.garden import AddToGardenRequest, JournalEntryCreate, GardenStatusUpdate
from urbansprout.utils.validators import validate_object_id

logger = logging.getLogger(__name__)

router = APIRouter()


def garden_entry_to_dict(entry: dict) -> dict:
    return {
        "id": str(entry["_id"]),
        "plant": entry["plant"],
        "added_date": entry.get("added_date"),
        "status": entry.get("status"),
        "current_growth_stage": entry.get("current_growth_stage"),
        "journal_entries": entry.get("journal_entries", []),
        "last_watered": entry.get("last_watered"),
        "last_fertilized": entry.get("last_fertilized"),
        "notes": entry.get("notes"),
        "created_at": entry.get("created_at"),
        "updated_at": entry.get("updated_at"),
    }


def _already_added(name: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"{name} is already in your garden!"
    )


async def get_garden_entry_or_404(entry_id: str, user: dict, db: AsyncIOMotorDatabase) -> dict:
    """Active garden entry owned by the user; removed entries count as missing"""
    if not validate_object_id(entry_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid plant ID"
        )

    entry = await db.gardens.find_one({
        "_id": ObjectId(entry_id),
        "user_id": user["_id"],
        "is_active": True,
    })

    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Plant not found in your garden"
        )

    return entry


@router.post("/add", status_code=status.HTTP_201_CREATED)
async def add_to_garden(
    request: AddToGardenRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Add a plant to the user's garden.

    Accepts a quiz suggestion or a catalogue plant; a plant can be in the
    garden once at a time (matched by name).
    """
    if request.plant is None or not (request.plant.name or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Plant data is required"
        )

    plant = request.plant.to_garden_plant()

    existing = await db.gardens.find_one({
        "user_id": current_user["_id"],
        "plant.name": plant.name,
        "is_active": True,
    })
    if existing:
        raise _already_added(plant.name)

    entry = GardenEntry(user_id=current_user["_id"], plant=plant)
    doc = entry.model_dump(by_alias=True, exclude={"id"})

    try:
        result = await db.gardens.insert_one(doc)
    except DuplicateKeyError:
        raise _already_added(plant.name)

    doc["_id"] = result.inserted_id
    logger.info(f"{current_user['_id']} added {plant.name} to their garden")

    return {
        "success": True,
        "message": f"Added {plant.name} to your garden!",
        "data": garden_entry_to_dict(doc),
    }


@router.get("")
async def get_garden(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get the plants in the user's garden, most recently added first.
    """
    cursor = db.gardens.find({"user_id": current_user["_id"], "is_active": True}).sort("added_date", -1)
    entries = await cursor.to_list(length=None)

    return {
        "success": True,
        "data": {
            "garden": [garden_entry_to_dict(e) for e in entries],
            "total": len(entries),
        },
    }


@router.post("/{entry_id}/journal", status_code=status.HTTP_201_CREATED)
async def add_journal_entry(
    entry_id: str,
    request: JournalEntryCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Add a journal entry to a garden plant.

    A growth stage on the entry also becomes the plant's current stage.
    """
    if not request.content or not request.content.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Journal content is required"
        )

    entry = await get_garden_entry_or_404(entry_id, current_user, db)

    journal = JournalEntry(
        content=request.content.strip(),
        images=request.images,
        growth_stage=request.growth_stage or GrowthStage.GROWING,
        notes=request.notes,
    )
    journal_doc = journal.model_dump()

    update = {"$push": {"journal_entries": journal_doc}, "$set": {"updated_at": datetime.utcnow()}}
    if request.growth_stage:
        update["$set"]["current_growth_stage"] = request.growth_stage.value

    await db.gardens.update_one({"_id": entry["_id"]}, update)

    return {
        "success": True,
        "message": "Journal entry added successfully",
        "data": journal_doc,
    }


@router.get("/{entry_id}/journal")
async def get_journal(
    entry_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get a garden plant's journal, newest entry first.
    """
    entry = await get_garden_entry_or_404(entry_id, current_user, db)
    journal = sorted(entry.get("journal_entries", []), key=lambda j: j["date"], reverse=True)

    return {
        "success": True,
        "data": {
            "plant": entry["plant"],
            "journal_entries": journal,
            "current_growth_stage": entry.get("current_growth_stage"),
            "added_date": entry.get("added_date"),
        },
    }


@router.put("/{entry_id}/status")
async def update_garden_status(
    entry_id: str,
    request: GardenStatusUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Update a garden plant's status, growth stage, care dates or notes.
    """
    entry = await get_garden_entry_or_404(entry_id, current_user, db)

    changes = request.model_dump(exclude_none=True)
    changes["updated_at"] = datetime.utcnow()

    await db.gardens.update_one({"_id": entry["_id"]}, {"$set": changes})
    entry.update(changes)

    return {
        "success": True,
        "message": "Plant status updated successfully",
        "data": garden_entry_to_dict(entry),
    }


@router.delete("/{entry_id}")
async def remove_from_garden(
    entry_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Remove a plant from the garden. The entry and its journal are kept but
    no longer listed.
    """
    entry = await get_garden_entry_or_404(entry_id, current_user, db)

    await db.gardens.update_one(
        {"_id": entry["_id"]},
        {"$set": {"is_active": False, "updated_at": datetime.utcnow()}}
    )
    logger.info(f"{current_user['_id']} removed {entry['plant'].get('name')} from their garden")

    return {"success": True, "message": "Plant removed from garden successfully"}
