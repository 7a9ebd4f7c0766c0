"""
API tests for My Garden and the plant journals
"""
import uuid
from datetime import datetime

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from conftest import USER_ID, make_cursor

ENTRY_ID = "665f2a00bcf86cd799439021"


def make_garden_entry(**overrides):
    entry = {
        "_id": ObjectId(ENTRY_ID),
        "user_id": USER_ID,
        "plant": {
            "name": "Cherry Tomato",
            "category": "Vegetables",
            "description": "Sweet bite-size tomatoes",
            "image": "https://example.com/tomato.jpg",
            "growing_time": "60-80 days",
            "sunlight": "full_sun",
            "space": "medium",
            "difficulty": "Medium",
            "price": "₹20-40",
        },
        "added_date": datetime(2024, 6, 1),
        "status": "planted",
        "journal_entries": [],
        "current_growth_stage": "planted",
        "is_active": True,
        "created_at": datetime(2024, 6, 1),
        "updated_at": datetime(2024, 6, 1),
    }
    entry.update(overrides)
    return entry


def journal_entry(content, date, growth_stage="growing"):
    return {
        "id": uuid.uuid4().hex,
        "date": date,
        "content": content,
        "images": [],
        "growth_stage": growth_stage,
        "notes": "",
    }


class TestAddToGarden:

    def test_adds_quiz_suggestion(self, client, mock_db):
        response = client.post("/api/garden/add", json={"plant": {
            "name": "Cherry Tomato",
            "category": "vegetables",
            "growing_time": "60-80 days",
            "difficulty": "Moderate",
        }})

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Added Cherry Tomato to your garden!"
        doc = mock_db.gardens.insert_one.call_args[0][0]
        assert doc["user_id"] == USER_ID
        assert doc["plant"]["category"] == "Vegetables"
        assert doc["plant"]["difficulty"] == "Medium"
        assert doc["status"] == "planted"
        assert doc["current_growth_stage"] == "planted"
        assert doc["is_active"] is True
        assert "_id" not in doc

    def test_adds_catalogue_plant(self, client, mock_db):
        response = client.post("/api/garden/add", json={"plant": {
            "plant_name": "Marigold",
            "image_url": "https://example.com/marigold.jpg",
            "category": "flowers",
            "difficulty": "Easy",
        }})

        assert response.status_code == 201
        plant = mock_db.gardens.insert_one.call_args[0][0]["plant"]
        assert plant["name"] == "Marigold"
        assert plant["image"] == "https://example.com/marigold.jpg"
        assert plant["category"] == "Herbs"

    def test_plant_required(self, client, mock_db):
        for payload in [{}, {"plant": {"category": "herbs"}}, {"plant": {"name": "  "}}]:
            response = client.post("/api/garden/add", json=payload)

            assert response.status_code == 400
            assert response.json()["detail"] == "Plant data is required"
        mock_db.gardens.insert_one.assert_not_called()

    def test_rejects_plant_already_growing(self, client, mock_db):
        mock_db.gardens.find_one.return_value = make_garden_entry()

        response = client.post("/api/garden/add", json={"plant": {"name": "Cherry Tomato"}})

        assert response.status_code == 400
        assert response.json()["detail"] == "Cherry Tomato is already in your garden!"
        assert mock_db.gardens.find_one.call_args[0][0] == {
            "user_id": USER_ID,
            "plant.name": "Cherry Tomato",
            "is_active": True,
        }
        mock_db.gardens.insert_one.assert_not_called()

    def test_concurrent_add_reported_as_duplicate(self, client, mock_db):
        mock_db.gardens.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

        response = client.post("/api/garden/add", json={"plant": {"name": "Basil"}})

        assert response.status_code == 400
        assert response.json()["detail"] == "Basil is already in your garden!"

    def test_requires_auth(self, anon_client):
        assert anon_client.post("/api/garden/add", json={"plant": {"name": "Basil"}}).status_code == 401


class TestListGarden:

    def test_lists_active_plants_newest_first(self, client, mock_db):
        mock_db.gardens.find.return_value = make_cursor([make_garden_entry()])

        response = client.get("/api/garden")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["garden"][0]["id"] == ENTRY_ID
        assert data["garden"][0]["plant"]["name"] == "Cherry Tomato"
        assert mock_db.gardens.find.call_args[0][0] == {"user_id": USER_ID, "is_active": True}
        mock_db.gardens.find.return_value.sort.assert_called_with("added_date", -1)

    def test_requires_auth(self, anon_client):
        assert anon_client.get("/api/garden").status_code == 401


class TestJournal:

    def test_adds_entry_and_moves_growth_stage(self, client, mock_db):
        mock_db.gardens.find_one.return_value = make_garden_entry()

        response = client.post(f"/api/garden/{ENTRY_ID}/journal", json={
            "content": "First true leaves today",
            "growthStage": "germinating",
            "images": [{"url": "https://example.com/leaves.jpg", "caption": "Day 9"}],
        })

        assert response.status_code == 201
        assert response.json()["data"]["content"] == "First true leaves today"
        query, update = mock_db.gardens.update_one.call_args[0]
        assert query == {"_id": ObjectId(ENTRY_ID)}
        pushed = update["$push"]["journal_entries"]
        assert pushed["growth_stage"] == "germinating"
        assert pushed["images"] == [{"url": "https://example.com/leaves.jpg", "caption": "Day 9"}]
        assert update["$set"]["current_growth_stage"] == "germinating"

    def test_entry_without_stage_keeps_current_stage(self, client, mock_db):
        mock_db.gardens.find_one.return_value = make_garden_entry()

        client.post(f"/api/garden/{ENTRY_ID}/journal", json={"content": "Watered"})

        update = mock_db.gardens.update_one.call_args[0][1]
        assert update["$push"]["journal_entries"]["growth_stage"] == "growing"
        assert "current_growth_stage" not in update["$set"]

    def test_content_required(self, client, mock_db):
        response = client.post(f"/api/garden/{ENTRY_ID}/journal", json={"content": "   "})

        assert response.status_code == 400
        assert response.json()["detail"] == "Journal content is required"
        mock_db.gardens.update_one.assert_not_called()

    def test_content_length_limited(self, client, mock_db):
        response = client.post(f"/api/garden/{ENTRY_ID}/journal", json={"content": "x" * 1001})

        assert response.status_code == 422

    def test_other_users_plant_not_found(self, client, mock_db):
        response = client.post(f"/api/garden/{ENTRY_ID}/journal", json={"content": "Watered"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Plant not found in your garden"
        assert mock_db.gardens.find_one.call_args[0][0] == {
            "_id": ObjectId(ENTRY_ID),
            "user_id": USER_ID,
            "is_active": True,
        }

    def test_invalid_id(self, client):
        response = client.get("/api/garden/not-an-id/journal")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid plant ID"

    def test_journal_newest_first(self, client, mock_db):
        mock_db.gardens.find_one.return_value = make_garden_entry(
            current_growth_stage="flowering",
            journal_entries=[
                journal_entry("Sowed seeds", datetime(2024, 6, 1)),
                journal_entry("First flowers", datetime(2024, 7, 10), "flowering"),
                journal_entry("Sprouted", datetime(2024, 6, 8), "germinating"),
            ],
        )

        response = client.get(f"/api/garden/{ENTRY_ID}/journal")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [j["content"] for j in data["journal_entries"]] == ["First flowers", "Sprouted", "Sowed seeds"]
        assert data["current_growth_stage"] == "flowering"
        assert data["plant"]["name"] == "Cherry Tomato"


class TestUpdateStatus:

    def test_updates_given_fields_only(self, client, mock_db):
        mock_db.gardens.find_one.return_value = make_garden_entry()

        response = client.put(f"/api/garden/{ENTRY_ID}/status", json={
            "status": "first_harvest",
            "lastWatered": "2024-07-01T08:00:00",
        })

        assert response.status_code == 200
        changes = mock_db.gardens.update_one.call_args[0][1]["$set"]
        assert changes["status"] == "first_harvest"
        assert changes["last_watered"] == datetime(2024, 7, 1, 8, 0)
        assert "notes" not in changes
        assert "current_growth_stage" not in changes
        assert response.json()["data"]["status"] == "first_harvest"

    def test_rejects_unknown_status(self, client, mock_db):
        mock_db.gardens.find_one.return_value = make_garden_entry()

        response = client.put(f"/api/garden/{ENTRY_ID}/status", json={"status": "thriving"})

        assert response.status_code == 422
        mock_db.gardens.update_one.assert_not_called()

    def test_missing_plant(self, client, mock_db):
        response = client.put(f"/api/garden/{ENTRY_ID}/status", json={"status": "failed"})

        assert response.status_code == 404


class TestRemoveFromGarden:

    def test_soft_deletes(self, client, mock_db):
        mock_db.gardens.find_one.return_value = make_garden_entry()

        response = client.delete(f"/api/garden/{ENTRY_ID}")

        assert response.status_code == 200
        assert response.json()["message"] == "Plant removed from garden successfully"
        query, update = mock_db.gardens.update_one.call_args[0]
        assert query == {"_id": ObjectId(ENTRY_ID)}
        assert update["$set"]["is_active"] is False
        mock_db.gardens.delete_one.assert_not_called()

    def test_already_removed(self, client, mock_db):
        response = client.delete(f"/api/garden/{ENTRY_ID}")

        assert response.status_code == 404
        mock_db.gardens.update_one.assert_not_called()
