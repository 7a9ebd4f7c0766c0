"""
Pytest fixtures and configuration for UrbanSprout tests

Settings are read from the environment at import time, so the required
variables are set before anything from urbansprout is imported.
"""
import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from bson import ObjectId
from datetime import datetime
from fastapi.testclient import TestClient

from urbansprout.main import app
from urbansprout.database import get_database
from urbansprout.api.deps import get_current_user, get_optional_user

USER_ID = "665f191e810c19729de860ea"
ADMIN_ID = "665f191e810c19729de860eb"
PRODUCT_ID = "665f1f77bcf86cd799439011"
OTHER_PRODUCT_ID = "665f1f77bcf86cd799439012"


def make_cursor(docs):
    """Mock of a Motor cursor: chainable sort/skip/limit and async to_list"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs))
    return cursor


def make_collection():
    """Mock of a Motor collection with awaitable CRUD methods"""
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1, matched_count=1))
    collection.find_one_and_update = AsyncMock(return_value={"_id": ObjectId()})
    collection.update_many = AsyncMock(return_value=MagicMock(modified_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=0))
    collection.count_documents = AsyncMock(return_value=0)
    collection.distinct = AsyncMock(return_value=[])
    collection.find = MagicMock(return_value=make_cursor([]))
    collection.aggregate = MagicMock(return_value=make_cursor([]))
    return collection


@pytest.fixture
def mock_db():
    """
    Provides a MagicMock database

    Each collection (db.orders, db.products, ...) is a separate mock with
    awaitable methods; tests set return values per case.
    """
    db = MagicMock()
    for name in ["users", "admins", "products", "carts", "wishlists", "orders", "reviews", "blogs", "notifications", "gardens", "plants"]:
        setattr(db, name, make_collection())
    return db


@pytest.fixture
def sample_user():
    return {
        "_id": USER_ID,
        "name": "Asha Menon",
        "email": "asha@example.com",
        "role": "beginner",
        "active": True,
    }


@pytest.fixture
def admin_user():
    return {
        "_id": ADMIN_ID,
        "name": "Store Admin",
        "email": "admin@urbansprout.local",
        "role": "admin",
        "active": True,
    }


@pytest.fixture
def sample_product():
    """Product document as stored in MongoDB"""
    return {
        "_id": ObjectId(PRODUCT_ID),
        "name": "Monstera Deliciosa",
        "category": "Indoor Plants",
        "description": "Easy-care tropical plant",
        "regular_price": 799.0,
        "discount_price": 649.0,
        "stock": 25,
        "images": ["https://example.com/monstera.jpg"],
        "published": True,
        "archived": False,
        "tags": ["indoor"],
        "created_at": datetime(2024, 6, 1),
    }


@pytest.fixture
def shipping_address():
    return {
        "full_name": "Asha Menon",
        "address": "12 MG Road",
        "city": "Kochi",
        "state": "Kerala",
        "pincode": "682001",
        "country": "India",
        "phone": "+91 98470 12345",
    }


@pytest.fixture
def client_for(mock_db):
    """
    Returns a factory building a TestClient authenticated as the given user

    The database dependency is replaced by mock_db; passing None leaves the
    request anonymous.
    """
    def factory(user=None):
        app.dependency_overrides[get_database] = lambda: mock_db
        app.dependency_overrides[get_optional_user] = lambda: user
        if user is not None:
            app.dependency_overrides[get_current_user] = lambda: user
        else:
            app.dependency_overrides.pop(get_current_user, None)
        return TestClient(app)

    yield factory
    app.dependency_overrides.clear()


@pytest.fixture
def client(client_for, sample_user):
    return client_for(sample_user)


@pytest.fixture
def admin_client(client_for, admin_user):
    return client_for(admin_user)


@pytest.fixture
def anon_client(client_for):
    return client_for(None)


@pytest.fixture(autouse=True)
def outbox():
    """Captures outgoing email instead of talking to an SMTP server"""
    with patch("urbansprout.core.email.send_email", new_callable=AsyncMock) as send:
        yield send


def make_order_doc(**overrides):
    """Order document as stored in MongoDB"""
    doc = {
        "_id": ObjectId(),
        "order_number": "ORD-20240601120000-A1B2C3",
        "user_id": USER_ID,
        "items": [{
            "product_id": PRODUCT_ID,
            "name": "Monstera Deliciosa",
            "price": 649.0,
            "quantity": 2,
            "image": None,
        }],
        "shipping_address": {
            "full_name": "Asha Menon",
            "address": "12 MG Road",
            "city": "Kochi",
            "state": "Kerala",
            "postal_code": "682001",
            "country": "India",
            "phone": "+91 98470 12345",
        },
        "payment_method": "Cash on Delivery",
        "payment_status": "pending",
        "subtotal": 1298.0,
        "shipping": 0.0,
        "tax": 0.0,
        "total": 1298.0,
        "status": "pending",
        "stock_committed": False,
        "status_history": [],
        "created_at": datetime(2024, 6, 1, 12, 0),
        "updated_at": datetime(2024, 6, 1, 12, 0),
    }
    doc.update(overrides)
    return doc
