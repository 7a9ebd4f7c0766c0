"""Store endpoints: catalogue, cart and wishlist"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from datetime import datetime
from bson import ObjectId
from typing import List, Optional
import logging
import re

from urbansprout.config import settings
from urbansprout.database import get_database
from urbansprout.api.deps import get_current_user
from urbansprout.core.inventory import (
    price_order_items,
    commit_stock,
    restore_stock,
    product_to_response,
)
from urbansprout.core.orders import place_order, order_to_response, history_entry
from urbansprout.models.cart import Cart, Wishlist
from urbansprout.models.order import Order, OrderStatus
from urbansprout.models.product import PLACEHOLDER_PREFIX
from urbansprout.schemas.store import (
    CartLine,
    WishlistLine,
    ItemsPayload,
    CartAddRequest,
    CartMergeRequest,
    WishlistRemoveRequest,
)
from urbansprout.schemas.order import WishlistPurchaseRequest
from urbansprout.utils.cart import (
    normalize_cart_items,
    normalize_wishlist_items,
    merge_cart_items,
    merge_wishlist_items,
    compute_order_totals,
)
from urbansprout.utils.pagination import page_meta, page_window
from urbansprout.utils.validators import validate_object_id

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_FIELDS = {
    "price": "regular_price",
    "name": "name",
    "rating": "rating",
}


def visible_products_filter() -> dict:
    """Published, non-archived, non-placeholder products"""
    return {
        "published": True,
        "archived": False,
        "name": {"$not": re.compile(f"^{PLACEHOLDER_PREFIX}")},
    }


def _items_list(items) -> list:
    if not isinstance(items, list):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Items must be an array"
        )
    return [item for item in items if isinstance(item, dict)]


def _ensure_object_ids(product_ids: List[str]):
    for pid in product_ids:
        if not validate_object_id(pid):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid product ID: {pid}"
            )


async def _products_by_id(product_ids: List[str], db: AsyncIOMotorDatabase) -> dict:
    if not product_ids:
        return {}
    cursor = db.products.find({"_id": {"$in": [ObjectId(pid) for pid in product_ids]}})
    docs = await cursor.to_list(length=len(product_ids))
    return {str(doc["_id"]): doc for doc in docs}


async def populate_cart(items: list, db: AsyncIOMotorDatabase) -> List[CartLine]:
    """Attach product data to stored cart lines"""
    products = await _products_by_id([item["product_id"] for item in items], db)
    return [
        CartLine(
            product_id=item["product_id"],
            quantity=item.get("quantity", 1),
            product=product_to_response(products[item["product_id"]]) if item["product_id"] in products else None,
        )
        for item in items
    ]


async def populate_wishlist(items: list, db: AsyncIOMotorDatabase) -> List[WishlistLine]:
    products = await _products_by_id([item["product_id"] for item in items], db)
    return [
        WishlistLine(
            product_id=item["product_id"],
            added_at=item.get("added_at"),
            product=product_to_response(products[item["product_id"]]) if item["product_id"] in products else None,
        )
        for item in items
    ]


async def _save_cart_items(user_id: str, items: list, db: AsyncIOMotorDatabase):
    await db.carts.update_one(
        {"user_id": user_id},
        {
            "$set": {"items": items, "updated_at": datetime.utcnow()},
            "$setOnInsert": {"created_at": datetime.utcnow()},
        },
        upsert=True
    )


async def _save_wishlist_items(user_id: str, items: list, db: AsyncIOMotorDatabase):
    await db.wishlists.update_one(
        {"user_id": user_id},
        {
            "$set": {"items": items, "updated_at": datetime.utcnow()},
            "$setOnInsert": {"created_at": datetime.utcnow()},
        },
        upsert=True
    )


def _stamp_wishlist(entries: list, existing: list) -> list:
    """Products already on the wishlist keep their added_at"""
    added = {item["product_id"]: item.get("added_at") for item in existing}
    now = datetime.utcnow()
    return [
        {"product_id": entry["product_id"], "added_at": added.get(entry["product_id"]) or now}
        for entry in entries
    ]


# Catalogue

@router.get("")
async def list_products(
    category: Optional[str] = None,
    sort: str = "name",
    order: str = "asc",
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    List store products with filters, sorting and pagination.
    Public endpoint - no authentication required.
    """
    base = visible_products_filter()
    query = dict(base)
    clauses = []

    if category and category != "all":
        query["category"] = category

    if min_price is not None or max_price is not None:
        price_range = {}
        if min_price is not None:
            price_range["$gte"] = min_price
        if max_price is not None:
            price_range["$lte"] = max_price
        clauses.append({"$or": [
            {"regular_price": price_range},
            {"discount_price": price_range},
        ]})

    if search:
        pattern = re.escape(search)
        clauses.append({"$or": [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
            {"tags": {"$regex": pattern, "$options": "i"}},
        ]})

    if clauses:
        query["$and"] = clauses

    direction = -1 if order == "desc" else 1
    if sort in SORT_FIELDS:
        sort_spec = [(SORT_FIELDS[sort], direction)]
    else:
        sort_spec = [("created_at", -1)]

    cursor = db.products.find(query).sort(sort_spec).skip(page_window(page, limit)).limit(limit)
    products = await cursor.to_list(length=limit)
    total = await db.products.count_documents(query)

    categories = await db.products.distinct("category", base)
    price_stats = await db.products.aggregate([
        {"$match": {"published": True, "archived": False}},
        {"$group": {
            "_id": None,
            "min_price": {"$min": "$regular_price"},
            "max_price": {"$max": "$regular_price"},
        }},
    ]).to_list(length=1)

    price_range = {"min_price": 0, "max_price": 100}
    if price_stats:
        price_range = {
            "min_price": price_stats[0]["min_price"],
            "max_price": price_stats[0]["max_price"],
        }

    return {
        "success": True,
        "data": {
            "products": [product_to_response(p) for p in products],
            "pagination": page_meta(total, page, limit),
            "filters": {
                "categories": categories,
                "price_range": price_range,
            },
        },
    }


@router.get("/categories")
async def list_categories(db: AsyncIOMotorDatabase = Depends(get_database)):
    """
    Product count per category, most populous first.
    """
    categories = await db.products.aggregate([
        {"$match": visible_products_filter()},
        {"$group": {"_id": "$category", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
    ]).to_list(length=None)

    return {
        "success": True,
        "data": {
            "categories": [{"name": c["_id"], "count": c["count"]} for c in categories],
        },
    }


# Cart (declared before /{product_id})

@router.get("/cart")
async def get_cart(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get current user's cart, creating an empty one if it doesn't exist.
    A storage failure yields an empty cart so the store page keeps working.
    """
    user_id = current_user["_id"]

    try:
        cart = await db.carts.find_one({"user_id": user_id})

        if not cart:
            cart = Cart(user_id=user_id).model_dump(exclude={"id"})
            await db.carts.insert_one(cart)

        lines = await populate_cart(cart.get("items", []), db)
    except PyMongoError as e:
        logger.error(f"Error loading cart for {user_id}: {str(e)}")
        lines = []

    return {"success": True, "data": lines}


@router.post("/cart")
async def save_cart(
    payload: ItemsPayload,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Replace the current user's cart.
    """
    items = normalize_cart_items(_items_list(payload.items))
    _ensure_object_ids([item["product_id"] for item in items])

    await _save_cart_items(current_user["_id"], items, db)

    return {
        "success": True,
        "message": "Cart saved successfully",
        "data": {"items": await populate_cart(items, db)},
    }


@router.post("/cart/add")
async def add_to_cart(
    request: CartAddRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Add a product to the cart, summing into an existing line.
    """
    _ensure_object_ids([request.product_id])

    product = await db.products.find_one({"_id": ObjectId(request.product_id)})
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    cart = await db.carts.find_one({"user_id": current_user["_id"]})
    current = cart.get("items", []) if cart else []

    items = normalize_cart_items(merge_cart_items(
        current,
        [{"product_id": request.product_id, "quantity": request.quantity}]
    ))
    await _save_cart_items(current_user["_id"], items, db)

    return {
        "success": True,
        "message": "Item added to cart successfully",
        "data": {"items": await populate_cart(items, db)},
    }


@router.post("/cart/merge")
async def merge_guest_data(
    request: CartMergeRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Fold the cart and wishlist a visitor built before signing in into the
    account's stored ones. Guest quantities add to existing lines.
    """
    user_id = current_user["_id"]
    guest_cart = normalize_cart_items(request.cart)
    guest_wishlist = normalize_wishlist_items(request.wishlist)
    _ensure_object_ids(
        [item["product_id"] for item in guest_cart] + [item["product_id"] for item in guest_wishlist]
    )

    cart = await db.carts.find_one({"user_id": user_id})
    cart_items = normalize_cart_items(merge_cart_items(cart.get("items", []) if cart else [], guest_cart))
    if guest_cart:
        await _save_cart_items(user_id, cart_items, db)

    wishlist = await db.wishlists.find_one({"user_id": user_id})
    stored_wishlist = wishlist.get("items", []) if wishlist else []
    wishlist_items = _stamp_wishlist(merge_wishlist_items(stored_wishlist, guest_wishlist), stored_wishlist)
    if guest_wishlist:
        await _save_wishlist_items(user_id, wishlist_items, db)

    logger.info(f"Merged guest data for {user_id}: {len(guest_cart)} cart line(s), {len(guest_wishlist)} wishlist item(s)")

    return {
        "success": True,
        "message": "Guest cart merged",
        "data": {
            "cart": await populate_cart(cart_items, db),
            "wishlist": await populate_wishlist(wishlist_items, db),
        },
    }


# Wishlist

@router.get("/wishlist")
async def get_wishlist(
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get current user's wishlist, creating an empty one if it doesn't exist.
    """
    user_id = current_user["_id"]

    try:
        wishlist = await db.wishlists.find_one({"user_id": user_id})

        if not wishlist:
            wishlist = Wishlist(user_id=user_id).model_dump(exclude={"id"})
            await db.wishlists.insert_one(wishlist)

        lines = await populate_wishlist(wishlist.get("items", []), db)
    except PyMongoError as e:
        logger.error(f"Error loading wishlist for {user_id}: {str(e)}")
        lines = []

    return {"success": True, "data": lines}


@router.post("/wishlist")
async def save_wishlist(
    payload: ItemsPayload,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Replace the current user's wishlist.
    """
    entries = normalize_wishlist_items(_items_list(payload.items))
    _ensure_object_ids([entry["product_id"] for entry in entries])

    wishlist = await db.wishlists.find_one({"user_id": current_user["_id"]})
    items = _stamp_wishlist(entries, wishlist.get("items", []) if wishlist else [])
    await _save_wishlist_items(current_user["_id"], items, db)

    return {
        "success": True,
        "message": "Wishlist saved successfully",
        "data": {"items": await populate_wishlist(items, db)},
    }


@router.delete("/wishlist")
async def remove_from_wishlist(
    request: WishlistRemoveRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Remove one product from the wishlist.
    """
    wishlist = await db.wishlists.find_one({"user_id": current_user["_id"]})

    if not wishlist:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Wishlist not found"
        )

    items = [item for item in wishlist.get("items", []) if item["product_id"] != request.product_id]
    await _save_wishlist_items(current_user["_id"], items, db)

    return {
        "success": True,
        "message": "Item removed from wishlist successfully",
        "data": {"items": await populate_wishlist(items, db)},
    }


@router.post("/wishlist/purchase", status_code=status.HTTP_201_CREATED)
async def purchase_from_wishlist(
    request: WishlistPurchaseRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Order wishlist items directly. Stock is taken immediately and the items
    stay on the wishlist.
    """
    order_items, subtotal = await price_order_items(request.items, db)
    totals = compute_order_totals(
        subtotal,
        tax_rate=settings.wishlist_tax_rate,
        shipping_fee=settings.wishlist_shipping_fee,
        free_shipping_threshold=settings.wishlist_free_shipping_threshold,
    )

    await commit_stock(order_items, db)

    order = Order(
        user_id=current_user["_id"],
        items=order_items,
        shipping_address=request.shipping_address.to_address(),
        payment_method=request.payment_method,
        status=OrderStatus.PENDING,
        stock_committed=True,
        status_history=[history_entry(OrderStatus.PENDING.value, "Order created from wishlist", current_user["_id"])],
        **totals,
    )

    try:
        doc = await place_order(db, current_user, order, clear_cart=False)
    except PyMongoError:
        await restore_stock(order_items, db)
        raise

    return {
        "success": True,
        "message": "Order created successfully from wishlist",
        "data": {
            "order": order_to_response(doc),
            "purchased_items": len(order_items),
            "items_remain_in_wishlist": True,
        },
    }


# Product detail (declared last so it doesn't shadow the routes above)

@router.get("/{product_id}")
async def get_product(
    product_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """
    Get a product with up to three related products from its category.
    """
    if not validate_object_id(product_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid product ID"
        )

    product = await db.products.find_one({"_id": ObjectId(product_id)})

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    related = await db.products.find({
        "category": product.get("category"),
        "_id": {"$ne": product["_id"]},
        "published": True,
        "archived": False,
    }).limit(3).to_list(length=3)

    return {
        "success": True,
        "data": {
            "product": product_to_response(product),
            "related_products": [product_to_response(p) for p in related],
        },
    }
