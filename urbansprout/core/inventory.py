"""Catalogue pricing and stock movements"""

import logging
from typing import List, Tuple

from bson import ObjectId
from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from urbansprout.models.product import Product
from urbansprout.schemas.store import ProductResponse
from urbansprout.utils.validators import validate_object_id

logger = logging.getLogger(__name__)


def product_from_document(doc: dict) -> Product:
    """Build a Product model from a raw products document"""
    data = dict(doc)
    data["_id"] = str(doc["_id"])
    discount = data.get("applied_discount")
    if discount and discount.get("discount_id") is not None:
        data["applied_discount"] = {**discount, "discount_id": str(discount["discount_id"])}
    return Product(**data)


def product_to_response(doc: dict) -> ProductResponse:
    """Convert database product document to ProductResponse"""
    product = product_from_document(doc)
    return ProductResponse(
        id=product.id,
        name=product.name,
        category=product.category,
        description=product.description,
        sku=product.sku,
        regular_price=product.regular_price,
        discount_price=product.discount_price,
        current_price=product.current_price,
        discount_percentage=product.discount_percentage,
        stock=product.stock,
        stock_status=product.stock_status.value,
        images=product.images,
        featured=product.featured,
        rating=product.rating,
        reviews=product.reviews,
        tags=product.tags,
        created_at=product.created_at,
    )


async def price_order_items(items: list, db: AsyncIOMotorDatabase) -> Tuple[List[dict], float]:
    """
    Resolve checkout lines against the catalogue.

    Prices come from the product's current price, never from the client.
    Returns (order_items, subtotal).
    """
    order_items = []
    subtotal = 0.0

    for item in items:
        if not validate_object_id(item.product_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Product not found: {item.product_id}"
            )

        doc = await db.products.find_one({"_id": ObjectId(item.product_id)})
        if not doc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Product not found: {item.product_id}"
            )

        product = product_from_document(doc)

        if not product.purchasable:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Product {product.name} is not available for purchase"
            )

        if product.stock < item.quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Insufficient stock for {product.name}. Available: {product.stock}, Requested: {item.quantity}"
            )

        price = product.current_price
        order_items.append({
            "product_id": product.id,
            "name": product.name,
            "price": price,
            "quantity": item.quantity,
            "image": product.primary_image,
        })
        subtotal += price * item.quantity

    return order_items, subtotal


async def commit_stock(order_items: List[dict], db: AsyncIOMotorDatabase):
    """
    Take ordered quantities off the shelf.

    Each decrement only applies while enough stock remains; if any line
    fails, the lines already decremented are put back and 400 is raised.
    """
    committed = []

    for item in order_items:
        result = await db.products.update_one(
            {"_id": ObjectId(item["product_id"]), "stock": {"$gte": item["quantity"]}},
            {"$inc": {"stock": -item["quantity"], "sales_count": item["quantity"]}}
        )

        if result.modified_count == 0:
            logger.warning(f"Stock commit failed for {item['name']}, rolling back {len(committed)} line(s)")
            await restore_stock(committed, db)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Insufficient stock for {item['name']}"
            )

        committed.append(item)
        logger.info(f"Stock reduced for {item['name']} by {item['quantity']}")


async def restore_stock(order_items: List[dict], db: AsyncIOMotorDatabase):
    """Put ordered quantities back on the shelf"""
    for item in order_items:
        if not validate_object_id(item.get("product_id")):
            logger.warning(f"Skipping stock restore for unknown product {item.get('product_id')}")
            continue

        await db.products.update_one(
            {"_id": ObjectId(item["product_id"])},
            {"$inc": {"stock": item["quantity"], "sales_count": -item["quantity"]}}
        )
        logger.info(f"Stock restored for {item.get('name')} by {item['quantity']}")
