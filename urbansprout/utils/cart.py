"""Cart and wishlist reconciliation helpers.

Shared by the store endpoints and by ``urbansprout.client`` so that a guest
cart merged on the device and one merged on the server end up identical.
Items are plain dicts; an item's identity is whichever of ``product_id``,
``product``, ``productId``, ``id`` or ``_id`` it carries, in that order.
"""

from typing import Any, Dict, Iterable, List, Optional

ID_KEYS = ("product_id", "product", "productId", "id", "_id")
LARGE_DATA_PLACEHOLDER = "large_data_removed"


def item_id(item: Dict[str, Any]) -> Optional[str]:
    """Return the product id carried by a cart or wishlist entry"""
    for key in ID_KEYS:
        value = item.get(key)
        if isinstance(value, dict):
            value = value.get("_id") or value.get("id")
        if value:
            return str(value)
    return None


def _quantity(item: Dict[str, Any]) -> int:
    try:
        quantity = int(item.get("quantity") or 1)
    except (TypeError, ValueError):
        quantity = 1
    return max(quantity, 1)


def normalize_cart_items(items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Reduce any accepted cart item shape to ``{"product_id", "quantity"}``.

    Entries without an id are dropped and repeated ids are summed.
    """
    normalized: Dict[str, int] = {}
    for item in items:
        pid = item_id(item)
        if not pid:
            continue
        normalized[pid] = normalized.get(pid, 0) + _quantity(item)
    return [{"product_id": pid, "quantity": qty} for pid, qty in normalized.items()]


def normalize_wishlist_items(items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Reduce wishlist entries to ``{"product_id"}``, first occurrence wins"""
    seen = []
    for item in items:
        pid = item_id(item)
        if pid and pid not in seen:
            seen.append(pid)
    return [{"product_id": pid} for pid in seen]


def merge_cart_items(
    current: Iterable[Dict[str, Any]],
    incoming: Iterable[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """
    Merge a guest cart into a user cart.

    Quantities of products present in both are summed; products only in the
    guest cart are appended in guest order. Extra keys of the
    current entry (name, price, image...) are preserved. Inputs are not
    mutated.
    """
    merged = [dict(item) for item in current]
    index = {item_id(item): item for item in merged}

    for guest_item in incoming:
        pid = item_id(guest_item)
        if not pid:
            continue
        existing = index.get(pid)
        if existing is not None:
            existing["quantity"] = _quantity(existing) + _quantity(guest_item)
        else:
            entry = dict(guest_item)
            entry["quantity"] = _quantity(guest_item)
            merged.append(entry)
            index[pid] = entry

    return merged


def merge_wishlist_items(
    current: Iterable[Dict[str, Any]],
    incoming: Iterable[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """Union of two wishlists by product id, current entries first"""
    merged = [dict(item) for item in current]
    seen = {item_id(item) for item in merged}

    for guest_item in incoming:
        pid = item_id(guest_item)
        if pid and pid not in seen:
            merged.append(dict(guest_item))
            seen.add(pid)

    return merged


def cart_total(items: Iterable[Dict[str, Any]]) -> float:
    """Sum of price x quantity, missing values count as zero"""
    return sum(float(item.get("price") or 0) * int(item.get("quantity") or 0) for item in items)


def compute_order_totals(
    subtotal: float,
    tax_rate: float = 0.0,
    shipping_fee: float = 0.0,
    free_shipping_threshold: float = 0.0
) -> Dict[str, float]:
    """
    Price an order.

    Shipping is waived once the subtotal exceeds ``free_shipping_threshold``.
    All amounts are rounded to 2 decimals.
    """
    shipping = 0.0 if subtotal > free_shipping_threshold else shipping_fee
    tax = subtotal * tax_rate
    return {
        "subtotal": round(subtotal, 2),
        "tax": round(tax, 2),
        "shipping": round(shipping, 2),
        "total": round(subtotal + tax + shipping, 2),
    }


def _clean_value(value: Any, limit: int) -> Any:
    if isinstance(value, str) and len(value) > limit:
        return LARGE_DATA_PLACEHOLDER
    return value


def clean_gateway_notes(notes: Optional[Dict[str, Any]], limit: int = 1000) -> Dict[str, Any]:
    """
    Strip oversized values from payment gateway notes.

    Razorpay caps notes at a few KB, and carts routinely carry base64 product
    images. Long strings are replaced at the top level and one level into
    nested dicts and lists.
    """
    cleaned: Dict[str, Any] = {}
    for key, value in (notes or {}).items():
        if isinstance(value, dict):
            cleaned[key] = {k: _clean_value(v, limit) for k, v in value.items()}
        elif isinstance(value, list):
            cleaned[key] = [
                {k: _clean_value(v, limit) for k, v in entry.items()}
                if isinstance(entry, dict) else _clean_value(entry, limit)
                for entry in value
            ]
        else:
            cleaned[key] = _clean_value(value, limit)
    return cleaned
