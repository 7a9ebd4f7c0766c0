"""
Client-side cart and wishlist state

``StoreSession`` keeps the cart and wishlist the shopper sees, mirrors them to
the local cache, and pushes them to the server when signed in. The cache is
the fallback whenever the server can't be reached.
"""
from typing import Any, Dict, List, Optional
import logging

from urbansprout.client.api import ApiError, StoreApi
from urbansprout.client.cache import (
    GUEST_CART_KEY,
    GUEST_WISHLIST_KEY,
    TOKEN_KEY,
    USER_KEY,
    LocalCache,
    cart_key,
    wishlist_key,
)
from urbansprout.utils.cart import (
    cart_total,
    item_id,
    merge_cart_items,
    merge_wishlist_items,
    normalize_cart_items,
    normalize_wishlist_items,
)

logger = logging.getLogger(__name__)


def product_entry(product: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a product (store listing or API product) to a cart/wishlist entry"""
    images = product.get("images") or []
    price = product.get("current_price")
    if price is None:
        price = product.get("price", 0)

    return {
        "product_id": item_id(product),
        "name": product.get("name", ""),
        "price": float(price or 0),
        "image": product.get("image") or (images[0] if images else None),
        "stock": product.get("stock"),
    }


def _lines_to_entries(lines: List[Dict[str, Any]], with_quantity: bool) -> List[Dict[str, Any]]:
    """Turn populated server lines into local entries, dropping deleted products"""
    entries = []
    for line in lines:
        product = line.get("product")
        if not product:
            logger.warning(f"Dropping line for missing product {line.get('product_id')}")
            continue
        entry = product_entry({**product, "product_id": line.get("product_id") or product.get("id")})
        if with_quantity:
            entry["quantity"] = line.get("quantity", 1)
        entries.append(entry)
    return entries


class StoreSession:
    """
    Cart and wishlist of one shopper

    Args:
        api: StoreApi (its token decides whether the shopper is signed in)
        cache: LocalCache used for guest data and signed-in backups
        user: Signed-in user dict (needs "email"), None for guests
    """

    def __init__(self, api: StoreApi, cache: LocalCache, user: Optional[Dict[str, Any]] = None):
        self.api = api
        self.cache = cache
        self.user = user
        self.cart: List[Dict[str, Any]] = []
        self.wishlist: List[Dict[str, Any]] = []

    @property
    def signed_in(self) -> bool:
        return bool(self.user and self.user.get("email") and self.api.token)

    @property
    def email(self) -> Optional[str]:
        return self.user.get("email") if self.signed_in else None

    def expire_session(self):
        """Forget the token after the server rejected it"""
        logger.info("Session expired, clearing stored token")
        self.api.token = None
        self.cache.remove(TOKEN_KEY)
        self.cache.remove(USER_KEY)
        self.user = None

    # Loading

    async def initialize(self):
        """
        Load the cart and wishlist.

        Signed in: from the server, falling back to the per-user cache, then
        fold in whatever the shopper collected as a guest. Guest: from the
        guest cache keys.
        """
        if not self.signed_in:
            self.cart = self.cache.get(GUEST_CART_KEY, [])
            self.wishlist = self.cache.get(GUEST_WISHLIST_KEY, [])
            return

        server_reachable = True
        try:
            self.cart = _lines_to_entries(await self.api.get_cart(), with_quantity=True)
        except ApiError as e:
            logger.warning(f"Loading cart failed, using local backup: {e}")
            self.cart = self.cache.get(cart_key(self.email), [])
            server_reachable = False

        try:
            self.wishlist = _lines_to_entries(await self.api.get_wishlist(), with_quantity=False)
        except ApiError as e:
            logger.warning(f"Loading wishlist failed, using local backup: {e}")
            self.wishlist = self.cache.get(wishlist_key(self.email), [])
            server_reachable = False

        await self._merge_guest_data(server_reachable)

    async def _merge_guest_data(self, server_reachable: bool):
        guest_cart = self.cache.get(GUEST_CART_KEY, [])
        guest_wishlist = self.cache.get(GUEST_WISHLIST_KEY, [])

        if not guest_cart and not guest_wishlist:
            return

        merged = None
        if server_reachable:
            try:
                merged = await self.api.merge_guest(
                    normalize_cart_items(guest_cart),
                    normalize_wishlist_items(guest_wishlist)
                )
            except ApiError as e:
                logger.warning(f"Server merge of guest data failed, merging locally: {e}")

        if merged:
            self.cart = _lines_to_entries(merged.get("cart", []), with_quantity=True)
            self.wishlist = _lines_to_entries(merged.get("wishlist", []), with_quantity=False)
            self.cache.set(cart_key(self.email), self.cart)
            self.cache.set(wishlist_key(self.email), self.wishlist)
        else:
            # Guest keys are dropped below; the server must hold the merged result
            self.cart = merge_cart_items(self.cart, guest_cart)
            self.wishlist = merge_wishlist_items(self.wishlist, guest_wishlist)
            await self.save_cart()
            await self.save_wishlist()

        logger.info(f"Merged {len(guest_cart)} guest cart line(s) and {len(guest_wishlist)} wishlist item(s)")

        self.cache.remove(GUEST_CART_KEY)
        self.cache.remove(GUEST_WISHLIST_KEY)

    # Persistence

    async def save_cart(self):
        """
        Persist the cart: cache only for guests; cache backup then server
        when signed in. Server failures are logged and the backup kept.
        """
        if not self.signed_in:
            self.cache.set(GUEST_CART_KEY, self.cart)
            return

        self.cache.set(cart_key(self.email), self.cart)
        try:
            await self.api.save_cart(normalize_cart_items(self.cart))
        except ApiError as e:
            logger.warning(f"Saving cart to server failed: {e}")

    async def save_wishlist(self):
        if not self.signed_in:
            self.cache.set(GUEST_WISHLIST_KEY, self.wishlist)
            return

        self.cache.set(wishlist_key(self.email), self.wishlist)
        try:
            await self.api.save_wishlist(normalize_wishlist_items(self.wishlist))
        except ApiError as e:
            logger.warning(f"Saving wishlist to server failed: {e}")

    # Cart

    def _cart_line(self, product_id: str) -> Optional[Dict[str, Any]]:
        return next((item for item in self.cart if item_id(item) == product_id), None)

    async def add_to_cart(self, product: Dict[str, Any], quantity: int = 1) -> bool:
        """Add a product, summing into an existing line. False when out of stock."""
        if product.get("stock") == 0:
            return False

        entry = product_entry(product)
        entry["quantity"] = max(int(quantity), 1)
        self.cart = merge_cart_items(self.cart, [entry])
        await self.save_cart()
        return True

    async def remove_from_cart(self, product_id: str):
        self.cart = [item for item in self.cart if item_id(item) != product_id]
        await self.save_cart()

    async def update_quantity(self, product_id: str, quantity: int):
        """Set a line's quantity; zero or less removes the line"""
        if quantity <= 0:
            await self.remove_from_cart(product_id)
            return

        line = self._cart_line(product_id)
        if line is None:
            return

        self.cart = [
            {**item, "quantity": quantity} if item_id(item) == product_id else item
            for item in self.cart
        ]
        await self.save_cart()

    async def clear_cart(self):
        self.cart = []
        await self.save_cart()

    def cart_total(self) -> float:
        return round(cart_total(self.cart), 2)

    @property
    def cart_count(self) -> int:
        return sum(int(item.get("quantity") or 0) for item in self.cart)

    # Wishlist

    def is_in_wishlist(self, product_id: str) -> bool:
        return any(item_id(item) == product_id for item in self.wishlist)

    async def add_to_wishlist(self, product: Dict[str, Any]) -> bool:
        """Add a product; False when it is already there"""
        entry = product_entry(product)
        if self.is_in_wishlist(entry["product_id"]):
            return False

        self.wishlist = self.wishlist + [entry]
        await self.save_wishlist()
        return True

    async def remove_from_wishlist(self, product_id: str):
        self.wishlist = [item for item in self.wishlist if item_id(item) != product_id]
        await self.save_wishlist()

    async def clear_wishlist(self):
        self.wishlist = []
        await self.save_wishlist()

    async def buy_now_from_wishlist(self, product_id: str) -> bool:
        """Replace the cart with this one wishlist item; the wishlist is kept"""
        entry = next((item for item in self.wishlist if item_id(item) == product_id), None)
        if entry is None:
            return False

        self.cart = [{**entry, "quantity": 1}]
        await self.save_cart()
        return True

    async def buy_all_from_wishlist(self) -> int:
        """
        Replace the cart with every in-stock wishlist item.

        Returns the number of items skipped for being out of stock.
        """
        in_stock = [item for item in self.wishlist if (item.get("stock") or 0) > 0]
        self.cart = [{**item, "quantity": 1} for item in in_stock]
        await self.save_cart()
        return len(self.wishlist) - len(in_stock)
