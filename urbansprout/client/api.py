"""
HTTP wrapper around the UrbanSprout REST API

Every call goes through ``StoreApi.api_call``, which adds the bearer token and
turns failures into ``ApiError``. Responses that mean the session is gone
(401, or the auth messages the server uses) raise ``SessionExpiredError``.
"""
from typing import Any, Dict, List, Optional
import logging

import httpx

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGES = (
    "User not found",
    "Token is not valid",
    "Access denied. No token provided.",
)


class ApiError(Exception):
    """A request failed or the server answered with success=false"""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class SessionExpiredError(ApiError):
    """The server no longer accepts the stored token"""


def _error_message(payload: Dict[str, Any], status_code: int) -> str:
    detail = payload.get("detail") or payload.get("message")
    if isinstance(detail, list):
        # FastAPI validation errors
        detail = "; ".join(str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail)
    return str(detail) if detail else f"Request failed with status {status_code}"


class StoreApi:
    """
    Client for the store, checkout and order endpoints

    Args:
        base_url: Server root, e.g. http://localhost:8000
        token: JWT issued by the auth backend
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.transport = transport
        self.timeout = timeout

    @property
    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def api_call(self, path: str, method: str = "GET", json: Optional[Any] = None) -> Dict[str, Any]:
        """
        Perform a request and return the decoded JSON body

        Raises:
            SessionExpiredError: the token was rejected
            ApiError: network failure, non-2xx status or success=false
        """
        async with httpx.AsyncClient(
            base_url=self.base_url,
            transport=self.transport,
            timeout=self.timeout
        ) as client:
            try:
                response = await client.request(method, path, json=json, headers=self._headers)
            except httpx.HTTPError as e:
                logger.error(f"{method} {path} failed: {e}")
                raise ApiError(f"Network error: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not isinstance(payload, dict):
            payload = {"data": payload}

        message = _error_message(payload, response.status_code)

        if response.status_code == 401 or (response.is_error and message in SESSION_EXPIRED_MESSAGES):
            logger.warning(f"{method} {path}: session expired ({message})")
            raise SessionExpiredError(message, response.status_code, payload)

        if response.is_error or payload.get("success") is False:
            logger.error(f"{method} {path} returned {response.status_code}: {message}")
            raise ApiError(message, response.status_code, payload)

        return payload

    # Cart and wishlist

    async def get_cart(self) -> List[Dict]:
        return (await self.api_call("/api/store/cart")).get("data", [])

    async def save_cart(self, items: List[Dict]) -> Dict:
        return await self.api_call("/api/store/cart", "POST", {"items": items})

    async def get_wishlist(self) -> List[Dict]:
        return (await self.api_call("/api/store/wishlist")).get("data", [])

    async def save_wishlist(self, items: List[Dict]) -> Dict:
        return await self.api_call("/api/store/wishlist", "POST", {"items": items})

    async def merge_guest(self, cart: List[Dict], wishlist: List[Dict]) -> Dict:
        """Merge guest data into the account; returns {"cart", "wishlist"}"""
        response = await self.api_call("/api/store/cart/merge", "POST", {"cart": cart, "wishlist": wishlist})
        return response.get("data", {})

    # Checkout

    async def create_payment_order(
        self,
        amount: float,
        receipt: Optional[str] = None,
        notes: Optional[Dict] = None
    ) -> Dict:
        """Returns {"order": <gateway order>, "key_id": <public key>}"""
        response = await self.api_call(
            "/api/payments/create-order",
            "POST",
            {"amount": amount, "receipt": receipt, "notes": notes or {}}
        )
        return {"order": response.get("data", {}), "key_id": response.get("key_id")}

    async def verify_payment(self, payload: Dict) -> Dict:
        response = await self.api_call("/api/payments/verify-payment", "POST", payload)
        return response.get("data", {}).get("order", {})

    async def create_cod_order(self, payload: Dict) -> Dict:
        response = await self.api_call("/api/orders", "POST", payload)
        return response.get("data", {}).get("order", {})
