"""Python client for the UrbanSprout store: cart, wishlist and checkout"""

from urbansprout.client.api import StoreApi, ApiError, SessionExpiredError
from urbansprout.client.cache import LocalCache
from urbansprout.client.session import StoreSession
from urbansprout.client.checkout import (
    CheckoutFlow,
    CheckoutStep,
    PaymentChoice,
    CheckoutError,
    PaymentCancelledError,
)

__all__ = [
    "StoreApi",
    "ApiError",
    "SessionExpiredError",
    "LocalCache",
    "StoreSession",
    "CheckoutFlow",
    "CheckoutStep",
    "PaymentChoice",
    "CheckoutError",
    "PaymentCancelledError",
]
