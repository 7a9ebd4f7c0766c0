"""
Multi-step checkout

    ADDRESS -> PAYMENT_METHOD -> GATEWAY (online) -> DONE
                              -> SUMMARY (cash on delivery) -> DONE

Online payments create a Razorpay order on the server, hand it to a
caller-supplied payment handler (the Razorpay Checkout widget in a browser,
a stub in tests) and send the handler's result back for verification.
"""
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional
import logging
import time

from urbansprout.client.api import ApiError, SessionExpiredError
from urbansprout.client.session import StoreSession
from urbansprout.utils.validators import ADDRESS_SANITIZERS, REQUIRED_ADDRESS_FIELDS, missing_address_fields

logger = logging.getLogger(__name__)

PaymentHandler = Callable[[Dict[str, Any], Optional[str]], Awaitable[Optional[Dict[str, Any]]]]


class CheckoutStep(str, Enum):
    ADDRESS = "address"
    PAYMENT_METHOD = "payment_method"
    SUMMARY = "summary"
    GATEWAY = "gateway"
    DONE = "done"


class PaymentChoice(str, Enum):
    ONLINE = "online"
    COD = "cod"


class CheckoutError(Exception):
    """Checkout can't proceed; the message is meant for the shopper"""


class PaymentCancelledError(CheckoutError):
    """The shopper closed the payment window"""


class CheckoutFlow:
    """
    Drives one checkout for a StoreSession

    Args:
        session: The shopper's StoreSession
        payment_handler: async callable receiving (gateway_order, key_id) and
            returning the Razorpay handler response (razorpay_order_id,
            razorpay_payment_id, razorpay_signature). Returning None or
            raising PaymentCancelledError cancels the payment.
    """

    def __init__(self, session: StoreSession, payment_handler: Optional[PaymentHandler] = None):
        self.session = session
        self.payment_handler = payment_handler
        self.step = CheckoutStep.ADDRESS
        self.address: Dict[str, str] = {field: "" for field in REQUIRED_ADDRESS_FIELDS}
        self.payment_method: Optional[PaymentChoice] = None
        self.order: Optional[Dict[str, Any]] = None
        self._submitting = False

    # Steps

    def set_address(self, **fields: str):
        """Update address fields, stripping characters each field doesn't allow"""
        for field, value in fields.items():
            sanitizer = ADDRESS_SANITIZERS.get(field)
            if sanitizer is None:
                continue
            self.address[field] = sanitizer(value)

    def _check_ready(self):
        if not self.session.signed_in:
            raise CheckoutError("Please sign in to place an order")

        if not self.session.cart:
            raise CheckoutError("Your cart is empty")

        missing = missing_address_fields(self.address)
        if missing:
            raise CheckoutError(f"Please fill in all address fields: {', '.join(missing)}")

    def continue_to_payment(self):
        """Leave the address step once the address is complete"""
        self._check_ready()
        self.step = CheckoutStep.PAYMENT_METHOD

    def select_payment_method(self, method: PaymentChoice):
        if self.step != CheckoutStep.PAYMENT_METHOD:
            raise CheckoutError("Enter a shipping address first")
        self.payment_method = PaymentChoice(method)

    def back(self):
        """Return to the previous step"""
        if self.step in (CheckoutStep.SUMMARY, CheckoutStep.GATEWAY):
            self.step = CheckoutStep.PAYMENT_METHOD
        elif self.step == CheckoutStep.PAYMENT_METHOD:
            self.step = CheckoutStep.ADDRESS

    # Placing the order

    def _order_payload(self) -> Dict[str, Any]:
        return {
            "items": [
                {
                    "product_id": item["product_id"],
                    "quantity": item.get("quantity", 1),
                    "name": item.get("name"),
                    "price": item.get("price"),
                    "image": item.get("image"),
                }
                for item in self.session.cart
            ],
            "shipping_address": dict(self.address),
            "total": self.session.cart_total(),
        }

    async def submit(self) -> Optional[Dict[str, Any]]:
        """
        Place the order with the selected payment method.

        Online: runs the gateway payment and returns the verified order.
        Cash on delivery: moves to the summary step and returns None; call
        ``confirm`` to place the order.
        """
        if self._submitting:
            raise CheckoutError("Your order is already being placed")
        if self.step == CheckoutStep.DONE:
            raise CheckoutError("This order has already been placed")

        self._check_ready()

        if self.payment_method is None:
            raise CheckoutError("Please choose a payment method")

        if self.payment_method == PaymentChoice.COD:
            self.step = CheckoutStep.SUMMARY
            return None

        self._submitting = True
        try:
            return await self._pay_online()
        finally:
            self._submitting = False

    async def confirm(self) -> Dict[str, Any]:
        """Place a cash on delivery order from the summary step"""
        if self.step != CheckoutStep.SUMMARY:
            raise CheckoutError("Review your order before confirming")
        if self._submitting:
            raise CheckoutError("Your order is already being placed")

        self._check_ready()

        payload = self._order_payload()
        payload["notes"] = "Cash on Delivery order"

        self._submitting = True
        try:
            order = await self._call(self.session.api.create_cod_order(payload))
        finally:
            self._submitting = False

        return await self._finish(order)

    async def _pay_online(self) -> Dict[str, Any]:
        if self.payment_handler is None:
            raise CheckoutError("Online payment is not available")

        payload = self._order_payload()
        gateway = await self._call(self.session.api.create_payment_order(
            amount=payload["total"],
            receipt=f"order_{int(time.time() * 1000)}",
            notes={
                "customer_email": self.session.email,
                "items": payload["items"],
                "shipping_address": payload["shipping_address"],
            },
        ))

        self.step = CheckoutStep.GATEWAY
        try:
            result = await self.payment_handler(gateway["order"], gateway.get("key_id"))
        except PaymentCancelledError:
            self.step = CheckoutStep.PAYMENT_METHOD
            raise

        if not result:
            self.step = CheckoutStep.PAYMENT_METHOD
            raise PaymentCancelledError("Payment was cancelled")

        order = await self._call(self.session.api.verify_payment({
            "razorpay_order_id": result.get("razorpay_order_id"),
            "razorpay_payment_id": result.get("razorpay_payment_id"),
            "razorpay_signature": result.get("razorpay_signature"),
            "order_data": payload,
        }))

        return await self._finish(order)

    async def _call(self, request: Awaitable) -> Dict[str, Any]:
        try:
            return await request
        except SessionExpiredError as e:
            self.session.expire_session()
            raise CheckoutError("Your session has expired. Please sign in again.") from e
        except ApiError as e:
            raise CheckoutError(e.message) from e

    async def _finish(self, order: Dict[str, Any]) -> Dict[str, Any]:
        self.order = order
        self.step = CheckoutStep.DONE
        await self.session.clear_cart()
        logger.info(f"Order {order.get('order_number')} placed")
        return order
