"""
Tests for the client checkout flow (address, payment method, gateway, COD)
"""
import asyncio

import httpx
import pytest

from urbansprout.client import (
    CheckoutError,
    CheckoutFlow,
    CheckoutStep,
    LocalCache,
    PaymentCancelledError,
    PaymentChoice,
    StoreSession,
)
from urbansprout.client.cache import TOKEN_KEY
from urbansprout.client.session import product_entry

from conftest import PRODUCT_ID
from test_client_session import EMAIL, FakeServer, api_product, make_api, run

ADDRESS = {
    "full_name": "Asha Menon",
    "address": "12 MG Road",
    "city": "Kochi",
    "state": "Kerala",
    "pincode": "682001",
    "country": "India",
    "phone": "+91 98470 12345",
}

PAID_ORDER = {"id": "66a0", "order_number": "ORD-20240601120000-A1B2C3", "status": "processing"}
COD_ORDER = {"id": "66a1", "order_number": "ORD-20240601120500-D4E5F6", "status": "pending"}


def checkout_server():
    routes = {
        ("POST", "/api/store/cart"): (200, {"success": True, "data": []}),
        ("POST", "/api/payments/create-order"): (
            200, {"success": True, "data": {"id": "order_PQ1", "amount": 129800}, "key_id": "rzp_test_key"}
        ),
        ("POST", "/api/payments/verify-payment"): (200, {"success": True, "data": {"order": PAID_ORDER}}),
        ("POST", "/api/orders"): (201, {"success": True, "data": {"order": COD_ORDER}}),
    }
    return FakeServer(routes)


def make_flow(server, handler=None, signed_in=True):
    cache = LocalCache()
    cache.set(TOKEN_KEY, "jwt-token")
    session = StoreSession(
        make_api(server, token="jwt-token" if signed_in else None),
        cache,
        user={"email": EMAIL} if signed_in else None,
    )
    session.cart = [{**product_entry(api_product()), "quantity": 2}]
    return CheckoutFlow(session, payment_handler=handler)


def ready_flow(server, handler=None, method=PaymentChoice.ONLINE):
    flow = make_flow(server, handler)
    flow.set_address(**ADDRESS)
    flow.continue_to_payment()
    flow.select_payment_method(method)
    return flow


class TestAddressStep:

    def test_sanitizes_input(self):
        flow = make_flow(checkout_server())

        flow.set_address(pincode="682-001", city="Kochi1", phone="+91 (98470)", unknown="x")

        assert flow.address["pincode"] == "682001"
        assert flow.address["city"] == "Kochi"
        assert flow.address["phone"] == "+91 98470"
        assert "unknown" not in flow.address

    def test_missing_fields(self):
        flow = make_flow(checkout_server())
        flow.set_address(full_name="Asha Menon", address="12 MG Road")

        with pytest.raises(CheckoutError, match="city, state, pincode, country, phone"):
            flow.continue_to_payment()

        assert flow.step == CheckoutStep.ADDRESS

    def test_requires_sign_in(self):
        flow = make_flow(checkout_server(), signed_in=False)
        flow.set_address(**ADDRESS)

        with pytest.raises(CheckoutError, match="Please sign in"):
            flow.continue_to_payment()

    def test_requires_cart(self):
        flow = make_flow(checkout_server())
        flow.session.cart = []
        flow.set_address(**ADDRESS)

        with pytest.raises(CheckoutError, match="Your cart is empty"):
            flow.continue_to_payment()

    def test_payment_method_needs_address_first(self):
        flow = make_flow(checkout_server())

        with pytest.raises(CheckoutError):
            flow.select_payment_method(PaymentChoice.COD)

    def test_back(self):
        flow = ready_flow(checkout_server())
        flow.back()

        assert flow.step == CheckoutStep.ADDRESS


class TestOnlinePayment:

    def test_successful_payment(self):
        server = checkout_server()
        seen = {}

        async def handler(order, key_id):
            seen.update(order=order, key_id=key_id)
            return {
                "razorpay_order_id": order["id"],
                "razorpay_payment_id": "pay_AB12",
                "razorpay_signature": "sig",
            }

        flow = ready_flow(server, handler)

        order = run(flow.submit())

        assert order == PAID_ORDER
        assert flow.step == CheckoutStep.DONE
        assert flow.session.cart == []
        assert seen == {"order": {"id": "order_PQ1", "amount": 129800}, "key_id": "rzp_test_key"}

        created = server.sent("POST", "/api/payments/create-order")[0]
        assert created["amount"] == 1298.0
        assert created["receipt"].startswith("order_")
        assert created["notes"]["customer_email"] == EMAIL

        verified = server.sent("POST", "/api/payments/verify-payment")[0]
        assert verified["razorpay_payment_id"] == "pay_AB12"
        assert verified["order_data"]["total"] == 1298.0
        assert verified["order_data"]["items"][0]["product_id"] == PRODUCT_ID
        assert verified["order_data"]["shipping_address"]["pincode"] == "682001"

        # cart cleared on the server after the order
        assert server.sent("POST", "/api/store/cart")[-1] == {"items": []}

    def test_dismissed_payment(self):
        async def handler(order, key_id):
            return None

        server = checkout_server()
        flow = ready_flow(server, handler)

        with pytest.raises(PaymentCancelledError):
            run(flow.submit())

        assert flow.step == CheckoutStep.PAYMENT_METHOD
        assert len(flow.session.cart) == 1
        assert server.sent("POST", "/api/payments/verify-payment") == []

    def test_handler_cancellation(self):
        async def handler(order, key_id):
            raise PaymentCancelledError("Payment window closed")

        flow = ready_flow(checkout_server(), handler)

        with pytest.raises(PaymentCancelledError, match="Payment window closed"):
            run(flow.submit())

        assert flow.step == CheckoutStep.PAYMENT_METHOD

    def test_verification_failure(self):
        async def handler(order, key_id):
            return {"razorpay_order_id": "order_PQ1", "razorpay_payment_id": "pay_1", "razorpay_signature": "bad"}

        server = checkout_server()
        server.routes[("POST", "/api/payments/verify-payment")] = (400, {"detail": "Invalid payment signature"})
        flow = ready_flow(server, handler)

        with pytest.raises(CheckoutError, match="Invalid payment signature"):
            run(flow.submit())

        assert flow.order is None
        assert len(flow.session.cart) == 1

    def test_expired_session(self):
        async def handler(order, key_id):
            return {}

        server = checkout_server()
        server.routes[("POST", "/api/payments/create-order")] = (401, {"detail": "Token is not valid"})
        flow = ready_flow(server, handler)

        with pytest.raises(CheckoutError, match="Your session has expired"):
            run(flow.submit())

        assert not flow.session.signed_in
        assert TOKEN_KEY not in flow.session.cache

    def test_no_handler(self):
        flow = ready_flow(checkout_server())

        with pytest.raises(CheckoutError, match="Online payment is not available"):
            run(flow.submit())

    def test_cannot_submit_twice(self):
        async def handler(order, key_id):
            return {"razorpay_order_id": "order_PQ1", "razorpay_payment_id": "pay_1", "razorpay_signature": "s"}

        flow = ready_flow(checkout_server(), handler)
        run(flow.submit())

        with pytest.raises(CheckoutError, match="already been placed"):
            run(flow.submit())

    def test_concurrent_submit_rejected(self):
        release = None

        async def handler(order, key_id):
            await release.wait()
            return {"razorpay_order_id": "order_PQ1", "razorpay_payment_id": "pay_1", "razorpay_signature": "s"}

        flow = ready_flow(checkout_server(), handler)

        async def scenario():
            nonlocal release
            release = asyncio.Event()
            first = asyncio.ensure_future(flow.submit())
            while flow.step != CheckoutStep.GATEWAY:
                await asyncio.sleep(0)
            with pytest.raises(CheckoutError, match="already being placed"):
                await flow.submit()
            release.set()
            return await first

        assert run(scenario()) == PAID_ORDER


class TestCashOnDelivery:

    def test_summary_then_confirm(self):
        server = checkout_server()
        flow = ready_flow(server, method=PaymentChoice.COD)

        assert run(flow.submit()) is None
        assert flow.step == CheckoutStep.SUMMARY
        assert server.sent("POST", "/api/orders") == []

        order = run(flow.confirm())

        assert order == COD_ORDER
        assert flow.step == CheckoutStep.DONE
        assert flow.session.cart == []
        payload = server.sent("POST", "/api/orders")[0]
        assert payload["notes"] == "Cash on Delivery order"
        assert payload["total"] == 1298.0
        assert payload["items"][0]["quantity"] == 2

    def test_confirm_needs_summary(self):
        flow = ready_flow(checkout_server(), method=PaymentChoice.COD)

        with pytest.raises(CheckoutError):
            run(flow.confirm())

    def test_choose_method_first(self):
        flow = make_flow(checkout_server())
        flow.set_address(**ADDRESS)
        flow.continue_to_payment()

        with pytest.raises(CheckoutError, match="Please choose a payment method"):
            run(flow.submit())

    def test_server_rejection_keeps_cart(self):
        server = checkout_server()
        server.routes[("POST", "/api/orders")] = (400, {"detail": "Insufficient stock for Monstera Deliciosa"})
        flow = ready_flow(server, method=PaymentChoice.COD)
        run(flow.submit())

        with pytest.raises(CheckoutError, match="Insufficient stock"):
            run(flow.confirm())

        assert flow.step == CheckoutStep.SUMMARY
        assert len(flow.session.cart) == 1

    def test_back_from_summary(self):
        flow = ready_flow(checkout_server(), method=PaymentChoice.COD)
        run(flow.submit())

        flow.back()

        assert flow.step == CheckoutStep.PAYMENT_METHOD

    def test_network_failure(self):
        server = checkout_server()
        server.routes[("POST", "/api/orders")] = httpx.ConnectError("offline")
        flow = ready_flow(server, method=PaymentChoice.COD)
        run(flow.submit())

        with pytest.raises(CheckoutError, match="Network error"):
            run(flow.confirm())
