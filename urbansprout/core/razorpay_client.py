"""Razorpay integration for online payments"""

import logging
import time
from typing import Dict, Optional

import razorpay
from razorpay.errors import BadRequestError, GatewayError, ServerError, SignatureVerificationError

from urbansprout.config import settings

logger = logging.getLogger(__name__)

_client: Optional[razorpay.Client] = None


def gateway_configured() -> bool:
    """Both Razorpay keys are present"""
    return bool(settings.razorpay_key_id and settings.razorpay_key_secret)


def get_razorpay_client() -> razorpay.Client:
    """Return the shared Razorpay client, creating it on first use"""
    global _client
    if _client is None:
        _client = razorpay.Client(
            auth=(settings.razorpay_key_id, settings.razorpay_key_secret)
        )
    return _client


def to_subunits(amount: float) -> int:
    """Convert rupees to paise"""
    return int(round(amount * 100))


async def create_gateway_order(
    amount: float,
    currency: str = None,
    receipt: Optional[str] = None,
    notes: Optional[Dict] = None
) -> Dict:
    """
    Create a Razorpay order

    Args:
        amount: Amount in rupees (converted to paise for the gateway)
        currency: ISO currency code (default: settings.razorpay_currency)
        receipt: Merchant receipt id, generated when omitted
        notes: Already-cleaned notes to attach to the order

    Returns:
        Razorpay order dictionary (id, amount, currency, receipt, status, ...)
    """
    options = {
        "amount": to_subunits(amount),
        "currency": currency or settings.razorpay_currency,
        "receipt": receipt or f"receipt_{int(time.time() * 1000)}",
        "notes": notes or {},
        "payment_capture": 1,
    }

    try:
        order = get_razorpay_client().order.create(data=options)
        logger.info(f"Created Razorpay order: {order.get('id')}")
        return order
    except BadRequestError as e:
        logger.error(f"Razorpay rejected order creation: {str(e)}")
        raise
    except (ServerError, GatewayError) as e:
        logger.error(f"Razorpay error creating order: {str(e)}")
        raise


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """
    Verify the checkout signature returned to the browser

    Returns:
        True when the signature matches, False otherwise
    """
    try:
        get_razorpay_client().utility.verify_payment_signature({
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        })
        return True
    except SignatureVerificationError as e:
        logger.warning(f"Razorpay signature verification failed for {order_id}: {str(e)}")
        return False
