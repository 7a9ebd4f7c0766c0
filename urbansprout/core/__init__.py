"""Core utilities for the application"""

from urbansprout.core.security import create_access_token, verify_token, token_account_id, is_admin_token
from urbansprout.core.email import (
    send_order_confirmation_email,
    send_payment_confirmation_email,
    send_order_status_update_email,
)
from urbansprout.core.razorpay_client import create_gateway_order, verify_payment_signature

__all__ = [
    "create_access_token",
    "verify_token",
    "token_account_id",
    "is_admin_token",
    "send_order_confirmation_email",
    "send_payment_confirmation_email",
    "send_order_status_update_email",
    "create_gateway_order",
    "verify_payment_signature",
]
