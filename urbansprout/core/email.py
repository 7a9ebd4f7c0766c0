"""Email service for order and payment notifications"""

import aiosmtplib
from datetime import datetime, timedelta
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from urbansprout.config import settings
import logging

logger = logging.getLogger(__name__)

DELIVERY_ESTIMATE_DAYS = 7


async def send_email(to_email: str, subject: str, html_content: str, text_content: str = None):
    """
    Send an email using SMTP

    Args:
        to_email: Recipient email address
        subject: Email subject
        html_content: HTML content of the email
        text_content: Plain text content (optional)
    """
    message = MIMEMultipart("alternative")
    message["From"] = settings.email_from
    message["To"] = to_email
    message["Subject"] = subject

    if text_content:
        message.attach(MIMEText(text_content, "plain"))
    message.attach(MIMEText(html_content, "html"))

    try:
        await aiosmtplib.send(
            message,
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user or None,
            password=settings.smtp_password or None,
            start_tls=True,
        )
        logger.info(f"Email sent successfully to {to_email}")
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {str(e)}")
        raise


def wants_customer_email(user: Optional[dict]) -> bool:
    """Customer emails go to non-admin users with an address on file"""
    return bool(user and user.get("email") and user.get("role") != "admin")


def format_shipping_address(address: dict) -> str:
    parts = [
        address.get("full_name"),
        address.get("address"),
        address.get("city"),
        address.get("state"),
        address.get("postal_code"),
        address.get("country"),
    ]
    return ", ".join(p for p in parts if p)


def _items_rows(items: list) -> str:
    return "".join(
        f"<tr><td>{escape(str(item.get('name', 'Plant')))}</td>"
        f"<td>{item.get('quantity', 1)}</td>"
        f"<td>&#8377;{item.get('price', 0):.2f}</td></tr>"
        for item in items
    )


async def send_order_confirmation_email(email: str, name: str, order: dict):
    """
    Send the order confirmation email

    Args:
        email: Customer email address
        name: Customer display name
        order: Order document as stored in the database
    """
    estimated = (datetime.utcnow() + timedelta(days=DELIVERY_ESTIMATE_DAYS)).strftime("%d %b %Y")
    cod = order.get("payment_method") == "Cash on Delivery"
    payment_status = "Pending - Pay on Delivery" if cod else "Paid"
    address = format_shipping_address(order.get("shipping_address") or {})

    subject = f"Order Confirmed - #{order['order_number']}"

    text_content = f"""
    Hello {name or 'there'},

    Thank you for shopping with UrbanSprout! Your order #{order['order_number']} has been placed.

    Total: {order.get('total', 0):.2f}
    Payment: {order.get('payment_method')} ({payment_status})
    Ship to: {address}
    Estimated delivery: {estimated}

    UrbanSprout Team
    """

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; color: #333;">
        <h2>Thank you for your order, {escape(name or 'there')}!</h2>
        <p>Order <strong>#{order['order_number']}</strong></p>
        <table>
            <tr><th>Item</th><th>Qty</th><th>Price</th></tr>
            {_items_rows(order.get('items', []))}
        </table>
        <p>Total: <strong>&#8377;{order.get('total', 0):.2f}</strong></p>
        <p>Payment: {order.get('payment_method')} ({payment_status})</p>
        <p>Ship to: {escape(address)}</p>
        <p>Estimated delivery: {estimated}</p>
        <p>UrbanSprout Team</p>
    </body>
    </html>
    """

    await send_email(email, subject, html_content, text_content)


async def send_payment_confirmation_email(email: str, name: str, order: dict, transaction_id: str):
    """Send the payment receipt for an online payment"""
    subject = f"Payment Received - #{order['order_number']}"

    text_content = f"""
    Hello {name or 'there'},

    We received your payment of {order.get('total', 0):.2f} for order #{order['order_number']}.
    Transaction ID: {transaction_id}

    UrbanSprout Team
    """

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; color: #333;">
        <h2>Payment received</h2>
        <p>Hello {escape(name or 'there')},</p>
        <p>We received <strong>&#8377;{order.get('total', 0):.2f}</strong> for order
        <strong>#{order['order_number']}</strong>.</p>
        <p>Transaction ID: {escape(transaction_id)}</p>
        <p>Paid on {datetime.utcnow().strftime("%d %b %Y %H:%M")} UTC</p>
    </body>
    </html>
    """

    await send_email(email, subject, html_content, text_content)


async def send_order_status_update_email(email: str, name: str, order: dict, status: str):
    """Tell the customer their order moved to a new status"""
    subject = f"Order #{order['order_number']} is now {status}"

    text_content = f"""
    Hello {name or 'there'},

    Your order #{order['order_number']} status has been updated to: {status.upper()}.

    UrbanSprout Team
    """

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; color: #333;">
        <h2>Order update</h2>
        <p>Hello {escape(name or 'there')},</p>
        <p>Your order <strong>#{order['order_number']}</strong> is now
        <strong>{status.upper()}</strong>.</p>
        <table>
            <tr><th>Item</th><th>Qty</th><th>Price</th></tr>
            {_items_rows(order.get('items', []))}
        </table>
    </body>
    </html>
    """

    await send_email(email, subject, html_content, text_content)
