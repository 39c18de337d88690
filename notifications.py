"""
Order emails

Templates are plain functions of an order document. ``EmailSender`` delivers over
SMTP, or only logs when no credentials are configured. Sending never raises: the
result is a bool and failures are logged, so the notify_* jobs are safe to run as
background tasks after a response has gone out.
"""

import os
import smtplib
from datetime import datetime, timezone
from email.mime.text import MIMEText
from html import escape
from typing import Any, Dict, Optional

from logging_config import get_logger
from schemas import DEFAULT_STORE_NAME

logger = get_logger(__name__)

SUPPORT_PHONE = "+94 (70) 160-4885"
BRAND_COLOR = "#db2777"


class EmailSender:
    def __init__(self, user: Optional[str], password: Optional[str], host: str = "smtp.gmail.com", port: int = 465, timeout: float = 10.0):
        self.user = user
        self.password = password
        self.host = host
        self.port = port
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "EmailSender":
        return cls(
            user=os.getenv("EMAIL_USER"),
            password=os.getenv("EMAIL_PASS"),
            host=os.getenv("EMAIL_HOST", "smtp.gmail.com"),
            port=int(os.getenv("EMAIL_PORT", "465")),
        )

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    def send_email(self, to: str, subject: str, html: str) -> bool:
        if not self.configured:
            logger.info("mock_email", to=to, subject=subject, hint="set EMAIL_USER and EMAIL_PASS for real emails")
            return True

        message = MIMEText(html, "html", "utf-8")
        message["Subject"] = subject
        message["From"] = self.user
        message["To"] = to

        try:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                server.login(self.user, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("email_failed", to=to, subject=subject, error=str(e))
            return False

        logger.info("email_sent", to=to, subject=subject)
        return True


email_sender = EmailSender.from_env()


def get_email_sender() -> EmailSender:
    return email_sender


# ---------- Templates ----------

def _money(amount: Any) -> str:
    return f"Rs{amount}"


def _order_date(order: Dict[str, Any]) -> datetime:
    return order.get("created_at") or datetime.now(timezone.utc)


def customer_confirmation_html(order: Dict[str, Any], store_name: str = DEFAULT_STORE_NAME) -> str:
    customer = order["customer"]
    created = _order_date(order)
    rows = "".join(
        f"""
                        <tr>
                            <td style="padding: 10px; border-bottom: 1px solid #e5e7eb;">{escape(str(item["name"]))}</td>
                            <td style="padding: 10px; text-align: center; border-bottom: 1px solid #e5e7eb;">{item["quantity"]}</td>
                            <td style="padding: 10px; text-align: right; border-bottom: 1px solid #e5e7eb;">{_money(item["price"])}</td>
                        </tr>"""
        for item in order["items"]
    )
    return f"""
            <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 10px;">
                <div style="text-align: center; margin-bottom: 20px;">
                    <h1 style="color: {BRAND_COLOR}; margin: 0;">{escape(store_name)}</h1>
                    <p style="color: #666; font-size: 14px;">Thank you for your order!</p>
                </div>

                <div style="margin-bottom: 20px; padding: 15px; background-color: #f9fafb; border-radius: 8px;">
                    <p style="margin: 5px 0;"><strong>Order ID:</strong> #{order["id"]}</p>
                    <p style="margin: 5px 0;"><strong>Date:</strong> {created.strftime("%Y-%m-%d")}</p>
                    <p style="margin: 5px 0;"><strong>Status:</strong> <span style="color: #d97706;">{escape(order["status"])}</span></p>
                </div>

                <div style="margin-bottom: 20px;">
                    <h3 style="border-bottom: 2px solid {BRAND_COLOR}; padding-bottom: 10px; color: #333;">Billing Details</h3>
                    <p style="margin: 5px 0;"><strong>Name:</strong> {escape(customer["name"])}</p>
                    <p style="margin: 5px 0;"><strong>Address:</strong> {escape(customer["address"])}</p>
                    <p style="margin: 5px 0;"><strong>Phone:</strong> {escape(customer.get("phone", ""))}</p>
                </div>

                <table style="width: 100%; border-collapse: collapse; margin-bottom: 20px;">
                    <thead>
                        <tr style="background-color: #f3f4f6;">
                            <th style="padding: 10px; text-align: left; border-bottom: 2px solid #e5e7eb;">Item</th>
                            <th style="padding: 10px; text-align: center; border-bottom: 2px solid #e5e7eb;">Qty</th>
                            <th style="padding: 10px; text-align: right; border-bottom: 2px solid #e5e7eb;">Price</th>
                        </tr>
                    </thead>
                    <tbody>{rows}
                    </tbody>
                    <tfoot>
                        <tr>
                            <td colspan="2" style="padding: 15px; text-align: right; font-weight: bold;">Total Amount:</td>
                            <td style="padding: 15px; text-align: right; font-weight: bold; color: {BRAND_COLOR}; font-size: 18px;">{_money(order["total_amount"])}</td>
                        </tr>
                    </tfoot>
                </table>

                <div style="text-align: center; color: #888; font-size: 12px; margin-top: 30px;">
                    <p>If you have any questions, reply to this email or call us at {SUPPORT_PHONE}.</p>
                    <p>&copy; {created.year} {escape(store_name)}. All rights reserved.</p>
                </div>
            </div>
        """


def admin_alert_html(order: Dict[str, Any]) -> str:
    return f"""
            <h2>New Order Received!</h2>
            <p><strong>Order ID:</strong> {order["id"]}</p>
            <p><strong>Customer:</strong> {escape(order["customer"]["name"])}</p>
            <p><strong>Total:</strong> {_money(order["total_amount"])}</p>
        """


def status_update_html(order: Dict[str, Any], store_name: str = DEFAULT_STORE_NAME) -> str:
    return f"""
            <h2>Order Update</h2>
            <p>Hi {escape(order["customer"]["name"])},</p>
            <p>Your order <strong>#{order["id"]}</strong> status has been updated to: <strong style="color: {BRAND_COLOR};">{escape(order["status"])}</strong>.</p>
            <p>Thank you for shopping with {escape(store_name)}!</p>
        """


# ---------- Jobs ----------

def notify_order_placed(sender: EmailSender, order: Dict[str, Any], admin_email: str, store_name: str = DEFAULT_STORE_NAME) -> None:
    sender.send_email(
        order["customer"]["email"],
        f"Order Confirmation #{order['id']}",
        customer_confirmation_html(order, store_name),
    )
    sender.send_email(
        admin_email,
        f"New Order Alert #{order['id']}",
        admin_alert_html(order),
    )


def notify_status_change(sender: EmailSender, order: Dict[str, Any], store_name: str = DEFAULT_STORE_NAME) -> None:
    sender.send_email(
        order["customer"]["email"],
        f"Order Status Update: {order['status']}",
        status_update_html(order, store_name),
    )
