import smtplib
from datetime import datetime, timezone

import pytest

import notifications
from notifications import (
    EmailSender,
    admin_alert_html,
    customer_confirmation_html,
    notify_order_placed,
    notify_status_change,
    status_update_html,
)
from tests.conftest import FakeEmailSender


@pytest.fixture()
def order():
    return {
        "id": "665f1c2e9b1e8a3d4c5b6a70",
        "customer": {
            "name": "Kasun <b>Silva</b>",
            "address": "5 Temple Road, Kandy",
            "phone": "0719876543",
            "email": "kasun@example.com",
        },
        "items": [
            {"product_id": "p1", "name": "Choc Chip", "quantity": 2, "price": 250.0},
            {"product_id": "p2", "name": "Brownie", "quantity": 1, "price": 400.0},
        ],
        "total_amount": 900.0,
        "status": "Pending",
        "created_at": datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc),
    }


class RecordingSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.logged_in = None
        self.messages = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, message):
        self.messages.append(message)


class FailingSMTP(RecordingSMTP):
    def login(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"Bad credentials")


def test_mock_mode_without_credentials(monkeypatch):
    def no_network(*args, **kwargs):
        raise AssertionError("SMTP must not be contacted in mock mode")

    monkeypatch.setattr(notifications.smtplib, "SMTP_SSL", no_network)
    sender = EmailSender(user=None, password=None)

    assert not sender.configured
    assert sender.send_email("a@example.com", "Hello", "<p>hi</p>") is True


def test_partial_credentials_stay_in_mock_mode(monkeypatch):
    monkeypatch.setattr(notifications.smtplib, "SMTP_SSL", RecordingSMTP)
    RecordingSMTP.instances = []

    assert EmailSender(user="shop@example.com", password="").send_email("a@example.com", "Hi", "x") is True
    assert RecordingSMTP.instances == []


def test_send_email_over_smtp(monkeypatch):
    monkeypatch.setattr(notifications.smtplib, "SMTP_SSL", RecordingSMTP)
    RecordingSMTP.instances = []
    sender = EmailSender(user="shop@example.com", password="app-pass", host="smtp.example.com", port=2465)

    assert sender.send_email("buyer@example.com", "Order Confirmation #1", "<p>thanks</p>") is True

    smtp = RecordingSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.example.com", 2465)
    assert smtp.logged_in == ("shop@example.com", "app-pass")
    message = smtp.messages[0]
    assert message["To"] == "buyer@example.com"
    assert message["From"] == "shop@example.com"
    assert message["Subject"] == "Order Confirmation #1"


def test_transport_error_returns_false(monkeypatch):
    monkeypatch.setattr(notifications.smtplib, "SMTP_SSL", FailingSMTP)
    sender = EmailSender(user="shop@example.com", password="wrong")

    assert sender.send_email("buyer@example.com", "Hi", "<p>x</p>") is False


def test_connection_error_returns_false(monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("no route")

    monkeypatch.setattr(notifications.smtplib, "SMTP_SSL", refuse)
    sender = EmailSender(user="shop@example.com", password="pw")

    assert sender.send_email("buyer@example.com", "Hi", "<p>x</p>") is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("EMAIL_USER", "shop@example.com")
    monkeypatch.setenv("EMAIL_PASS", "pw")
    monkeypatch.setenv("EMAIL_PORT", "587")

    sender = EmailSender.from_env()

    assert sender.configured
    assert sender.host == "smtp.gmail.com"
    assert sender.port == 587


def test_customer_confirmation_html(order):
    html = customer_confirmation_html(order)

    assert "#665f1c2e9b1e8a3d4c5b6a70" in html
    assert "2026-03-14" in html
    assert "Choc Chip" in html and "Brownie" in html
    assert "Rs900.0" in html
    assert "5 Temple Road, Kandy" in html
    assert "Kasun &lt;b&gt;Silva&lt;/b&gt;" in html
    assert "<b>Silva</b>" not in html


def test_admin_alert_html(order):
    html = admin_alert_html(order)

    assert "New Order Received!" in html
    assert "665f1c2e9b1e8a3d4c5b6a70" in html
    assert "Rs900.0" in html


def test_status_update_html(order):
    html = status_update_html({**order, "status": "Delivered"})

    assert "Delivered" in html
    assert "#665f1c2e9b1e8a3d4c5b6a70" in html


def test_notify_order_placed(order):
    sender = FakeEmailSender()

    notify_order_placed(sender, order, "owner@cookieshop.lk")

    assert [e["to"] for e in sender.sent_emails] == ["kasun@example.com", "owner@cookieshop.lk"]
    assert sender.subjects() == [
        "Order Confirmation #665f1c2e9b1e8a3d4c5b6a70",
        "New Order Alert #665f1c2e9b1e8a3d4c5b6a70",
    ]


def test_notify_status_change(order):
    sender = FakeEmailSender()

    notify_status_change(sender, {**order, "status": "Shipped"})

    assert sender.subjects() == ["Order Status Update: Shipped"]
