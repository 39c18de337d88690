import mongomock
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from notifications import EmailSender, get_email_sender


class FakeEmailSender(EmailSender):
    """Email sender that records messages in memory for test assertions."""

    def __init__(self):
        super().__init__(user="shop@example.com", password="secret")
        self.sent_emails: list[dict] = []
        self.should_succeed = True

    def send_email(self, to: str, subject: str, html: str) -> bool:
        self.sent_emails.append({"to": to, "subject": subject, "html": html})
        return self.should_succeed

    def subjects(self) -> list[str]:
        return [e["subject"] for e in self.sent_emails]


@pytest.fixture()
def mock_db():
    return mongomock.MongoClient()["cookieshop_test"]


@pytest.fixture()
def email_sender():
    return FakeEmailSender()


@pytest.fixture()
def client(mock_db, email_sender):
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_product(client):
    def _make(name="Choc Chip", price=250.0, stock=10, **extra):
        response = client.post(
            "/api/products",
            json={"name": name, "price": price, "stock": stock, "category": "Cookies", **extra},
        )
        assert response.status_code == 201
        return response.json()

    return _make


@pytest.fixture()
def customer():
    return {
        "name": "Nimali Perera",
        "address": "12 Galle Road, Colombo",
        "phone": "0771234567",
        "email": "nimali@example.com",
    }
