import pytest

from config import TestingConfig
from orderdesk import create_app
from orderdesk.extensions import db


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, email="owner@example.com", password="secret123", **extra):
    body = {"email": email, "password": password}
    body.update(extra)
    resp = client.post("/auth/register", json=body)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


@pytest.fixture
def account(client):
    """A registered, logged-in account on `client`."""
    return register(client, store_name="Wared Store", phone="07701112222")


@pytest.fixture
def other_client(app):
    """A second browser session logged in as a different account."""
    other = app.test_client()
    register(other, email="other@example.com")
    return other


def order_payload(**overrides):
    body = {
        "customer_name": "Ali Hassan",
        "phone": "07701234567",
        "governorate": "بغداد",
        "address": "Karrada",
        "product": "Smart Watch",
        "price": "25,000",
        "delivery_cost": "5000",
    }
    body.update(overrides)
    return body
