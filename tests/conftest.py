"""
Shared fixtures

Environment is set before the application is imported: in-memory SQLite,
cache off, in-process rate limit storage, fast payment polling.
"""
import json
import os
from datetime import timedelta
from urllib.parse import parse_qs

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["RATE_LIMIT_BIDS"] = "1000/minute"
os.environ["LOG_JSON"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["REQUIRE_PAYMENT_AUTHORIZATION"] = "true"
os.environ["PAYMENT_POLL_INTERVAL_SECONDS"] = "0"
os.environ["PAYMENT_POLL_MAX_ATTEMPTS"] = "3"

import httpx
import pytest
from fastapi.testclient import TestClient

from wealth_oven.core.dependencies import get_stripe_client
from wealth_oven.infrastructure.database import SessionLocal, drop_db, init_db
from wealth_oven.infrastructure.stripe_client import StripeClient
from wealth_oven.main import app
from wealth_oven.models import Auction, AuctionStatus, Funnel, UserRole, utcnow
from wealth_oven.services import PaymentService, UserService


class FakeStripe:
    """In-memory stand-in for the Stripe REST API, served via httpx.MockTransport"""

    def __init__(self):
        self.setup_intents = {
            "seti_ok": {"id": "seti_ok", "status": "succeeded"},
            "seti_declined": {"id": "seti_declined", "status": "requires_payment_method"},
        }
        self.payment_intents = {}
        self.refunds = []
        self.requests = []
        self.confirm_status = "succeeded"
        self.fail = False
        self._counter = 0

    def _next_id(self, prefix):
        self._counter += 1
        return f"{prefix}_{self._counter}"

    @staticmethod
    def _form(request):
        fields = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
        metadata = {
            key[len("metadata["):-1]: value
            for key, value in fields.items()
            if key.startswith("metadata[")
        }
        return fields, metadata

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(500, json={"error": {"message": "Stripe is down", "code": "api_error"}})

        path = request.url.path
        parts = path.strip("/").split("/")
        fields, metadata = self._form(request)

        if path == "/v1/setup_intents" and request.method == "POST":
            intent_id = self._next_id("seti")
            intent = {
                "id": intent_id,
                "status": "requires_payment_method",
                "client_secret": f"{intent_id}_secret",
                "metadata": metadata,
            }
            self.setup_intents[intent_id] = intent
            return httpx.Response(200, json=intent)

        if parts[:2] == ["v1", "setup_intents"] and len(parts) == 3:
            intent = self.setup_intents.get(parts[2])
            return self._found(intent)

        if path == "/v1/payment_intents" and request.method == "POST":
            intent_id = self._next_id("pi")
            intent = {
                "id": intent_id,
                "amount": int(fields["amount"]),
                "currency": fields["currency"],
                "status": "requires_confirmation",
                "client_secret": f"{intent_id}_secret",
                "metadata": metadata,
            }
            self.payment_intents[intent_id] = intent
            return httpx.Response(200, json=intent)

        if parts[:2] == ["v1", "payment_intents"] and len(parts) == 4 and parts[3] == "confirm":
            intent = self.payment_intents.get(parts[2])
            if intent is not None:
                intent["status"] = self.confirm_status
            return self._found(intent)

        if parts[:2] == ["v1", "payment_intents"] and len(parts) == 3:
            return self._found(self.payment_intents.get(parts[2]))

        if path == "/v1/refunds" and request.method == "POST":
            refund = {"id": self._next_id("re"), "status": "succeeded", "payment_intent": fields["payment_intent"]}
            self.refunds.append(refund)
            return httpx.Response(200, json=refund)

        return httpx.Response(404, json={"error": {"message": "No such route"}})

    @staticmethod
    def _found(obj):
        if obj is None:
            return httpx.Response(404, json={"error": {"message": "No such object", "code": "resource_missing"}})
        return httpx.Response(200, content=json.dumps(obj), headers={"Content-Type": "application/json"})

    def add_setup_intent(self, intent_id, status, metadata=None):
        self.setup_intents[intent_id] = {"id": intent_id, "status": status, "metadata": metadata or {}}

    def add_payment_intent(self, intent_id, amount_cents, status, metadata=None):
        self.payment_intents[intent_id] = {
            "id": intent_id,
            "amount": amount_cents,
            "currency": "usd",
            "status": status,
            "metadata": metadata or {},
        }

    def client(self) -> StripeClient:
        return StripeClient(
            secret_key="sk_test_123",
            api_base="https://stripe.test",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test"""
    init_db()
    yield
    drop_db()


@pytest.fixture
def db(database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def stripe():
    return FakeStripe()


@pytest.fixture
def payment_service(stripe):
    service = PaymentService(stripe.client(), sleep=lambda seconds: None)
    yield service
    service.stripe.close()


@pytest.fixture
def client(stripe):
    app.dependency_overrides[get_stripe_client] = stripe.client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return UserService.signup("bidder@example.com", "correct-horse", db, display_name="Bidder One")


@pytest.fixture
def other_user(db):
    return UserService.signup("rival@example.com", "battery-staple", db, display_name="Rival")


@pytest.fixture
def admin_user(db):
    admin = UserService.signup("admin@example.com", "admin-password", db, display_name="Admin")
    return UserService.update_role(admin.id, UserRole.ADMIN.value, db)


def auth_headers(db, email, password):
    session = UserService.login(email, password, db)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def user_headers(db, user):
    return auth_headers(db, "bidder@example.com", "correct-horse")


@pytest.fixture
def admin_headers(db, admin_user):
    return auth_headers(db, "admin@example.com", "admin-password")


@pytest.fixture
def funnel(db):
    funnel = Funnel(funnel_id="sales-machine-abc", title="Sales Machine", description="High-ticket funnel")
    db.add(funnel)
    db.commit()
    db.refresh(funnel)
    return funnel


@pytest.fixture
def make_auction(db, funnel):
    """Factory: an active auction starting at 500 with the default increment"""

    def _make(**overrides):
        now = utcnow()
        fields = {
            "funnel_id": funnel.id,
            "title": "Sales Machine Auction",
            "status": AuctionStatus.ACTIVE,
            "starting_price": 500.0,
            "current_price": 500.0,
            "min_increment": 25.0,
            "starts_at": now - timedelta(hours=1),
            "ends_at": now + timedelta(days=1),
            "total_bids": 0,
        }
        fields.update(overrides)
        auction = Auction(**fields)
        db.add(auction)
        db.commit()
        db.refresh(auction)
        return auction

    return _make
