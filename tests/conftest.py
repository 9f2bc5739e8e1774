import hashlib
import hmac
import json
import time
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from billing.core.app_factory import create_application
from billing.core.config import Settings
from billing.domain.models import SubscriptionRecord

WEBHOOK_SECRET = "whsec_test_secret"
SYSTEM_EMAIL = "ops@socialbio.me"


class FakeEmailSender:
    """Records every email instead of delivering it."""

    def __init__(self):
        self.sent = []
        self.error = None

    def send(self, recipient):
        self.sent.append(recipient)
        if self.error:
            raise self.error
        return True

    def to(self, email):
        return [recipient for recipient in self.sent if recipient.email == email]


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    """Build a Stripe-Signature header for a payload."""
    timestamp = timestamp or int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture
def settings(tmp_path, monkeypatch):
    for key in ("STRIPE_SECRET_KEY", "SMTP_HOST", "SMTP_USERNAME", "SMTP_FROM_EMAIL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "billing.db"))
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setenv("STRIPE_PRICE_PRO_MONTHLY", "price_pro_month")
    monkeypatch.setenv("STRIPE_PRICE_PRO_YEARLY", "price_pro_year")
    monkeypatch.setenv("STRIPE_PRICE_BASIC_MONTHLY", "price_basic_month")
    monkeypatch.setenv("SYSTEM_EMAIL", SYSTEM_EMAIL)
    monkeypatch.setenv("APP_NAME", "Socialbio")
    monkeypatch.setenv("APP_URL", "https://socialbio.me")
    monkeypatch.setenv("JWT_SECRET", "test-jwt-secret-for-billing-service-tests")
    return Settings()


@pytest.fixture
def stripe_client():
    client = MagicMock(name="StripeClient")
    client.subscription_schedules.create.return_value = {"id": "sub_sched_1"}
    return client


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def app(settings, stripe_client, email_sender):
    return create_application(settings, stripe_client=stripe_client, email_sender=email_sender)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def container(client, app):
    return app.state.container


@pytest.fixture
def user(container):
    return container.user_repository.create("a@x.com", "Ana", "Silva")


@pytest.fixture
def auth_headers(container, user):
    token = container.user_service.create_token(user)
    return {"Authorization": f"Bearer {token}"}


def make_record(user_id, subscription_id="sub_1", payment_intent_id="pi_1", **overrides):
    fields = dict(
        subscription_id=subscription_id,
        user_id=user_id,
        subscription_start=1700000000,
        subscription_end=1702592000,
        currency="usd",
        price_id="price_pro_month",
        recurrency="month",
        customer="cus_1",
        latest_invoice={
            "id": "in_1",
            "payment_intent": {"id": payment_intent_id, "status": "requires_payment_method"},
        },
        status="incomplete",
    )
    fields.update(overrides)
    return SubscriptionRecord(**fields)


@pytest.fixture
def record(container, user):
    return container.subscription_repository.create(make_record(user.id))


@pytest.fixture
def post_event(client):
    def _post(event, secret=WEBHOOK_SECRET, signature=None):
        payload = json.dumps(event)
        headers = {
            "Stripe-Signature": signature or sign_payload(payload, secret),
            "Content-Type": "application/json",
        }
        return client.post("/api/webhooks/stripe", content=payload, headers=headers)

    return _post


def payment_intent_event(
    event_type="payment_intent.succeeded",
    event_id="evt_1",
    **overrides,
):
    payment_intent = {
        "id": "pi_1",
        "object": "payment_intent",
        "receipt_email": "a@x.com",
        "amount_received": 2000,
        "currency": "usd",
        "customer": "cus_1",
        "status": "succeeded",
    }
    payment_intent.update(overrides)
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": 1700000000,
        "data": {"object": payment_intent},
    }


def invoice_event(event_type="invoice.paid", event_id="evt_inv_1", **overrides):
    invoice = {
        "id": "in_2",
        "object": "invoice",
        "customer": "cus_1",
        "customer_email": "a@x.com",
        "subscription": "sub_1",
        "amount_due": 2000,
        "amount_paid": 2000,
        "currency": "usd",
        "status": "paid",
        "payment_intent": "pi_2",
        "hosted_invoice_url": "https://invoice.stripe.com/i/in_2",
        "lines": {
            "data": [
                {"period": {"start": 1702592000, "end": 1705270400}},
            ]
        },
    }
    invoice.update(overrides)
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": 1700000000,
        "data": {"object": invoice},
    }
