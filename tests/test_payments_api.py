import json

import pytest
from fastapi.testclient import TestClient
from jose import jwt

import config
from conftest import AUTHOR, BLOG_ID, BUYER, KEY_ID, purchases_for, sign, wallet_for
from main import app
from models import PurchaseStatus
from routers.payments import get_payments_service, get_webhook_secret
from services.signature import compute_webhook_signature

WEBHOOK_SECRET = "whsec_test"


def _auth(user_id=BUYER):
    token = jwt.encode({"id": user_id}, "test-jwt-secret", algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(service):
    app.dependency_overrides[get_payments_service] = lambda: service
    app.dependency_overrides[get_webhook_secret] = lambda: WEBHOOK_SECRET
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _order(client, user_id=BUYER):
    r = client.post("/payments/order", json={"itemId": BLOG_ID}, headers=_auth(user_id))
    assert r.status_code == 200, r.text
    return r.json()["data"]


def _webhook(client, payload, secret=WEBHOOK_SECRET):
    body = json.dumps(payload).encode()
    return client.post(
        "/payments/webhook",
        content=body,
        headers={"X-Razorpay-Signature": compute_webhook_signature(body, secret), "Content-Type": "application/json"},
    )


def test_purchase_flow(client, blog, db):
    order = _order(client)
    assert order == {"id": "order_0001", "amount": 10000, "currency": "INR", "key_id": KEY_ID}

    r = client.post(
        "/payments/verify",
        json={"gatewayOrderId": order["id"], "paymentId": "pay_1", "signature": sign(order["id"], "pay_1")},
        headers=_auth(),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["receipt"]["creatorShare"] == 7000
    assert body["receipt"]["platformShare"] == 3000

    history = client.get("/payments/history", headers=_auth()).json()["data"]
    assert [h["item"]["slug"] for h in history] == ["future-of-ai"]

    earnings = client.get("/payments/earnings", headers=_auth(AUTHOR)).json()["data"]
    assert earnings["totalEarnings"] == 7000
    assert earnings["platformFees"] == 3000
    assert earnings["totalSales"] == 1
    assert earnings["platformFeePercent"] == 30.0

    wallet = client.get("/payments/wallet", headers=_auth(AUTHOR)).json()["data"]
    assert wallet["balance"] == 7000
    assert wallet["reconciled"] is True


def test_verify_accepts_razorpay_field_names(client, blog):
    order = _order(client)
    r = client.post(
        "/payments/verify",
        json={
            "razorpay_order_id": order["id"],
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": sign(order["id"], "pay_1"),
        },
        headers=_auth(),
    )
    assert r.status_code == 200, r.text


def test_error_responses_are_distinguishable(client, blog):
    order = _order(client)
    bad = client.post(
        "/payments/verify",
        json={"gatewayOrderId": order["id"], "paymentId": "pay_1", "signature": "forged"},
        headers=_auth(),
    )
    assert bad.status_code == 400
    assert bad.json()["code"] == "invalid_signature"
    assert bad.json()["retryable"] is False

    order = _order(client)
    client.post(
        "/payments/verify",
        json={"gatewayOrderId": order["id"], "paymentId": "pay_2", "signature": sign(order["id"], "pay_2")},
        headers=_auth(),
    )
    again = client.post("/payments/order", json={"itemId": BLOG_ID}, headers=_auth())
    assert again.status_code == 409
    assert again.json()["code"] == "already_purchased"


def test_gateway_outage_is_retryable(client, gateway, blog):
    gateway.fail = True
    r = client.post("/payments/order", json={"itemId": BLOG_ID}, headers=_auth())
    assert r.status_code == 503
    assert r.json()["retryable"] is True


def test_unknown_item(client, blog):
    r = client.post("/payments/order", json={"itemId": "missing"}, headers=_auth())
    assert r.status_code == 404
    assert r.json()["code"] == "item_not_found"


def test_other_users_order(client, blog):
    order = _order(client)
    r = client.post(
        "/payments/verify",
        json={"gatewayOrderId": order["id"], "paymentId": "pay_1", "signature": sign(order["id"], "pay_1")},
        headers=_auth("intruder"),
    )
    assert r.status_code == 403


def test_requires_token(client, blog):
    assert client.post("/payments/order", json={"itemId": BLOG_ID}).status_code == 401
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert client.get("/payments/history", headers=bad).status_code == 403


def test_unconfigured_jwt_secret_rejects_tokens(client, blog, db, monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "")
    r = client.get("/payments/history", headers=_auth())
    assert r.status_code == 503
    assert client.post("/payments/order", json={"itemId": BLOG_ID}, headers=_auth()).status_code == 503
    assert purchases_for(db) == []


@pytest.mark.parametrize("body", [{}, {"itemId": ""}, {"itemId": "   "}])
def test_order_validation(client, blog, body):
    r = client.post("/payments/order", json=body, headers=_auth())
    assert r.status_code == 422


def test_verify_validation(client, blog):
    r = client.post("/payments/verify", json={"gatewayOrderId": "order_0001"}, headers=_auth())
    assert r.status_code == 422


class TestWebhook:

    def test_payment_captured_completes_purchase(self, client, blog, db):
        order = _order(client)
        r = _webhook(client, {
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": "pay_1", "order_id": order["id"]}}},
        })
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert wallet_for(db, AUTHOR).balance == 7000

    def test_order_paid_event(self, client, blog, db):
        order = _order(client)
        r = _webhook(client, {
            "event": "order.paid",
            "payload": {
                "order": {"entity": {"id": order["id"]}},
                "payment": {"entity": {"id": "pay_1"}},
            },
        })
        assert r.json()["status"] == "ok"
        assert purchases_for(db)[0].status == PurchaseStatus.COMPLETED

    def test_bad_signature_rejected(self, client, blog, db):
        order = _order(client)
        r = _webhook(client, {
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": "pay_1", "order_id": order["id"]}}},
        }, secret="wrong")
        assert r.status_code == 400
        assert r.json()["code"] == "invalid_webhook_signature"
        assert purchases_for(db)[0].status == PurchaseStatus.PENDING

    def test_failed_attempt_then_capture_completes(self, client, blog, db):
        order = _order(client)
        declined = _webhook(client, {
            "event": "payment.failed",
            "payload": {"payment": {"entity": {"id": "pay_declined", "order_id": order["id"]}}},
        })
        assert declined.status_code == 200
        assert declined.json()["status"] == "ignored"
        assert purchases_for(db)[0].status == PurchaseStatus.PENDING

        captured = _webhook(client, {
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": "pay_upi", "order_id": order["id"]}}},
        })
        assert captured.json()["status"] == "ok"
        [purchase] = purchases_for(db)
        assert purchase.status == PurchaseStatus.COMPLETED
        assert purchase.payment_id == "pay_upi"
        assert wallet_for(db, AUTHOR).balance == 7000

    def test_failed_attempt_then_checkout_callback_completes(self, client, blog, db):
        order = _order(client)
        _webhook(client, {
            "event": "payment.failed",
            "payload": {"payment": {"entity": {"id": "pay_declined", "order_id": order["id"]}}},
        })
        r = client.post(
            "/payments/verify",
            json={"gatewayOrderId": order["id"], "paymentId": "pay_2", "signature": sign(order["id"], "pay_2")},
            headers=_auth(),
        )
        assert r.status_code == 200, r.text
        assert purchases_for(db)[0].status == PurchaseStatus.COMPLETED

    def test_failure_after_completion_is_ignored(self, client, blog, db):
        order = _order(client)
        client.post(
            "/payments/verify",
            json={"gatewayOrderId": order["id"], "paymentId": "pay_1", "signature": sign(order["id"], "pay_1")},
            headers=_auth(),
        )
        r = _webhook(client, {
            "event": "payment.failed",
            "payload": {"payment": {"entity": {"id": "pay_x", "order_id": order["id"]}}},
        })
        assert r.status_code == 200
        assert r.json()["status"] == "ignored"
        assert purchases_for(db)[0].status == PurchaseStatus.COMPLETED

    def test_unknown_event_and_order(self, client, blog):
        assert _webhook(client, {"event": "refund.created", "payload": {}}).json()["status"] == "ignored"
        r = _webhook(client, {
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": "pay_1", "order_id": "order_unknown"}}},
        })
        assert r.json()["status"] == "ignored"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] is True
