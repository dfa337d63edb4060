"""Integration tests for the HTTP API via the Django test client."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from orders.auth import WebhookAuthenticator, WebhookConfig
from orders.broadcaster import ORDER_UPDATED

from .conftest import WEBHOOK_SECRET

pytestmark = pytest.mark.django_db


def _create_order(client, title="Fix sink", price=150.00):
    """Helper: POST /api/orders and return the created order JSON."""
    response = client.post("/api/orders", {"title": title, "price": price}, content_type="application/json")
    assert response.status_code == 201
    return response.json()


def _pay(client, order_id, key=WEBHOOK_SECRET):
    headers = {} if key is None else {"HTTP_X_WEBHOOK_KEY": key}
    return client.post(
        "/api/webhooks/payment", {"orderId": order_id}, content_type="application/json", **headers
    )


class TestListOrders:
    def test_empty(self, client):
        response = client.get("/api/orders")
        assert response.status_code == 200
        assert response.json() == []

    def test_newest_first(self, client, orders_app, monkeypatch):
        times = iter(datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=i) for i in range(10))
        monkeypatch.setattr(orders_app.service, "clock", lambda: next(times))
        for title in ("first", "second", "third"):
            _create_order(client, title=title)

        titles = [o["title"] for o in client.get("/api/orders").json()]

        assert titles == ["third", "second", "first"]

    def test_shape(self, client):
        created = _create_order(client)

        (order,) = client.get("/api/orders").json()

        assert order == created
        assert set(order) == {"id", "title", "price", "status", "createdAtUtc", "updatedAtUtc"}


class TestCreateOrder:
    def test_created(self, client):
        response = client.post(
            "/api/orders", {"title": "  Fix sink ", "price": 150.00}, content_type="application/json"
        )

        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Fix sink"
        assert body["price"] == 150.0
        assert body["status"] == "New"
        assert body["createdAtUtc"] == body["updatedAtUtc"]
        assert response["Location"] == f"/api/orders/{body['id']}"

    def test_location_resolves(self, client):
        body = _create_order(client)
        response = client.get(f"/api/orders/{body['id']}")
        assert response.status_code == 200
        assert response.json() == body

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"title": "", "price": 10}, "Title is required."),
            ({"title": "   ", "price": 10}, "Title is required."),
            ({"price": 10}, "Title is required."),
            ({"title": "Fix sink", "price": 0}, "Price must be > 0."),
            ({"title": "Fix sink", "price": -3.5}, "Price must be > 0."),
        ],
    )
    def test_validation_errors(self, client, payload, message):
        response = client.post("/api/orders", payload, content_type="application/json")

        assert response.status_code == 400
        assert response.json() == {"message": message}
        assert client.get("/api/orders").json() == []

    @pytest.mark.parametrize("body", ["{not json", "[1, 2]", "\"text\""])
    def test_malformed_body(self, client, body):
        response = client.post("/api/orders", body, content_type="application/json")
        assert response.status_code == 400
        assert "message" in response.json()

    def test_broadcasts_to_subscribers(self, client, subscriber, drain):
        body = _create_order(client)
        assert drain(subscriber) == [{"type": ORDER_UPDATED, "order": body}]

    def test_method_not_allowed(self, client):
        assert client.put("/api/orders").status_code == 405


class TestGetOrder:
    def test_unknown(self, client):
        response = client.get(f"/api/orders/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"message": "Order not found."}


class TestMoveToInProgress:
    def test_moves(self, client, subscriber, drain):
        created = _create_order(client)
        drain(subscriber)

        response = client.post(f"/api/orders/{created['id']}/in-progress")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "InProgress"
        assert body["createdAtUtc"] == created["createdAtUtc"]
        assert drain(subscriber) == [{"type": ORDER_UPDATED, "order": body}]

    def test_unknown_id(self, client, subscriber, drain):
        response = client.post(f"/api/orders/{uuid.uuid4()}/in-progress")

        assert response.status_code == 404
        assert response.json() == {"message": "Order not found."}
        assert drain(subscriber) == []

    def test_conflict_names_current_status(self, client):
        created = _create_order(client)
        client.post(f"/api/orders/{created['id']}/in-progress")

        response = client.post(f"/api/orders/{created['id']}/in-progress")

        assert response.status_code == 409
        assert response.json() == {"message": "Cannot move to InProgress from InProgress."}

    def test_get_not_allowed(self, client):
        created = _create_order(client)
        assert client.get(f"/api/orders/{created['id']}/in-progress").status_code == 405


class TestPaymentWebhook:
    def test_new_order_becomes_paid_with_one_broadcast(self, client, subscriber, drain):
        created = _create_order(client)
        drain(subscriber)

        response = _pay(client, created["id"])

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Paid"
        events = drain(subscriber)
        assert events == [{"type": ORDER_UPDATED, "order": body}]

    def test_is_idempotent(self, client):
        created = _create_order(client)
        first = _pay(client, created["id"]).json()

        second = _pay(client, created["id"])

        assert second.status_code == 200
        assert second.json() == first

    @pytest.mark.parametrize("key", [None, "wrong", "TEST-SECRET", f"{WEBHOOK_SECRET}, {WEBHOOK_SECRET}"])
    def test_rejects_bad_keys(self, client, key):
        created = _create_order(client)

        response = _pay(client, created["id"], key=key)

        assert response.status_code == 401
        assert client.get(f"/api/orders/{created['id']}").json()["status"] == "New"

    def test_missing_server_secret_is_500(self, client, orders_app, monkeypatch):
        monkeypatch.setattr(orders_app.service, "authenticator", WebhookAuthenticator(WebhookConfig(secret=None)))
        created = _create_order(client)

        response = _pay(client, created["id"])

        assert response.status_code == 500
        assert "WEBHOOK_API_KEY" in response.json()["message"]

    def test_unknown_order(self, client, subscriber, drain):
        response = _pay(client, str(uuid.uuid4()))

        assert response.status_code == 404
        assert drain(subscriber) == []

    @pytest.mark.parametrize("payload", [{}, {"orderId": "nope"}, {"orderId": 5}])
    def test_bad_order_id(self, client, payload):
        response = client.post(
            "/api/webhooks/payment", payload, content_type="application/json", HTTP_X_WEBHOOK_KEY=WEBHOOK_SECRET
        )
        assert response.status_code == 400

    def test_key_is_checked_before_the_body(self, client):
        response = client.post("/api/webhooks/payment", "{broken", content_type="application/json")
        assert response.status_code == 401


class TestOrderLifecycle:
    def test_fix_sink_scenario(self, client):
        created = client.post(
            "/api/orders", {"title": "Fix sink", "price": 150.00}, content_type="application/json"
        )
        assert created.status_code == 201
        assert created.json()["status"] == "New"
        order_id = created.json()["id"]

        moved = client.post(f"/api/orders/{order_id}/in-progress")
        assert moved.status_code == 200
        assert moved.json()["status"] == "InProgress"

        rejected = _pay(client, order_id, key="wrong-key")
        assert rejected.status_code == 401
        assert client.get(f"/api/orders/{order_id}").json()["status"] == "InProgress"

        paid = _pay(client, order_id)
        assert paid.status_code == 200
        assert paid.json()["status"] == "Paid"
        assert paid.json()["id"] == order_id


class TestIndex:
    def test_serves_ui(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert b"/ws/orders/" in response.content
