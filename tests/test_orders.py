import asyncio

import pytest
from sqlmodel import select

from arthub.models.cart import CartItem
from arthub.models.order import Order
from arthub.models.order_event import OrderEvent
from arthub.schemas.checkout_schemas import OrderRead
from arthub.services import order_service
from tests.helpers import ADDRESS, auth_headers, link_event, paid_event, post_webhook


@pytest.fixture
def painting(make_artwork, artist):
    return make_artwork(artist, title="Sunflowers", price=120.0)


@pytest.fixture
def sculpture(make_artwork, artist):
    return make_artwork(artist, title="Bronze Hare", price=80.0, category="Sculpture")


@pytest.fixture
def filled_cart(client, buyer, painting, sculpture):
    headers = auth_headers(buyer)
    client.post("/cart/add", json={"artwork_id": painting.id}, headers=headers)
    client.post("/cart/add", json={"artwork_id": sculpture.id, "quantity": 2}, headers=headers)
    return headers


def checkout(client, headers, address=ADDRESS):
    return client.post("/orders/checkout", json={"shipping_address": address}, headers=headers)


class TestCheckout:
    def test_returns_payment_url_and_pending_order(self, client, session, gateway, buyer, filled_cart):
        response = checkout(client, filled_cart)

        assert response.status_code == 200
        data = response.json()
        assert data["url"] == f"https://rzp.io/i/plink_{data['order_id']}"
        assert data["session_id"] == f"plink_{data['order_id']}"

        order = session.get(Order, data["order_id"])
        assert order.status == "pending"
        assert order.user_id == buyer.id
        assert order.total_amount == 280.0
        assert order.payment_session_id == data["session_id"]
        assert order.shipping_address == ADDRESS

        assert gateway.sessions[0]["amount"] == 280.0
        assert gateway.sessions[0]["customer_email"] == buyer.email

    def test_snapshots_cart_lines(self, client, session, filled_cart, painting, sculpture):
        order_id = checkout(client, filled_cart).json()["order_id"]

        lines = {(i.artwork_id, i.title, i.price, i.quantity) for i in session.get(Order, order_id).items}
        assert lines == {
            (painting.id, "Sunflowers", 120.0, 1),
            (sculpture.id, "Bronze Hare", 80.0, 2),
        }

    def test_cart_is_kept_until_payment(self, client, filled_cart):
        checkout(client, filled_cart)

        assert client.get("/cart/", headers=filled_cart).json()["item_count"] == 2

    def test_empty_cart_is_rejected(self, client, gateway, buyer):
        response = checkout(client, auth_headers(buyer))

        assert response.status_code == 400
        assert response.json()["detail"] == "Cart is empty"
        assert gateway.sessions == []

    @pytest.mark.parametrize("missing", ["street", "city", "state", "zip_code", "country"])
    def test_incomplete_address_is_rejected(self, client, gateway, filled_cart, missing):
        address = dict(ADDRESS, **{missing: ""})

        response = checkout(client, filled_cart, address)

        assert response.status_code == 422
        assert gateway.sessions == []

    @pytest.mark.parametrize("missing", ["street", "city", "state", "zip_code", "country"])
    def test_blank_address_field_is_rejected(self, client, session, gateway, filled_cart, missing):
        address = dict(ADDRESS, **{missing: "   "})

        response = checkout(client, filled_cart, address)

        assert response.status_code == 422
        assert gateway.sessions == []
        assert session.exec(select(Order)).all() == []

    def test_address_fields_are_trimmed(self, client, session, filled_cart):
        address = dict(ADDRESS, city="  Pune  ")

        order_id = checkout(client, filled_cart, address).json()["order_id"]

        assert session.get(Order, order_id).shipping_city == "Pune"

    def test_unavailable_artwork_blocks_checkout(self, client, session, gateway, filled_cart, painting):
        painting.status = "sold"
        session.add(painting)
        session.commit()

        response = checkout(client, filled_cart)

        assert response.status_code == 400
        assert response.json()["detail"] == 'Artwork "Sunflowers" is not available'
        assert session.exec(select(Order)).all() == []

    def test_prices_are_read_from_the_server(self, client, session, gateway, filled_cart, painting):
        painting.price = 200.0
        session.add(painting)
        session.commit()

        order_id = checkout(client, filled_cart).json()["order_id"]

        assert session.get(Order, order_id).total_amount == 360.0

    def test_gateway_failure_cancels_order(self, client, session, gateway, filled_cart):
        gateway.fail = True

        response = checkout(client, filled_cart)

        assert response.status_code == 502
        order = session.exec(select(Order)).one()
        assert order.status == "cancelled"
        assert order.cancelled_at is not None
        assert client.get("/cart/", headers=filled_cart).json()["item_count"] == 2


class TestWebhook:
    def test_paid_event_completes_order(self, client, session, buyer, artist, filled_cart, painting, sculpture):
        data = checkout(client, filled_cart).json()

        response = post_webhook(client, paid_event(data["session_id"], "pay_abc"))

        assert response.status_code == 200
        assert response.json() == {"received": True}

        order = session.get(Order, data["order_id"])
        assert order.status == "paid"
        assert order.paid_at is not None
        assert order.payment_intent_id == "pay_abc"

        session.refresh(painting)
        session.refresh(sculpture)
        session.refresh(artist)
        assert painting.status == "sold"
        assert sculpture.status == "sold"
        assert artist.total_sales == 280.0

        assert session.exec(select(CartItem)).all() == []

    def test_paid_event_is_idempotent(self, client, session, artist, filled_cart):
        data = checkout(client, filled_cart).json()

        post_webhook(client, paid_event(data["session_id"]))
        response = post_webhook(client, paid_event(data["session_id"]))

        assert response.status_code == 200
        session.refresh(artist)
        assert artist.total_sales == 280.0

        paid_events = session.exec(
            select(OrderEvent).where(
                OrderEvent.order_id == data["order_id"],
                OrderEvent.to_status == "paid"
            )
        ).all()
        assert len(paid_events) == 1

    @pytest.mark.parametrize(
        "event_type", ["payment_link.cancelled", "payment_link.expired", "payment.failed"]
    )
    def test_failure_events_cancel_pending_order(self, client, session, filled_cart, painting, event_type):
        data = checkout(client, filled_cart).json()

        post_webhook(client, link_event(event_type, data["session_id"]))

        order = session.get(Order, data["order_id"])
        assert order.status == "cancelled"
        session.refresh(painting)
        assert painting.status == "available"

    def test_failure_event_after_payment_is_ignored(self, client, session, filled_cart):
        data = checkout(client, filled_cart).json()
        post_webhook(client, paid_event(data["session_id"]))

        post_webhook(client, link_event("payment_link.expired", data["session_id"]))

        assert session.get(Order, data["order_id"]).status == "paid"

    def test_payment_for_cancelled_order_is_acknowledged(self, client, session, filled_cart, painting):
        data = checkout(client, filled_cart).json()
        client.patch(f"/orders/{data['order_id']}/cancel", headers=filled_cart)

        response = post_webhook(client, paid_event(data["session_id"]))

        assert response.status_code == 200
        assert session.get(Order, data["order_id"]).status == "cancelled"
        session.refresh(painting)
        assert painting.status == "available"

    def test_falls_back_to_order_id_in_notes(self, client, session, filled_cart):
        data = checkout(client, filled_cart).json()
        event = paid_event("plink_unknown")
        event["payload"]["payment_link"]["entity"]["notes"] = {"order_id": str(data["order_id"])}

        post_webhook(client, event)

        assert session.get(Order, data["order_id"]).status == "paid"

    def test_bad_signature_is_rejected(self, client, session, filled_cart):
        data = checkout(client, filled_cart).json()

        response = post_webhook(client, paid_event(data["session_id"]), signature="forged")

        assert response.status_code == 400
        assert session.get(Order, data["order_id"]).status == "pending"

    def test_unknown_events_are_acknowledged(self, client):
        response = post_webhook(client, {"event": "refund.created", "payload": {}})

        assert response.status_code == 200

    def test_event_handling_runs_off_the_event_loop(self, client, monkeypatch):
        seen = []

        def record(session, event):
            try:
                asyncio.get_running_loop()
                seen.append("event loop")
            except RuntimeError:
                seen.append("worker thread")

        monkeypatch.setattr(order_service, "handle_webhook_event", record)

        post_webhook(client, {"event": "refund.created", "payload": {}})

        assert seen == ["worker thread"]


class TestOrderHistory:
    def test_list_newest_first(self, client, filled_cart, buyer):
        first = checkout(client, filled_cart).json()["order_id"]
        second = checkout(client, filled_cart).json()["order_id"]

        data = client.get("/orders/", headers=filled_cart).json()

        assert [o["id"] for o in data["orders"]] == [second, first]
        assert data["pagination"]["total"] == 2

    def test_status_filter(self, client, filled_cart):
        first = checkout(client, filled_cart).json()
        checkout(client, filled_cart)
        post_webhook(client, paid_event(first["session_id"]))

        data = client.get("/orders/", params={"status": "paid"}, headers=filled_cart).json()

        assert [o["id"] for o in data["orders"]] == [first["order_id"]]

    def test_get_order_details(self, client, filled_cart):
        order_id = checkout(client, filled_cart).json()["order_id"]

        data = client.get(f"/orders/{order_id}", headers=filled_cart).json()

        assert data["status"] == "pending"
        assert data["shipping_address"] == ADDRESS
        assert len(data["items"]) == 2

    def test_order_payload_shape(self, client, filled_cart, painting):
        order_id = checkout(client, filled_cart).json()["order_id"]

        data = client.get("/orders/", headers=filled_cart).json()

        order = data["orders"][0]
        assert set(order) == set(OrderRead.model_fields)
        line = next(i for i in order["items"] if i["artwork_id"] == painting.id)
        assert line == {
            "artwork_id": painting.id, "title": "Sunflowers", "price": 120.0, "quantity": 1, "line_total": 120.0
        }
        assert order["id"] == order_id
        assert set(data["pagination"]) == {"page", "limit", "total", "pages", "has_next", "has_prev"}

    def test_other_users_cannot_read_order(self, client, filled_cart, make_user):
        order_id = checkout(client, filled_cart).json()["order_id"]

        response = client.get(f"/orders/{order_id}", headers=auth_headers(make_user()))

        assert response.status_code == 403

    def test_admin_can_read_any_order(self, client, filled_cart, admin):
        order_id = checkout(client, filled_cart).json()["order_id"]

        response = client.get(f"/orders/{order_id}", headers=auth_headers(admin))

        assert response.status_code == 200

    def test_missing_order(self, client, buyer):
        assert client.get("/orders/999", headers=auth_headers(buyer)).status_code == 404

    def test_timeline_records_transitions(self, client, filled_cart):
        data = checkout(client, filled_cart).json()
        post_webhook(client, paid_event(data["session_id"]))

        events = client.get(f"/orders/{data['order_id']}/timeline", headers=filled_cart).json()["events"]

        assert [e["event_type"] for e in events] == ["order_created", "order_paid"]
        assert events[1]["from_status"] == "pending"
        assert events[1]["to_status"] == "paid"


class TestCancelOrder:
    def test_cancel_pending_order(self, client, filled_cart):
        order_id = checkout(client, filled_cart).json()["order_id"]

        response = client.patch(f"/orders/{order_id}/cancel", headers=filled_cart)

        assert response.status_code == 200
        assert response.json()["order"]["status"] == "cancelled"
        assert response.json()["order"]["cancelled_at"] is not None

    def test_paid_order_cannot_be_cancelled(self, client, filled_cart):
        data = checkout(client, filled_cart).json()
        post_webhook(client, paid_event(data["session_id"]))

        response = client.patch(f"/orders/{data['order_id']}/cancel", headers=filled_cart)

        assert response.status_code == 400
        assert response.json()["detail"] == "Paid orders cannot be cancelled"

    def test_cancelled_order_cannot_be_cancelled_again(self, client, filled_cart):
        order_id = checkout(client, filled_cart).json()["order_id"]
        client.patch(f"/orders/{order_id}/cancel", headers=filled_cart)

        response = client.patch(f"/orders/{order_id}/cancel", headers=filled_cart)

        assert response.status_code == 400

    def test_other_users_cannot_cancel(self, client, filled_cart, make_user):
        order_id = checkout(client, filled_cart).json()["order_id"]

        response = client.patch(f"/orders/{order_id}/cancel", headers=auth_headers(make_user()))

        assert response.status_code == 403
