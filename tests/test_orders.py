import pytest
from kombu.exceptions import OperationalError

from conftest import add_to_cart, auth
from foodsewa.data.models import CartItemModel, OrderModel
from foodsewa.services import notification_service

ADDRESS = {"street": "Durbar Marg 1", "city": "Kathmandu", "state": "Bagmati", "zip_code": "44600"}


def place_order(client, headers, **overrides):
    body = {"order_type": "delivery", "payment_method": "cash", "delivery_address": ADDRESS}
    body.update(overrides)
    return client.post("/api/user/orders", json=body, headers=headers)


def advance(client, order_id, action, headers=None, **extra):
    return client.put(
        f"/api/restaurant/orders/{order_id}",
        json={"action": action, **extra},
        headers=headers or auth(2),
    )


@pytest.fixture()
def order(client, customer):
    add_to_cart(client, customer, quantity=2)
    return place_order(client, customer).json()["data"]["order"]


class TestCheckout:
    def test_delivery_order_pricing(self, client, customer):
        add_to_cart(client, customer, quantity=2)

        resp = place_order(client, customer, tip=1)

        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Order placed successfully"
        order = body["data"]["order"]
        assert body["data"]["redirect_url"] == f"/user/orderconfirmation/{order['id']}"
        assert order["status"] == "pending"
        assert order["order_number"].startswith("FS")
        assert len(order["order_number"]) == 11
        assert order["subtotal"] == 20
        assert order["tax"] == 1.6
        assert order["service_fee"] == 1
        assert order["delivery_fee"] == 2.5
        assert order["tip"] == 1
        assert order["total"] == 26.1
        assert order["items"][0]["quantity"] == 2
        assert order["delivery_address"]["city"] == "Kathmandu"
        assert order["estimated_delivery_time"] is not None
        assert order["tracking_history"][0]["status"] == "pending"

    def test_checkout_empties_cart(self, client, customer, order):
        cart = client.get("/api/user/cart", headers=customer).json()["data"]["cart"]

        assert cart["items"] == []
        assert cart["restaurant_id"] is None

    def test_pickup_has_no_delivery_fee(self, client, customer):
        add_to_cart(client, customer, quantity=2)

        order = place_order(client, customer, order_type="pickup", delivery_address=None).json()["data"]["order"]

        assert order["delivery_fee"] == 0
        assert order["total"] == 22.6
        assert order["estimated_pickup_time"] is not None
        assert order["estimated_delivery_time"] is None

    def test_coupon_carried_into_order(self, client, customer, make_discount):
        make_discount()
        add_to_cart(client, customer, quantity=2)
        client.put("/api/user/cart", json={"action": "apply-coupon", "coupon_code": "SAVE10"}, headers=customer)

        order = place_order(client, customer).json()["data"]["order"]

        assert order["coupon_code"] == "SAVE10"
        assert order["discount"] == 2
        assert order["total"] == 23.1

    def test_empty_cart(self, client, customer):
        resp = place_order(client, customer)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Cart is empty"

    def test_below_minimum(self, client, customer):
        add_to_cart(client, customer, menu_item_id="m2")

        resp = place_order(client, customer)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Order does not meet the minimum order amount of $10.00"

    def test_unavailable_items_block_checkout(self, client, customer, restaurants):
        add_to_cart(client, customer, quantity=2)
        restaurants.menu_item("r1", "m1")["is_available"] = False

        resp = place_order(client, customer)

        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "Some items in your cart are no longer available"
        assert body["data"]["unavailable_items"][0]["reason"] == "Item temporarily unavailable"
        cart = client.get("/api/user/cart", headers=customer).json()["data"]["cart"]
        assert len(cart["items"]) == 1

    def test_closed_restaurant(self, client, customer, restaurants):
        add_to_cart(client, customer, quantity=2)
        restaurants.restaurants["r1"]["is_active"] = False

        resp = place_order(client, customer)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Restaurant is not available"

    def test_delivery_needs_address(self, client, customer):
        add_to_cart(client, customer, quantity=2)

        resp = place_order(client, customer, delivery_address=None)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Complete delivery address is required for delivery orders"


class TestCustomerOrders:
    def test_get_order(self, client, customer, order):
        resp = client.get(f"/api/user/orders/{order['id']}", headers=customer)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["order"]["id"] == order["id"]
        assert data["can_cancel"] is True
        assert len(data["tracking_history"]) == 1

    def test_other_customer_denied(self, client, order):
        resp = client.get(f"/api/user/orders/{order['id']}", headers=auth(4))

        assert resp.status_code == 403

    def test_missing_order(self, client, customer):
        resp = client.get("/api/user/orders/999", headers=customer)

        assert resp.status_code == 404
        assert resp.json()["message"] == "Order not found"

    def test_cancel_pending(self, client, customer, order):
        resp = client.put(
            f"/api/user/orders/{order['id']}",
            json={"action": "cancel", "reason": "Changed my mind"},
            headers=customer,
        )

        assert resp.status_code == 200
        cancelled = resp.json()["data"]["order"]
        assert cancelled["status"] == "cancelled"
        assert cancelled["cancellation"]["reason"] == "Changed my mind"
        assert cancelled["cancellation"]["cancelled_by"] == "customer"
        assert cancelled["cancellation"]["refund_amount"] == order["total"]

    def test_cancel_after_preparing_started(self, client, customer, order):
        advance(client, order["id"], "confirm")
        advance(client, order["id"], "start-preparing")

        resp = client.put(f"/api/user/orders/{order['id']}", json={"action": "cancel"}, headers=customer)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Order cannot be cancelled at this stage"

    def test_list_orders(self, client, customer, order):
        add_to_cart(client, customer, quantity=3)
        place_order(client, customer)
        client.put(f"/api/user/orders/{order['id']}", json={"action": "cancel"}, headers=customer)

        data = client.get("/api/user/orders", headers=customer).json()["data"]

        assert data["pagination"]["total_orders"] == 2
        assert data["stats"]["total_orders"] == 2
        assert data["stats"]["status_counts"]["pending"] == 1
        assert data["stats"]["status_counts"]["cancelled"] == 1
        assert data["stats"]["status_counts"]["delivered"] == 0

        pending = client.get("/api/user/orders", params={"status": "pending"}, headers=customer).json()["data"]
        assert [o["status"] for o in pending["orders"]] == ["pending"]


class TestRestaurantActions:
    def test_full_delivery_lifecycle(self, client, order):
        for action, status in [
            ("confirm", "confirmed"),
            ("start-preparing", "preparing"),
            ("mark-ready", "ready"),
            ("out-for-delivery", "out-for-delivery"),
            ("deliver", "delivered"),
        ]:
            resp = advance(client, order["id"], action)
            assert resp.status_code == 200
            assert resp.json()["data"]["order"]["status"] == status

        tracking = resp.json()["data"]["order"]["tracking_history"]
        assert [t["status"] for t in tracking][-1] == "delivered"
        assert len(tracking) == 6

    def test_skipping_states_rejected(self, client, order):
        resp = advance(client, order["id"], "deliver")

        assert resp.status_code == 400
        assert resp.json()["message"] == "Cannot deliver an order that is pending"

    def test_pickup_cannot_go_out_for_delivery(self, client, customer):
        add_to_cart(client, customer, quantity=2)
        order = place_order(client, customer, order_type="pickup", delivery_address=None).json()["data"]["order"]
        for action in ("confirm", "start-preparing", "mark-ready"):
            advance(client, order["id"], action)

        resp = advance(client, order["id"], "out-for-delivery")

        assert resp.status_code == 400
        assert advance(client, order["id"], "deliver").status_code == 200

    def test_restaurant_cancel_while_preparing(self, client, order):
        advance(client, order["id"], "confirm")
        advance(client, order["id"], "start-preparing")

        resp = advance(client, order["id"], "cancel", reason="Out of stock")

        assert resp.status_code == 200
        assert resp.json()["data"]["order"]["cancellation"]["cancelled_by"] == "restaurant"

    def test_other_owner_denied(self, client, order):
        resp = advance(client, order["id"], "confirm", headers=auth(3))

        assert resp.status_code == 403
        assert resp.json()["message"] == "Access denied to this order"

    def test_customer_cannot_use_restaurant_endpoint(self, client, customer, order):
        resp = advance(client, order["id"], "confirm", headers=customer)

        assert resp.status_code == 403
        assert resp.json()["message"] == "Access denied. Insufficient permissions."


@pytest.fixture()
def broker_down(monkeypatch):
    def _delay(*args, **kwargs):
        raise OperationalError("broker unreachable")

    monkeypatch.setattr(notification_service.send_order_notification_task, "delay", _delay)


class TestNotificationOutage:
    def test_checkout_succeeds_without_broker(self, client, customer, db, broker_down):
        add_to_cart(client, customer, quantity=2)

        resp = place_order(client, customer)

        assert resp.status_code == 201
        assert resp.json()["success"] is True
        assert db.query(OrderModel).count() == 1
        assert db.query(CartItemModel).count() == 0

    def test_status_changes_succeed_without_broker(self, client, customer, order, broker_down):
        assert advance(client, order["id"], "confirm").status_code == 200

        resp = client.put(f"/api/user/orders/{order['id']}", json={"action": "cancel"}, headers=customer)

        assert resp.status_code == 200
        assert resp.json()["data"]["order"]["status"] == "cancelled"
