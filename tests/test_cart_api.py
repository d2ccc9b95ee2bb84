import pytest

from conftest import add_to_cart, auth


class TestCartRead:
    def test_requires_auth(self, client):
        resp = client.get("/api/user/cart")

        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Unauthorized"}

    def test_get_creates_empty_cart(self, client, customer):
        resp = client.get("/api/user/cart", headers=customer)

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["cart"]["items"] == []
        assert body["data"]["summary"]["total"] == 0
        assert body["data"]["validation"] == {"is_valid": True, "unavailable_items": []}

    def test_validation_reports_price_change(self, client, customer, restaurants):
        add_to_cart(client, customer)
        restaurants.menu_item("r1", "m1")["price"] = 11.00

        validation = client.get("/api/user/cart", headers=customer).json()["data"]["validation"]

        assert validation["is_valid"] is False
        assert validation["unavailable_items"][0]["reason"] == "Price changed"
        assert validation["unavailable_items"][0]["current_price"] == 11

    def test_validation_reports_unavailable_item(self, client, customer, restaurants):
        add_to_cart(client, customer, menu_item_id="m2")
        restaurants.menu_item("r1", "m2")["is_available"] = False

        validation = client.get("/api/user/cart", headers=customer).json()["data"]["validation"]

        assert validation["unavailable_items"] == [
            {"index": 0, "name": "Thukpa", "reason": "Item temporarily unavailable"}
        ]


class TestCartAdd:
    def test_add_item(self, client, customer):
        resp = add_to_cart(client, customer, quantity=2)

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Item added to cart successfully"
        cart = body["data"]["cart"]
        assert cart["restaurant_id"] == "r1"
        assert cart["restaurant_name"] == "Momo Corner"
        assert cart["items"][0]["quantity"] == 2
        summary = body["data"]["summary"]
        assert summary["subtotal"] == 20
        assert summary["delivery_fee"] == 2.5
        assert summary["total"] == 22.5
        assert summary["estimated_delivery_time"] == 35

    def test_other_restaurant_rejected(self, client, customer):
        add_to_cart(client, customer)

        resp = add_to_cart(client, customer, menu_item_id="m10", restaurant_id="r2")

        assert resp.status_code == 400
        assert resp.json()["message"].startswith("Cannot add items from different restaurants")
        cart = client.get("/api/user/cart", headers=customer).json()["data"]["cart"]
        assert cart["restaurant_id"] == "r1"
        assert len(cart["items"]) == 1

    def test_unavailable_menu_item(self, client, customer):
        resp = add_to_cart(client, customer, menu_item_id="m3")

        assert resp.status_code == 404
        assert resp.json()["message"] == "Menu item not found or not available"

    def test_inactive_restaurant(self, client, customer):
        resp = add_to_cart(client, customer, menu_item_id="x", restaurant_id="r3")

        assert resp.status_code == 404

    def test_quantity_above_limit(self, client, customer):
        resp = add_to_cart(client, customer, quantity=11)

        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_merge_above_limit(self, client, customer):
        add_to_cart(client, customer, quantity=9)

        resp = add_to_cart(client, customer, quantity=2)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Maximum 10 items allowed per menu item"

    def test_unknown_field_rejected(self, client, customer):
        resp = add_to_cart(client, customer, price=0.01)

        assert resp.status_code == 400


class TestCartUpdate:
    def test_update_quantity(self, client, customer):
        add_to_cart(client, customer)

        resp = client.put(
            "/api/user/cart",
            json={"action": "update-quantity", "item_index": 0, "quantity": 3},
            headers=customer,
        )

        assert resp.status_code == 200
        assert resp.json()["message"] == "Item quantity updated successfully"
        assert resp.json()["data"]["summary"]["item_count"] == 3

    @pytest.mark.parametrize(
        "quantity, message",
        [(0, "Quantity must be at least 1"), (11, "Maximum 10 items allowed per menu item")],
    )
    def test_update_quantity_out_of_range(self, client, customer, quantity, message):
        add_to_cart(client, customer, quantity=2)

        resp = client.put(
            "/api/user/cart",
            json={"action": "update-quantity", "item_index": 0, "quantity": quantity},
            headers=customer,
        )

        assert resp.status_code == 400
        assert resp.json()["message"] == message
        cart = client.get("/api/user/cart", headers=customer).json()["data"]["cart"]
        assert cart["items"][0]["quantity"] == 2

    @pytest.mark.parametrize("quantity", [1, 10])
    def test_update_quantity_bounds(self, client, customer, quantity):
        add_to_cart(client, customer, quantity=2)

        resp = client.put(
            "/api/user/cart",
            json={"action": "update-quantity", "item_index": 0, "quantity": quantity},
            headers=customer,
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["cart"]["items"][0]["quantity"] == quantity

    def test_missing_fields_for_action(self, client, customer):
        add_to_cart(client, customer)

        resp = client.put("/api/user/cart", json={"action": "update-quantity"}, headers=customer)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Item index and quantity are required"

    def test_remove_bad_index(self, client, customer):
        add_to_cart(client, customer)

        resp = client.put("/api/user/cart", json={"action": "remove-item", "item_index": 5}, headers=customer)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid item index"

    def test_remove_last_item_frees_restaurant(self, client, customer):
        add_to_cart(client, customer)

        resp = client.put("/api/user/cart", json={"action": "remove-item", "item_index": 0}, headers=customer)

        assert resp.json()["data"]["cart"]["restaurant_id"] is None
        assert add_to_cart(client, customer, menu_item_id="m10", restaurant_id="r2").status_code == 200

    def test_no_cart(self, client):
        resp = client.put("/api/user/cart", json={"action": "clear-cart"}, headers=auth(4))

        assert resp.status_code == 404
        assert resp.json()["message"] == "Cart not found"

    def test_apply_and_remove_coupon(self, client, customer, make_discount):
        make_discount()
        add_to_cart(client, customer, quantity=2)

        resp = client.put("/api/user/cart", json={"action": "apply-coupon", "coupon_code": "save10"}, headers=customer)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["cart"]["coupon_code"] == "SAVE10"
        assert data["summary"]["discount"] == 2
        assert data["summary"]["total"] == 20.5

        resp = client.put("/api/user/cart", json={"action": "remove-coupon"}, headers=customer)

        assert resp.json()["data"]["cart"]["coupon_code"] is None
        assert resp.json()["data"]["summary"]["total"] == 22.5

    def test_coupon_on_empty_cart(self, client, customer, make_discount):
        make_discount()
        client.get("/api/user/cart", headers=customer)

        resp = client.put("/api/user/cart", json={"action": "apply-coupon", "coupon_code": "SAVE10"}, headers=customer)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Cannot apply a coupon to an empty cart"

    def test_unknown_coupon(self, client, customer):
        add_to_cart(client, customer)

        resp = client.put("/api/user/cart", json={"action": "apply-coupon", "coupon_code": "NOPE"}, headers=customer)

        assert resp.status_code == 404
        assert resp.json()["message"] == "Invalid discount code"


class TestCartClear:
    def test_clear_twice(self, client, customer):
        add_to_cart(client, customer)

        first = client.delete("/api/user/cart", headers=customer)
        second = client.delete("/api/user/cart", headers=customer)

        assert first.status_code == second.status_code == 200
        assert second.json()["message"] == "Cart cleared successfully"
        assert second.json()["data"]["cart"]["items"] == []
        assert second.json()["data"]["summary"]["total"] == 0
