import copy
import os

#must happen before foodsewa reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from foodsewa.api.deps import get_restaurant_client
from foodsewa.celery_worker import celery_app
from foodsewa.data.database import Base, SessionLocal, engine, get_db
from foodsewa.data.models import UserModel
from foodsewa.domain.enums import UserRole
from foodsewa.main import create_app
from foodsewa.services.user_service import issue_token

celery_app.conf.task_always_eager = True


CATALOGUE = {
    "r1": {
        "id": "r1",
        "name": "Momo Corner",
        "is_active": True,
        "is_verified": True,
        "owner_id": 2,
        "delivery_fee": 2.50,
        "minimum_order": 10.00,
        "delivery_time": {"min": 25, "max": 40},
        "menu": [
            {"id": "m1", "name": "Chicken Momo", "description": "Steamed dumplings", "price": 10.00,
             "category": "main", "image": "/images/momo.jpg", "is_available": True, "preparation_time": 15},
            {"id": "m2", "name": "Thukpa", "description": "Noodle soup", "price": 7.00,
             "category": "main", "image": "/images/thukpa.jpg", "is_available": True, "preparation_time": 20},
            {"id": "m3", "name": "Lassi", "description": "Yogurt drink", "price": 3.00,
             "category": "beverage", "image": "/images/lassi.jpg", "is_available": False, "preparation_time": 5},
        ],
    },
    "r2": {
        "id": "r2",
        "name": "Dal Bhat House",
        "is_active": True,
        "is_verified": True,
        "owner_id": 3,
        "delivery_fee": 1.00,
        "minimum_order": 0,
        "delivery_time": {"min": 30, "max": 50},
        "menu": [
            {"id": "m10", "name": "Dal Bhat Set", "description": "Rice, lentils, curry", "price": 9.00,
             "category": "main", "image": "/images/dalbhat.jpg", "is_available": True, "preparation_time": 25},
        ],
    },
    "r3": {
        "id": "r3",
        "name": "Closed Kitchen",
        "is_active": False,
        "is_verified": True,
        "owner_id": 3,
        "delivery_fee": 0,
        "minimum_order": 0,
        "delivery_time": {"min": 20, "max": 30},
        "menu": [],
    },
}


class FakeRestaurantClient:
    def __init__(self):
        self.restaurants = copy.deepcopy(CATALOGUE)

    def fetch_restaurant(self, restaurant_id):
        return copy.deepcopy(self.restaurants.get(restaurant_id))

    def menu_item(self, restaurant_id, menu_item_id):
        return next(m for m in self.restaurants[restaurant_id]["menu"] if m["id"] == menu_item_id)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def restaurants():
    return FakeRestaurantClient()


@pytest.fixture()
def users(db):
    db.add_all(
        [
            UserModel(id=1, name="Customer", email="c1@test", role=UserRole.USER.value, is_active=True),
            UserModel(id=2, name="Momo Owner", email="o2@test", role=UserRole.RESTAURANT.value, is_active=True),
            UserModel(id=3, name="Dal Bhat Owner", email="o3@test", role=UserRole.RESTAURANT.value, is_active=True),
            UserModel(id=4, name="Other Customer", email="c4@test", role=UserRole.USER.value, is_active=True),
            UserModel(id=5, name="Gone", email="c5@test", role=UserRole.USER.value, is_active=False),
        ]
    )
    db.commit()
    return {u.id: u for u in db.query(UserModel).all()}


@pytest.fixture()
def client(db, restaurants, users):
    app = create_app()

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_restaurant_client] = lambda: restaurants
    return TestClient(app)


def auth(user_id: int) -> dict:
    return {"Authorization": f"Bearer {issue_token(user_id)}"}


@pytest.fixture()
def customer():
    return auth(1)


@pytest.fixture()
def owner():
    return auth(2)


@pytest.fixture()
def make_discount(db):
    from datetime import timedelta
    from decimal import Decimal

    from foodsewa.data.models import DiscountModel
    from foodsewa.utils.timeutil import utcnow

    def _make(**overrides):
        now = utcnow()
        fields = {
            "restaurant_id": "r1",
            "name": "Save 10",
            "type": "percentage",
            "value": Decimal("10"),
            "code": "SAVE10",
            "min_order_amount": Decimal("0"),
            "max_discount": Decimal("0"),
            "usage_limit": 0,
            "used_count": 0,
            "user_limit": 1,
            "start_date": now - timedelta(days=1),
            "end_date": now + timedelta(days=1),
            "applicable_items": [],
            "customer_segment": "all",
            "is_active": True,
        }
        fields.update(overrides)
        discount = DiscountModel(**fields)
        db.add(discount)
        db.commit()
        return discount

    return _make


def add_to_cart(client, headers, menu_item_id="m1", restaurant_id="r1", quantity=1, **extra):
    body = {"restaurant_id": restaurant_id, "menu_item_id": menu_item_id, "quantity": quantity, **extra}
    return client.post("/api/user/cart", json=body, headers=headers)
