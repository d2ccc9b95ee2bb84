# restaurant_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Restaurant Service (dev mock)")


RESTAURANTS = {
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
            {"id": "m1", "name": "Chicken Momo", "description": "Steamed dumplings", "price": 8.50,
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
}

@app.get("/restaurants/{restaurant_id}")
def get_restaurant(restaurant_id: str):
    restaurant = RESTAURANTS.get(restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant
