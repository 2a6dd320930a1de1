# catalog_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Catalog Service (dev mock)")


ITEMS = {
    1: {"id": 1, "name": "Chips Mayai", "price": 3000.00, "available": True, "restaurant_id": 1},
    2: {"id": 2, "name": "Mandazi", "price": 500.00, "available": True, "restaurant_id": 1},
    3: {"id": 3, "name": "Chai Maziwa", "price": 300.00, "available": True, "restaurant_id": 1},
    4: {"id": 4, "name": "Chicken Curry", "price": 8000.00, "available": True, "restaurant_id": 2},
    5: {"id": 5, "name": "Nyama Choma", "price": 12000.00, "available": True, "restaurant_id": 2},
    6: {"id": 6, "name": "Fish Fry", "price": 9000.00, "available": False, "restaurant_id": 2},
}

@app.get("/items/{item_id}")
def get_item(item_id: int):
    item = ITEMS.get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item
