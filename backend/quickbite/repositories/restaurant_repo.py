from typing import List, Optional

from sqlalchemy.orm import Session

from quickbite.models.menu_item import MenuItem
from quickbite.models.restaurant import Restaurant


class RestaurantRepository:
    def __init__(self, db: Session):
        self.db = db

    def all(self) -> List[Restaurant]:
        return self.db.query(Restaurant).order_by(Restaurant.position).all()

    def get(self, restaurant_id: str) -> Optional[Restaurant]:
        return self.db.get(Restaurant, restaurant_id)


class MenuRepository:
    def __init__(self, db: Session):
        self.db = db

    def for_restaurant(self, restaurant_id: str) -> List[MenuItem]:
        return (
            self.db.query(MenuItem)
            .filter(MenuItem.restaurant_id == restaurant_id)
            .order_by(MenuItem.position)
            .all()
        )

    def get(self, item_id: str) -> Optional[MenuItem]:
        return self.db.get(MenuItem, item_id)
