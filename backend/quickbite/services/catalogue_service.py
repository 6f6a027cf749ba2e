from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from quickbite.models.menu_item import MenuItem
from quickbite.models.restaurant import Restaurant
from quickbite.repositories.restaurant_repo import MenuRepository, RestaurantRepository
from quickbite.utils.log import get_logger

log = get_logger("catalogue")


class CatalogueException(Exception):
    pass


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


class CatalogueService:
    """
    Restaurant and menu browsing.

    Collections are small and loaded whole; search and filtering are plain
    predicates over the loaded list, in catalogue order.
    """

    def __init__(self, db: Session):
        self.db = db
        self.restaurant_repo = RestaurantRepository(db)
        self.menu_repo = MenuRepository(db)

    def list_restaurants(self) -> List[Restaurant]:
        return self.restaurant_repo.all()

    def get_restaurant(self, restaurant_id: str) -> Restaurant:
        r = self.restaurant_repo.get(restaurant_id)
        if not r:
            log.debug(f"restaurant {restaurant_id} not found")
            raise CatalogueException("Restaurant not found")
        return r

    def search_restaurants(self, query: Optional[str]) -> List[Restaurant]:
        restaurants = self.list_restaurants()
        if not query or not query.strip():
            return restaurants
        q = query.strip().lower()
        return [
            r
            for r in restaurants
            if _contains(r.name, q)
            or _contains(r.description, q)
            or any(_contains(c, q) for c in (r.cuisine or []))
        ]

    def filter_restaurants(
        self,
        cuisine: Optional[Iterable[str]] = None,
        min_rating: Optional[float] = None,
        max_delivery_time: Optional[int] = None,
        is_open: Optional[bool] = None,
        restaurants: Optional[List[Restaurant]] = None,
    ) -> List[Restaurant]:
        filtered = list(restaurants if restaurants is not None else self.list_restaurants())
        wanted = [c.lower() for c in cuisine or []]
        if wanted:
            filtered = [
                r for r in filtered if any(c.lower() in wanted for c in (r.cuisine or []))
            ]
        if min_rating is not None:
            filtered = [r for r in filtered if r.rating >= min_rating]
        if max_delivery_time is not None:
            filtered = [r for r in filtered if r.delivery_time <= max_delivery_time]
        if is_open is not None:
            filtered = [r for r in filtered if r.is_open == is_open]
        return filtered

    def menu_for_restaurant(self, restaurant_id: str) -> Dict[str, List[MenuItem]]:
        self.get_restaurant(restaurant_id)
        grouped: Dict[str, List[MenuItem]] = OrderedDict()
        for item in self.menu_repo.for_restaurant(restaurant_id):
            grouped.setdefault(item.category, []).append(item)
        return grouped

    def get_menu_item(self, item_id: str) -> MenuItem:
        item = self.menu_repo.get(item_id)
        if not item:
            log.debug(f"menu item {item_id} not found")
            raise CatalogueException("Menu item not found")
        return item

    def search_menu_items(self, restaurant_id: str, query: Optional[str]) -> List[MenuItem]:
        self.get_restaurant(restaurant_id)
        items = self.menu_repo.for_restaurant(restaurant_id)
        if not query or not query.strip():
            return items
        q = query.strip().lower()
        return [
            i
            for i in items
            if _contains(i.name, q) or _contains(i.description, q) or _contains(i.category, q)
        ]
