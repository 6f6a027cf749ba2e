from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from quickbite.models.favorite import Favorite
from quickbite.models.restaurant import Restaurant
from quickbite.repositories.favorite_repo import FavoriteRepository
from quickbite.services.catalogue_service import CatalogueException, CatalogueService
from quickbite.utils.log import get_logger

log = get_logger("favorites")


class FavoriteService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = FavoriteRepository(db)
        self.catalogue = CatalogueService(db)

    def add(self, session_uuid: str, restaurant_id: str) -> Tuple[Favorite, bool]:
        try:
            self.catalogue.get_restaurant(restaurant_id)
        except CatalogueException:
            log.warning(f"favorite for {session_uuid}: unknown restaurant {restaurant_id}")
            raise
        existing = self.repo.get(session_uuid, restaurant_id)
        if existing:
            return existing, False
        fav = self.repo.add(session_uuid, restaurant_id)
        self.db.commit()
        log.debug(f"{session_uuid} favorited {restaurant_id}")
        return fav, True

    def remove(self, session_uuid: str, restaurant_id: str) -> bool:
        fav = self.repo.get(session_uuid, restaurant_id)
        if not fav:
            return False
        self.repo.remove(fav)
        self.db.commit()
        return True

    def toggle(self, session_uuid: str, restaurant_id: str) -> bool:
        """Flip the favorite state and return the new one."""
        if self.is_favorite(session_uuid, restaurant_id):
            self.remove(session_uuid, restaurant_id)
            return False
        self.add(session_uuid, restaurant_id)
        return True

    def is_favorite(self, session_uuid: str, restaurant_id: str) -> bool:
        return self.repo.get(session_uuid, restaurant_id) is not None

    def list_favorites(self, session_uuid: str) -> List[Restaurant]:
        return [f.restaurant for f in self.repo.list_for_session(session_uuid)]

    def search_favorites(self, session_uuid: str, query: Optional[str]) -> List[Restaurant]:
        favorites = self.list_favorites(session_uuid)
        if not query or not query.strip():
            return favorites
        q = query.strip().lower()
        return [
            r
            for r in favorites
            if q in r.name.lower() or any(q in c.lower() for c in (r.cuisine or []))
        ]
