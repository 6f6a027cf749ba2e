from typing import List, Optional

from sqlalchemy.orm import Session

from quickbite.models.favorite import Favorite


class FavoriteRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, session_uuid: str, restaurant_id: str) -> Optional[Favorite]:
        return (
            self.db.query(Favorite)
            .filter(
                Favorite.session_uuid == session_uuid,
                Favorite.restaurant_id == restaurant_id,
            )
            .first()
        )

    def list_for_session(self, session_uuid: str) -> List[Favorite]:
        return (
            self.db.query(Favorite)
            .filter(Favorite.session_uuid == session_uuid)
            .order_by(Favorite.id)
            .all()
        )

    def add(self, session_uuid: str, restaurant_id: str) -> Favorite:
        fav = Favorite(session_uuid=session_uuid, restaurant_id=restaurant_id)
        self.db.add(fav)
        self.db.flush()
        return fav

    def remove(self, fav: Favorite):
        self.db.delete(fav)
        self.db.flush()
