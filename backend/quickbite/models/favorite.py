from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from quickbite.db import Base


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("session_uuid", "restaurant_id", name="uq_favorite"),
    )
    id = Column(Integer, primary_key=True, autoincrement=True)
    session_uuid = Column(String(64), nullable=False, index=True)
    restaurant_id = Column(String(64), ForeignKey("restaurants.id"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    restaurant = relationship("Restaurant")
