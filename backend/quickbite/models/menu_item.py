from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text

from quickbite.db import Base


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(String(64), primary_key=True)
    restaurant_id = Column(
        String(64), ForeignKey("restaurants.id"), nullable=False, index=True
    )
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(128), nullable=False, default="Other")
    price_cents = Column(Integer, nullable=False, default=0)
    available = Column(Boolean, default=True, nullable=False)
    # offered choices: [{"name": "Extra cheese", "price_cents": 150}, ...]
    customizations = Column(JSON, nullable=True)
    image = Column(String(512), nullable=True)
    position = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<MenuItem id={self.id} name={self.name}>"
