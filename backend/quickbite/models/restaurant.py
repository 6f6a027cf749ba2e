from sqlalchemy import JSON, Boolean, Column, Float, Integer, String, Text

from quickbite.db import Base


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(String(64), primary_key=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    cuisine = Column(JSON, nullable=False, default=list)  # list of cuisine labels
    rating = Column(Float, nullable=False, default=0.0)
    delivery_time = Column(Integer, nullable=False, default=30)  # minutes
    delivery_fee_cents = Column(Integer, nullable=False, default=0)
    is_open = Column(Boolean, default=True, nullable=False)
    image = Column(String(512), nullable=True)
    position = Column(Integer, nullable=False, default=0)  # catalogue order

    def __repr__(self):
        return f"<Restaurant id={self.id} name={self.name}>"
