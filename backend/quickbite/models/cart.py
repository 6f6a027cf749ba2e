from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from quickbite.db import Base


class Cart(Base):
    __tablename__ = "carts"
    id = Column(Integer, primary_key=True, index=True)
    session_uuid = Column(
        String(64), unique=True, index=True, nullable=False
    )  # guest identifier
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lines = relationship(
        "CartLine",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartLine.id",
    )
