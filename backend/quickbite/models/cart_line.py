from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from quickbite.db import Base


class CartLine(Base):
    __tablename__ = "cart_lines"
    id = Column(Integer, primary_key=True, autoincrement=True)
    line_id = Column(String(96), unique=True, nullable=False, index=True)
    cart_id = Column(
        Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id = Column(String(64), ForeignKey("menu_items.id"), nullable=False)
    name = Column(String(256), nullable=False)
    unit_price_cents = Column(
        Integer, nullable=False, default=0
    )  # price at time of add
    customizations = Column(JSON, nullable=False, default=list)
    quantity = Column(Integer, nullable=False, default=1)
    total_cents = Column(Integer, nullable=False, default=0)

    cart = relationship("Cart", back_populates="lines")
    menu_item = relationship("MenuItem")
