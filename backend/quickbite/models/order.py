from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from quickbite.db import Base
from quickbite.services.order_status import OrderStatus


def _utcnow():
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"
    id = Column(String(64), primary_key=True)
    session_uuid = Column(String(64), nullable=False, index=True)
    restaurant_id = Column(String(64), nullable=True, index=True)
    restaurant_name = Column(String(256), nullable=True)
    status = Column(
        String(32), nullable=False, default=OrderStatus.PENDING.value
    )  # pending, confirmed, preparing, out-for-delivery, delivered, cancelled
    subtotal_cents = Column(Integer, nullable=False, default=0)
    delivery_fee_cents = Column(Integer, nullable=False, default=0)
    service_fee_cents = Column(Integer, nullable=False, default=0)
    discount_cents = Column(Integer, nullable=False, default=0)
    promotion_code = Column(String(64), nullable=True)
    total_cents = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    estimated_delivery_at = Column(DateTime(timezone=True), nullable=True)

    lines = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )


class OrderLine(Base):
    __tablename__ = "order_lines"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(64), ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(String(64), nullable=False)
    name = Column(String(256), nullable=False)
    unit_price_cents = Column(Integer, nullable=False)
    customizations = Column(JSON, nullable=False, default=list)
    quantity = Column(Integer, nullable=False)
    total_cents = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="lines")
