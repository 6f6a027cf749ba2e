from datetime import date

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from quickbite.db import Base


class Promotion(Base):
    __tablename__ = "promotions"
    id = Column(String(64), primary_key=True)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    type = Column(
        String(32), nullable=False
    )  # percentage, fixed_amount, free_delivery, buy_one_get_one
    # percent for percentage/buy_one_get_one, cents for fixed_amount
    discount_value = Column(Integer, nullable=False, default=0)
    restaurant_id = Column(String(64), ForeignKey("restaurants.id"), nullable=True)
    restaurant_name = Column(String(256), nullable=True)
    minimum_order_cents = Column(Integer, nullable=False, default=0)
    maximum_discount_cents = Column(Integer, nullable=False, default=0)  # 0 = uncapped
    usage_limit = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    expiry_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def is_expired(self, today: date = None) -> bool:
        return self.expiry_date < (today or date.today())


class PromotionUsage(Base):
    __tablename__ = "promotion_usage"
    __table_args__ = (
        UniqueConstraint("session_uuid", "code", name="uq_promotion_usage"),
    )
    id = Column(Integer, primary_key=True, autoincrement=True)
    session_uuid = Column(String(64), nullable=False, index=True)
    code = Column(String(64), nullable=False)
    times_used = Column(Integer, nullable=False, default=0)
