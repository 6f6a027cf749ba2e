from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from quickbite.models.promotion import Promotion
from quickbite.repositories.promotion_repo import PromotionRepository
from quickbite.services.pricing import format_cents, round_cents
from quickbite.utils.log import get_logger

log = get_logger("promotions")

PERCENTAGE = "percentage"
FIXED_AMOUNT = "fixed_amount"
FREE_DELIVERY = "free_delivery"
BUY_ONE_GET_ONE = "buy_one_get_one"

_FEATURED_RANK = {PERCENTAGE: 0, FIXED_AMOUNT: 1}


class PromotionException(Exception):
    pass


class PromotionService:
    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self.repo = PromotionRepository(db)
        self.today = today

    def _today(self) -> date:
        return self.today or date.today()

    def list_active(self) -> List[Promotion]:
        today = self._today()
        active = [p for p in self.repo.all() if p.is_active and not p.is_expired(today)]
        return sorted(active, key=lambda p: p.expiry_date)

    def get_by_code(self, code: str) -> Optional[Promotion]:
        code = (code or "").strip().lower()
        return next((p for p in self.list_active() if p.code.lower() == code), None)

    def by_restaurant(self, restaurant_id: str) -> List[Promotion]:
        return [p for p in self.list_active() if p.restaurant_id == restaurant_id]

    def featured(self, limit: int = 3) -> List[Promotion]:
        ranked = sorted(
            self.list_active(),
            key=lambda p: (_FEATURED_RANK.get(p.type, 2), -p.discount_value),
        )
        return ranked[:limit]

    def validate(
        self,
        session_uuid: str,
        code: str,
        order_total_cents: int,
        restaurant_id: Optional[str] = None,
    ) -> Promotion:
        """
        Return the promotion for `code` or raise PromotionException with a
        message fit for showing to the customer.
        """
        promotion = self.repo.get_by_code((code or "").strip())
        if not promotion:
            raise PromotionException("Invalid promotion code")
        if not promotion.is_active:
            raise PromotionException("This promotion is no longer active")
        if promotion.is_expired(self._today()):
            raise PromotionException("This promotion has expired")
        # promotions without a restaurant apply everywhere
        if restaurant_id and promotion.restaurant_id and promotion.restaurant_id != restaurant_id:
            raise PromotionException(
                f"This promotion is only valid for {promotion.restaurant_name}"
            )
        if promotion.minimum_order_cents > 0 and order_total_cents < promotion.minimum_order_cents:
            raise PromotionException(
                f"Minimum order amount is {format_cents(promotion.minimum_order_cents)}"
            )
        if promotion.usage_limit > 0:
            used = self.repo.times_used(session_uuid, promotion.code)
            if used >= promotion.usage_limit:
                raise PromotionException(
                    "You have reached the usage limit for this promotion"
                )
        return promotion

    def calculate_discount(
        self, promotion: Promotion, order_total_cents: int, delivery_fee_cents: int = 0
    ) -> int:
        if promotion.type in (PERCENTAGE, BUY_ONE_GET_ONE):
            # buy_one_get_one is approximated as a percentage of the order
            discount = round_cents(
                Decimal(order_total_cents) * promotion.discount_value / 100
            )
            if promotion.maximum_discount_cents > 0:
                discount = min(discount, promotion.maximum_discount_cents)
        elif promotion.type == FIXED_AMOUNT:
            discount = min(promotion.discount_value, order_total_cents)
        elif promotion.type == FREE_DELIVERY:
            discount = delivery_fee_cents
        else:
            discount = 0
        return discount

    def apply(
        self,
        session_uuid: str,
        code: str,
        order_total_cents: int,
        restaurant_id: Optional[str] = None,
        delivery_fee_cents: int = 0,
        commit: bool = True,
    ) -> Dict:
        promotion = self.validate(session_uuid, code, order_total_cents, restaurant_id)
        discount = self.calculate_discount(promotion, order_total_cents, delivery_fee_cents)
        self.repo.record_usage(session_uuid, promotion.code)
        if commit:
            self.db.commit()
        log.info(f"applied {promotion.code} for {session_uuid}: -{discount}")
        return {
            "promotion": promotion,
            "discount_cents": discount,
            "final_total_cents": max(0, order_total_cents - discount),
        }
