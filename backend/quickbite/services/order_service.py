import time
from collections import Counter
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from quickbite.config import settings
from quickbite.models.cart import Cart
from quickbite.models.cart_line import CartLine
from quickbite.models.order import Order, OrderLine
from quickbite.repositories.order_repo import OrderRepository
from quickbite.repositories.restaurant_repo import MenuRepository, RestaurantRepository
from quickbite.services import pricing
from quickbite.services.cart_service import CartService, CartServiceException
from quickbite.services.order_status import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    InvalidStatusTransition,
    OrderStatus,
    ensure_transition,
    next_status,
    parse_status,
)
from quickbite.services.promotion_service import PromotionException, PromotionService
from quickbite.utils.log import get_logger

log = get_logger("orders")

SORT_KEYS = {
    "newest": (lambda o: _as_utc(o.created_at), True),
    "oldest": (lambda o: _as_utc(o.created_at), False),
    "total-high": (lambda o: o.total_cents, True),
    "total-low": (lambda o: o.total_cents, False),
}


class OrderServiceException(Exception):
    pass


class OrderNotFound(OrderServiceException):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class OrderService:
    def __init__(self, db: Session, progression=None):
        self.db = db
        self.repo = OrderRepository(db)
        self.restaurant_repo = RestaurantRepository(db)
        self.menu_repo = MenuRepository(db)
        self.progression = progression

    def _gen_order_id(self) -> str:
        return f"order_{int(time.time() * 1000)}_{uuid4().hex[:9]}"

    def _schedule_next(self, order: Order):
        if self.progression is not None and parse_status(order.status) not in TERMINAL_STATUSES:
            self.progression.schedule_next(order.id, order.status)

    def checkout(self, cart: Cart, promotion_code: Optional[str] = None) -> Order:
        """
        Snapshot the cart into a new pending order, then empty the cart.

        Line names, prices and customizations are copied so later catalogue
        edits never change a placed order. A rejected promotion code aborts
        the checkout and leaves the cart untouched.
        """
        lines: List[CartLine] = list(cart.lines)
        if not lines:
            raise OrderServiceException("Cart is empty")

        first_item = self.menu_repo.get(lines[0].menu_item_id)
        restaurant = self.restaurant_repo.get(first_item.restaurant_id) if first_item else None

        subtotal = pricing.cart_subtotal_cents(lines)
        delivery_fee = settings.DELIVERY_FEE_CENTS
        service_fee = settings.SERVICE_FEE_CENTS

        try:
            discount = 0
            applied_code = None
            if promotion_code:
                applied = PromotionService(self.db).apply(
                    cart.session_uuid,
                    promotion_code,
                    subtotal,
                    restaurant_id=restaurant.id if restaurant else None,
                    delivery_fee_cents=delivery_fee,
                    commit=False,
                )
                discount = applied["discount_cents"]
                applied_code = applied["promotion"].code
            totals = pricing.order_totals(subtotal, delivery_fee, service_fee, discount)

            now = _now()
            order = Order(
                id=self._gen_order_id(),
                session_uuid=cart.session_uuid,
                restaurant_id=restaurant.id if restaurant else None,
                restaurant_name=restaurant.name if restaurant else None,
                status=OrderStatus.PENDING.value,
                subtotal_cents=totals.subtotal_cents,
                delivery_fee_cents=totals.delivery_fee_cents,
                service_fee_cents=totals.service_fee_cents,
                discount_cents=totals.discount_cents,
                promotion_code=applied_code,
                total_cents=totals.total_cents,
                created_at=now,
                updated_at=now,
                estimated_delivery_at=now + timedelta(minutes=settings.ESTIMATED_DELIVERY_MINUTES),
            )
            for l in lines:
                order.lines.append(
                    OrderLine(
                        menu_item_id=l.menu_item_id,
                        name=l.name,
                        unit_price_cents=l.unit_price_cents,
                        customizations=list(l.customizations or []),
                        quantity=l.quantity,
                        total_cents=l.total_cents,
                    )
                )
            self.repo.add(order)
            cart.lines.clear()
            self.db.commit()
        except PromotionException as e:
            self.db.rollback()
            raise OrderServiceException(str(e))
        except Exception as e:
            self.db.rollback()
            log.exception("checkout failed")
            raise OrderServiceException(f"Failed to create order: {e}")

        log.info(f"created {order.id} total={order.total_cents} for {order.session_uuid}")
        self._schedule_next(order)
        return order

    def list_orders(self, session_uuid: str) -> List[Order]:
        return self.repo.list_for_session(session_uuid)

    def get_order(self, session_uuid: str, order_id: str) -> Order:
        order = self.repo.get_for_session(session_uuid, order_id)
        if not order:
            raise OrderNotFound("Order not found")
        return order

    def _set_status(self, order: Order, current: str, target: OrderStatus) -> Optional[Order]:
        # conditional write: the progression thread may have moved the row
        # since `order` was loaded
        updated = (
            self.db.query(Order)
            .filter(Order.id == order.id, Order.status == current)
            .update({"status": target.value, "updated_at": _now()}, synchronize_session=False)
        )
        if not updated:
            self.db.rollback()
            log.info(f"{order.id}: no longer {current}, {target.value} not applied")
            return None
        self.db.commit()
        self.db.refresh(order)
        log.info(f"{order.id}: {current} -> {target.value}")
        self._schedule_next(order)
        return order

    def update_status(self, order_id: str, new_status) -> Order:
        order = self.repo.get(order_id)
        if not order:
            raise OrderNotFound("Order not found")
        current = order.status
        target = ensure_transition(current, new_status)
        changed = self._set_status(order, current, target)
        if changed is None:
            raise InvalidStatusTransition(f"Order changed status concurrently; cannot move to {target.value}")
        return changed

    def advance(self, order_id: str, expected_status) -> Optional[Order]:
        """
        Move an order one step forward, but only if it is still at
        `expected_status`. Stale timer callbacks (after a cancel, or a step
        applied by hand) fall through as no-ops.
        """
        order = self.repo.get(order_id)
        if not order:
            log.warning(f"advance: {order_id} no longer exists")
            return None
        expected = parse_status(expected_status)
        if order.status != expected.value:
            log.info(f"advance: {order_id} is {order.status}, expected {expected.value}; skipping")
            return None
        target = next_status(expected)
        if target is None:
            return None
        return self._set_status(order, expected.value, target)

    def cancel_order(self, session_uuid: str, order_id: str) -> Order:
        order = self.get_order(session_uuid, order_id)
        current = order.status
        try:
            target = ensure_transition(current, OrderStatus.CANCELLED)
        except InvalidStatusTransition:
            log.warning(f"cancel {order_id}: refused from {current}")
            raise InvalidStatusTransition("Order cannot be cancelled")
        cancelled = self._set_status(order, current, target)
        if cancelled is None:
            raise InvalidStatusTransition("Order cannot be cancelled")
        return cancelled

    def order_stats(self, session_uuid: str) -> Dict:
        orders = self.list_orders(session_uuid)
        delivered = [o for o in orders if o.status == OrderStatus.DELIVERED.value]
        active_values = {s.value for s in ACTIVE_STATUSES}
        grand = sum(o.total_cents for o in orders)
        names = Counter(o.restaurant_name for o in orders if o.restaurant_name)
        return {
            "total_orders": len(orders),
            "completed_orders": len(delivered),
            "active_orders": sum(1 for o in orders if o.status in active_values),
            "cancelled_orders": sum(
                1 for o in orders if o.status == OrderStatus.CANCELLED.value
            ),
            "total_spent_cents": sum(o.total_cents for o in delivered),
            "average_order_value_cents": (
                pricing.round_cents(Decimal(grand) / len(orders)) if orders else 0
            ),
            "favorite_restaurant": names.most_common(1)[0][0] if names else None,
        }

    def filter_orders(
        self,
        session_uuid: str,
        status: Optional[str] = None,
        restaurant_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        min_total_cents: Optional[int] = None,
        max_total_cents: Optional[int] = None,
        sort_by: Optional[str] = None,
    ) -> List[Order]:
        orders = self.list_orders(session_uuid)
        if status and status != "all":
            wanted = parse_status(status).value
            orders = [o for o in orders if o.status == wanted]
        if restaurant_id:
            orders = [o for o in orders if o.restaurant_id == restaurant_id]
        if start_date:
            start = _as_utc(start_date)
            orders = [o for o in orders if _as_utc(o.created_at) >= start]
        if end_date:
            end = _as_utc(end_date)
            orders = [o for o in orders if _as_utc(o.created_at) <= end]
        if min_total_cents is not None:
            orders = [o for o in orders if o.total_cents >= min_total_cents]
        if max_total_cents is not None:
            orders = [o for o in orders if o.total_cents <= max_total_cents]
        if sort_by:
            if sort_by not in SORT_KEYS:
                raise OrderServiceException(f"Unknown sort: {sort_by}")
            key, reverse = SORT_KEYS[sort_by]
            orders = sorted(orders, key=key, reverse=reverse)
        return orders

    def reorder(self, session_uuid: str, order_id: str, cart: Cart) -> List[CartLine]:
        """Add a past order's lines back into `cart`; vanished items are skipped."""
        order = self.get_order(session_uuid, order_id)
        cart_svc = CartService(self.db)
        added = []
        for l in order.lines:
            try:
                added.append(
                    cart_svc.add_item(cart, l.menu_item_id, l.customizations, l.quantity)
                )
            except CartServiceException as e:
                log.warning(f"reorder {order_id}: skipping {l.menu_item_id}: {e}")
        return added
