import time
import uuid
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from quickbite.config import settings
from quickbite.models.cart import Cart
from quickbite.models.cart_line import CartLine
from quickbite.repositories.cart_repo import CartRepository
from quickbite.repositories.restaurant_repo import MenuRepository
from quickbite.services import pricing
from quickbite.utils.log import get_logger

log = get_logger("cart")


class CartServiceException(Exception):
    pass


class CartService:
    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.menu_repo = MenuRepository(db)

    def get_or_create_cart(self, session_uuid: Optional[str] = None) -> Cart:
        if session_uuid:
            c = self.cart_repo.get_by_session(session_uuid)
            if c:
                return c
        new_uuid = session_uuid or uuid.uuid4().hex
        c = self.cart_repo.create(new_uuid)
        self.db.commit()
        return c

    def _new_line_id(self, menu_item_id: str) -> str:
        base = f"{menu_item_id}-{int(time.time() * 1000)}"
        line_id, n = base, 1
        # two adds of the same item within one millisecond
        while self.cart_repo.line_id_exists(line_id):
            line_id = f"{base}-{n}"
            n += 1
        return line_id

    def _resolve_customizations(self, item, customizations: Optional[List[Dict]]) -> List[Dict]:
        """
        Offered customizations are priced from the menu; free-form ones keep
        the delta they were sent with (missing means free).
        """
        offered = {c["name"]: c.get("price_cents") or 0 for c in (item.customizations or [])}
        resolved = []
        for c in customizations or []:
            name = c.get("name")
            if not name:
                log.warning(f"customization without a name on {item.id}")
                raise CartServiceException("Customization name is required")
            if name in offered:
                delta = offered[name]
            else:
                delta = c.get("price_cents") or 0
            resolved.append({"name": name, "price_cents": int(delta)})
        return resolved

    def add_item(
        self,
        cart: Cart,
        menu_item_id: str,
        customizations: Optional[List[Dict]] = None,
        quantity: int = 1,
    ) -> CartLine:
        item = self.menu_repo.get(menu_item_id)
        if not item:
            log.warning(f"add to cart {cart.session_uuid}: unknown menu item {menu_item_id}")
            raise CartServiceException("Menu item not found")
        if not item.available:
            log.info(f"add to cart {cart.session_uuid}: {item.id} is unavailable")
            raise CartServiceException(f"{item.name} is currently unavailable")
        chosen = self._resolve_customizations(item, customizations)
        try:
            total = pricing.line_total_cents(item.price_cents, chosen, quantity)
        except ValueError as e:
            log.warning(f"add to cart {cart.session_uuid}: {e}")
            raise CartServiceException(str(e))
        # every add is its own line, identical items are not merged
        line = self.cart_repo.add_line(
            cart,
            line_id=self._new_line_id(item.id),
            menu_item_id=item.id,
            name=item.name,
            unit_price_cents=item.price_cents,
            customizations=chosen,
            quantity=quantity,
            total_cents=total,
        )
        self.db.commit()
        log.debug(f"added {line.line_id} qty={quantity} total={total} to cart {cart.session_uuid}")
        return line

    def update_quantity(self, cart: Cart, line_id: str, quantity: int) -> Optional[CartLine]:
        line = self.cart_repo.get_line(cart, line_id)
        if not line:
            return None
        if quantity <= 0:
            self.remove_line(cart, line_id)
            return None
        try:
            line.total_cents = pricing.line_total_cents(
                line.unit_price_cents, line.customizations, quantity
            )
        except ValueError as e:
            log.warning(f"update {line_id}: {e}")
            raise CartServiceException(str(e))
        line.quantity = quantity
        self.db.commit()
        return line

    def remove_line(self, cart: Cart, line_id: str) -> bool:
        line = self.cart_repo.get_line(cart, line_id)
        if not line:
            return False
        self.cart_repo.remove_line(cart, line)
        self.db.commit()
        return True

    def clear(self, cart: Cart):
        self.cart_repo.clear(cart)
        self.db.commit()

    def summary(self, cart: Cart) -> Dict:
        lines = list(cart.lines)
        subtotal = pricing.cart_subtotal_cents(lines)
        if lines:
            totals = pricing.order_totals(
                subtotal, settings.DELIVERY_FEE_CENTS, settings.SERVICE_FEE_CENTS
            )
        else:
            totals = pricing.order_totals(0, 0, 0)
        return {
            "session_uuid": cart.session_uuid,
            "lines": lines,
            "item_count": pricing.cart_item_count(lines),
            **totals.as_dict(),
        }
