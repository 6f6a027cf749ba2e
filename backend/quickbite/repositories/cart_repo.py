from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from quickbite.models.cart import Cart
from quickbite.models.cart_line import CartLine


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_session(self, session_uuid: str) -> Optional[Cart]:
        return self.db.query(Cart).filter(Cart.session_uuid == session_uuid).first()

    def create(self, session_uuid: str) -> Cart:
        c = Cart(session_uuid=session_uuid)
        self.db.add(c)
        self.db.flush()
        return c

    def line_id_exists(self, line_id: str) -> bool:
        return (
            self.db.query(CartLine.id).filter(CartLine.line_id == line_id).first()
            is not None
        )

    def add_line(
        self,
        cart: Cart,
        line_id: str,
        menu_item_id: str,
        name: str,
        unit_price_cents: int,
        customizations: List[Dict],
        quantity: int,
        total_cents: int,
    ) -> CartLine:
        line = CartLine(
            line_id=line_id,
            cart_id=cart.id,
            menu_item_id=menu_item_id,
            name=name,
            unit_price_cents=unit_price_cents,
            customizations=customizations,
            quantity=quantity,
            total_cents=total_cents,
        )
        self.db.add(line)
        cart.lines.append(line)
        self.db.flush()
        return line

    def get_line(self, cart: Cart, line_id: str) -> Optional[CartLine]:
        return next((l for l in cart.lines if l.line_id == line_id), None)

    def remove_line(self, cart: Cart, line: CartLine):
        cart.lines.remove(line)
        self.db.flush()

    def clear(self, cart: Cart):
        cart.lines.clear()
        self.db.flush()
