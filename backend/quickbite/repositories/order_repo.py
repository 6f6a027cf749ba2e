from typing import List, Optional

from sqlalchemy.orm import Session

from quickbite.models.order import Order


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def get(self, order_id: str) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def get_for_session(self, session_uuid: str, order_id: str) -> Optional[Order]:
        return (
            self.db.query(Order)
            .filter(Order.id == order_id, Order.session_uuid == session_uuid)
            .first()
        )

    def list_for_session(self, session_uuid: str) -> List[Order]:
        # newest first
        return (
            self.db.query(Order)
            .filter(Order.session_uuid == session_uuid)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
