from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from quickbite.schemas.cart_schema import CustomizationIn


class CheckoutIn(BaseModel):
    promotion_code: Optional[str] = None


class OrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    menu_item_id: str
    name: str
    unit_price_cents: int
    customizations: List[CustomizationIn]
    quantity: int
    total_cents: int


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    restaurant_id: Optional[str] = None
    restaurant_name: Optional[str] = None
    status: str
    lines: List[OrderLineOut]
    subtotal_cents: int
    delivery_fee_cents: int
    service_fee_cents: int
    discount_cents: int
    promotion_code: Optional[str] = None
    total_cents: int
    created_at: datetime
    updated_at: datetime
    estimated_delivery_at: Optional[datetime] = None
