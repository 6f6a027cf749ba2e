from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomizationIn(BaseModel):
    name: str = Field(..., min_length=1)
    price_cents: Optional[int] = Field(None, ge=0)


class AddLineIn(BaseModel):
    menu_item_id: str
    customizations: List[CustomizationIn] = []
    quantity: int = Field(1, gt=0)


class UpdateQuantityIn(BaseModel):
    # zero or below removes the line
    quantity: int


class CartLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    line_id: str
    menu_item_id: str
    name: str
    unit_price_cents: int
    customizations: List[CustomizationIn]
    quantity: int
    total_cents: int


class CartOut(BaseModel):
    session_uuid: str
    lines: List[CartLineOut]
    item_count: int
    subtotal_cents: int
    delivery_fee_cents: int
    service_fee_cents: int
    discount_cents: int
    total_cents: int
