from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PromotionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    title: str
    description: Optional[str] = None
    code: str
    type: str
    discount_value: int
    restaurant_id: Optional[str] = None
    restaurant_name: Optional[str] = None
    minimum_order_cents: int
    maximum_discount_cents: int
    usage_limit: int
    expiry_date: date
    is_active: bool


class PromotionCheckIn(BaseModel):
    code: str
    order_total_cents: int = Field(..., ge=0)
    restaurant_id: Optional[str] = None
    delivery_fee_cents: int = Field(0, ge=0)
