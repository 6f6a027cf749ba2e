from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class CustomizationOut(BaseModel):
    name: str
    price_cents: int = 0


class RestaurantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    description: Optional[str] = None
    cuisine: List[str]
    rating: float
    delivery_time: int
    delivery_fee_cents: int
    is_open: bool
    image: Optional[str] = None


class MenuItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    restaurant_id: str
    name: str
    description: str
    category: str
    price_cents: int
    available: bool
    customizations: Optional[List[CustomizationOut]] = None
    image: Optional[str] = None
