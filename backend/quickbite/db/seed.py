from datetime import date
from typing import Dict

from sqlalchemy.orm import Session

from quickbite.models.menu_item import MenuItem
from quickbite.models.promotion import Promotion
from quickbite.models.restaurant import Restaurant
from quickbite.services.pricing import to_cents


def _cents(entry: Dict, cents_key: str, decimal_key: str) -> int:
    # prefer an explicit cents value; otherwise convert a decimal amount
    if entry.get(cents_key) is not None:
        return int(entry[cents_key])
    return to_cents(entry.get(decimal_key, 0))


def _normalize_restaurant(entry: Dict, position: int) -> Dict:
    cuisine = entry.get("cuisine") or []
    if isinstance(cuisine, str):
        cuisine = [cuisine]
    return {
        "id": str(entry["id"]),
        "name": entry.get("name") or "",
        "description": entry.get("description") or "",
        "cuisine": list(cuisine),
        "rating": float(entry.get("rating", 0) or 0),
        "delivery_time": int(entry.get("deliveryTime", entry.get("delivery_time", 30))),
        "delivery_fee_cents": _cents(entry, "delivery_fee_cents", "deliveryFee"),
        "is_open": bool(entry.get("isOpen", entry.get("is_open", True))),
        "image": entry.get("image"),
        "position": position,
    }


def _normalize_menu_item(entry: Dict, position: int) -> Dict:
    customizations = []
    for c in entry.get("customizations") or []:
        customizations.append(
            {"name": c["name"], "price_cents": _cents(c, "price_cents", "price")}
        )
    return {
        "id": str(entry["id"]),
        "restaurant_id": str(entry.get("restaurantId", entry.get("restaurant_id"))),
        "name": entry.get("name") or "",
        "description": entry.get("description") or "",
        "category": entry.get("category") or "Other",
        "price_cents": _cents(entry, "price_cents", "price"),
        "available": bool(entry.get("available", True)),
        "customizations": customizations,
        "image": entry.get("image"),
        "position": position,
    }


def _normalize_promotion(entry: Dict) -> Dict:
    ptype = entry["type"]
    value = entry.get("discountValue", 0) or 0
    if ptype == "fixed_amount":
        # fixed discounts are money; the others are percentages
        value = to_cents(value)
    return {
        "id": str(entry["id"]),
        "title": entry.get("title") or "",
        "description": entry.get("description") or "",
        "code": entry["code"],
        "type": ptype,
        "discount_value": int(value),
        "restaurant_id": entry.get("restaurantId"),
        "restaurant_name": entry.get("restaurantName"),
        "minimum_order_cents": to_cents(entry.get("minimumOrder", 0)),
        "maximum_discount_cents": to_cents(entry.get("maximumDiscount", 0)),
        "usage_limit": int(entry.get("usageLimit", 0) or 0),
        "expiry_date": date.fromisoformat(entry["expiryDate"]),
        "is_active": bool(entry.get("isActive", True)),
    }


def seed_catalogue(db: Session, data: Dict) -> Dict[str, int]:
    """
    Upsert restaurants, menu items and promotions from a catalogue dict
    (the shape of data/catalogue.json). Flushes but does not commit.
    """
    counts = {"restaurants": 0, "menu_items": 0, "promotions": 0}

    for pos, entry in enumerate(data.get("restaurants", [])):
        values = _normalize_restaurant(entry, pos)
        db.merge(Restaurant(**values))
        counts["restaurants"] += 1
    db.flush()

    for pos, entry in enumerate(data.get("menuItems", [])):
        values = _normalize_menu_item(entry, pos)
        db.merge(MenuItem(**values))
        counts["menu_items"] += 1

    for entry in data.get("promotions", []):
        values = _normalize_promotion(entry)
        db.merge(Promotion(**values))
        counts["promotions"] += 1

    db.flush()
    return counts
