from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from quickbite.db import get_db
from quickbite.schemas.catalogue_schema import MenuItemOut, RestaurantOut
from quickbite.services.catalogue_service import CatalogueException, CatalogueService

router = APIRouter(prefix="/api", tags=["catalogue"])


def _restaurant(r):
    return RestaurantOut.model_validate(r).model_dump()


def _menu_item(i):
    return MenuItemOut.model_validate(i).model_dump()


@router.get("/restaurants", summary="Search and filter restaurants")
def list_restaurants(
    q: Optional[str] = Query(None, description="search term"),
    cuisine: Optional[List[str]] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    max_delivery_time: Optional[int] = Query(None, ge=0),
    is_open: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    svc = CatalogueService(db)
    found = svc.search_restaurants(q)
    found = svc.filter_restaurants(
        cuisine=cuisine,
        min_rating=min_rating,
        max_delivery_time=max_delivery_time,
        is_open=is_open,
        restaurants=found,
    )
    return {"items": [_restaurant(r) for r in found], "total": len(found)}


@router.get("/restaurants/{restaurant_id}", summary="Get restaurant")
def get_restaurant(restaurant_id: str, db: Session = Depends(get_db)):
    try:
        return _restaurant(CatalogueService(db).get_restaurant(restaurant_id))
    except CatalogueException as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/restaurants/{restaurant_id}/menu", summary="Menu grouped by category")
def get_menu(
    restaurant_id: str,
    q: Optional[str] = Query(None, description="search term"),
    db: Session = Depends(get_db),
):
    svc = CatalogueService(db)
    try:
        if q:
            items = svc.search_menu_items(restaurant_id, q)
            return {"items": [_menu_item(i) for i in items], "total": len(items)}
        grouped = svc.menu_for_restaurant(restaurant_id)
    except CatalogueException as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "categories": [
            {"category": cat, "items": [_menu_item(i) for i in items]}
            for cat, items in grouped.items()
        ]
    }


@router.get("/menu-items/{item_id}", summary="Get menu item")
def get_menu_item(item_id: str, db: Session = Depends(get_db)):
    try:
        return _menu_item(CatalogueService(db).get_menu_item(item_id))
    except CatalogueException as e:
        raise HTTPException(status_code=404, detail=str(e))
