from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from quickbite.api.session import ensure_session
from quickbite.db import get_db
from quickbite.schemas.catalogue_schema import RestaurantOut
from quickbite.services.catalogue_service import CatalogueException
from quickbite.services.favorite_service import FavoriteService
from quickbite.utils.log import get_logger

log = get_logger("api.favorites")

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


@router.get("", summary="List favorite restaurants")
def list_favorites(
    request: Request,
    response: Response,
    q: Optional[str] = Query(None, description="search term"),
    db: Session = Depends(get_db),
):
    session_uuid = ensure_session(request, response)
    found = FavoriteService(db).search_favorites(session_uuid, q)
    return {"items": [RestaurantOut.model_validate(r).model_dump() for r in found]}


@router.post("/{restaurant_id}", summary="Add restaurant to favorites")
def add_favorite(
    restaurant_id: str, request: Request, response: Response, db: Session = Depends(get_db)
):
    session_uuid = ensure_session(request, response)
    try:
        _, created = FavoriteService(db).add(session_uuid, restaurant_id)
    except CatalogueException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        log.exception("favorite update crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return {"restaurant_id": restaurant_id, "favorite": True, "created": created}


@router.delete("/{restaurant_id}", summary="Remove restaurant from favorites")
def remove_favorite(
    restaurant_id: str, request: Request, response: Response, db: Session = Depends(get_db)
):
    session_uuid = ensure_session(request, response)
    try:
        removed = FavoriteService(db).remove(session_uuid, restaurant_id)
    except Exception as e:
        log.exception("favorite update crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return {"restaurant_id": restaurant_id, "favorite": False, "removed": removed}


@router.post("/{restaurant_id}/toggle", summary="Toggle favorite state")
def toggle_favorite(
    restaurant_id: str, request: Request, response: Response, db: Session = Depends(get_db)
):
    session_uuid = ensure_session(request, response)
    try:
        state = FavoriteService(db).toggle(session_uuid, restaurant_id)
    except CatalogueException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        log.exception("favorite update crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return {"restaurant_id": restaurant_id, "favorite": state}
