from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from quickbite.api.session import ensure_session
from quickbite.db import get_db
from quickbite.schemas.promotion_schema import PromotionCheckIn, PromotionOut
from quickbite.services.promotion_service import PromotionException, PromotionService
from quickbite.utils.log import get_logger

log = get_logger("api.promotions")

router = APIRouter(prefix="/api/promotions", tags=["promotions"])


def _promotion(p):
    return PromotionOut.model_validate(p).model_dump(mode="json")


@router.get("", summary="Active promotions, soonest expiry first")
def list_promotions(
    restaurant_id: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="search term"),
    db: Session = Depends(get_db),
):
    svc = PromotionService(db)
    found = svc.by_restaurant(restaurant_id) if restaurant_id else svc.list_active()
    if q and q.strip():
        term = q.strip().lower()
        found = [
            p
            for p in found
            if term in p.title.lower()
            or term in (p.description or "").lower()
            or term in (p.restaurant_name or "").lower()
        ]
    return {"items": [_promotion(p) for p in found], "total": len(found)}


@router.get("/featured", summary="Featured promotions")
def featured(limit: int = Query(3, ge=1, le=20), db: Session = Depends(get_db)):
    return {"items": [_promotion(p) for p in PromotionService(db).featured(limit)]}


@router.post("/validate", summary="Check a promotion code without using it")
def validate(
    payload: PromotionCheckIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    session_uuid = ensure_session(request, response)
    svc = PromotionService(db)
    try:
        p = svc.validate(session_uuid, payload.code, payload.order_total_cents, payload.restaurant_id)
    except PromotionException as e:
        return {"valid": False, "error": str(e)}
    return {"valid": True, "promotion": _promotion(p)}


@router.post("/apply", summary="Apply a promotion code and record its use")
def apply(
    payload: PromotionCheckIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    session_uuid = ensure_session(request, response)
    svc = PromotionService(db)
    try:
        result = svc.apply(
            session_uuid,
            payload.code,
            payload.order_total_cents,
            restaurant_id=payload.restaurant_id,
            delivery_fee_cents=payload.delivery_fee_cents,
        )
    except PromotionException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("promotion apply crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return {
        "promotion": _promotion(result["promotion"]),
        "discount_cents": result["discount_cents"],
        "final_total_cents": result["final_total_cents"],
    }
