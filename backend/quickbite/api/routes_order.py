from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from quickbite.api.routes_cart import cart_payload
from quickbite.api.session import ensure_session, get_progression
from quickbite.db import get_db
from quickbite.schemas.order_schema import CheckoutIn, OrderOut
from quickbite.services.cart_service import CartService
from quickbite.services.order_service import (
    OrderNotFound,
    OrderService,
    OrderServiceException,
)
from quickbite.services.order_status import InvalidStatusTransition
from quickbite.utils.log import get_logger

log = get_logger("api.orders")

router = APIRouter(tags=["orders"])


def _order(o):
    return OrderOut.model_validate(o).model_dump(mode="json")


@router.post("", summary="Place an order from the cart (checkout)")
def checkout(
    request: Request,
    response: Response,
    payload: Optional[CheckoutIn] = None,
    db: Session = Depends(get_db),
):
    session_uuid = ensure_session(request, response)
    cart = CartService(db).get_or_create_cart(session_uuid)
    svc = OrderService(db, progression=get_progression(request))
    try:
        order = svc.checkout(cart, promotion_code=payload.promotion_code if payload else None)
    except OrderServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("checkout crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return _order(order)


@router.get("", summary="List and filter orders, newest first")
def list_orders(
    request: Request,
    response: Response,
    status: Optional[str] = Query(None, description="order status or 'all'"),
    restaurant_id: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    min_total: Optional[int] = Query(None, ge=0, description="cents"),
    max_total: Optional[int] = Query(None, ge=0, description="cents"),
    sort_by: Optional[str] = Query(None, description="newest, oldest, total-high, total-low"),
    db: Session = Depends(get_db),
):
    session_uuid = ensure_session(request, response)
    svc = OrderService(db)
    try:
        orders = svc.filter_orders(
            session_uuid,
            status=status,
            restaurant_id=restaurant_id,
            start_date=start_date,
            end_date=end_date,
            min_total_cents=min_total,
            max_total_cents=max_total,
            sort_by=sort_by,
        )
    except (OrderServiceException, InvalidStatusTransition) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"items": [_order(o) for o in orders], "total": len(orders)}


@router.get("/stats", summary="Order statistics")
def order_stats(request: Request, response: Response, db: Session = Depends(get_db)):
    session_uuid = ensure_session(request, response)
    return OrderService(db).order_stats(session_uuid)


@router.get("/{order_id}", summary="Get order")
def get_order(
    order_id: str, request: Request, response: Response, db: Session = Depends(get_db)
):
    session_uuid = ensure_session(request, response)
    try:
        return _order(OrderService(db).get_order(session_uuid, order_id))
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{order_id}/cancel", summary="Cancel a pending or confirmed order")
def cancel_order(
    order_id: str, request: Request, response: Response, db: Session = Depends(get_db)
):
    session_uuid = ensure_session(request, response)
    svc = OrderService(db, progression=get_progression(request))
    try:
        return _order(svc.cancel_order(session_uuid, order_id))
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("cancel crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")


@router.post("/{order_id}/reorder", summary="Add a past order's items to the cart")
def reorder(
    order_id: str, request: Request, response: Response, db: Session = Depends(get_db)
):
    session_uuid = ensure_session(request, response)
    cart_svc = CartService(db)
    cart = cart_svc.get_or_create_cart(session_uuid)
    try:
        added = OrderService(db).reorder(session_uuid, order_id, cart)
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        log.exception("reorder crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return {"added": len(added), "cart": cart_payload(cart_svc, cart)}
