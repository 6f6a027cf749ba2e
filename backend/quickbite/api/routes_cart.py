from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from quickbite.api.session import get_session_uuid, set_session_cookie
from quickbite.db import get_db
from quickbite.schemas.cart_schema import (
    AddLineIn,
    CartLineOut,
    CartOut,
    UpdateQuantityIn,
)
from quickbite.services.cart_service import CartService, CartServiceException
from quickbite.utils.log import get_logger

log = get_logger("api.cart")

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _open_cart(svc: CartService, request: Request, response: Response):
    cart = svc.get_or_create_cart(get_session_uuid(request))
    set_session_cookie(response, cart.session_uuid)
    return cart


def cart_payload(svc: CartService, cart) -> dict:
    return CartOut.model_validate(svc.summary(cart), from_attributes=True).model_dump()


@router.get("", summary="Get cart")
def get_cart(request: Request, response: Response, db: Session = Depends(get_db)):
    svc = CartService(db)
    cart = _open_cart(svc, request, response)
    return cart_payload(svc, cart)


@router.post("/items", summary="Add item to cart")
def add_item(
    payload: AddLineIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart = _open_cart(svc, request, response)
    try:
        line = svc.add_item(
            cart,
            payload.menu_item_id,
            [c.model_dump() for c in payload.customizations],
            payload.quantity,
        )
    except CartServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("cart update crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return {
        "line": CartLineOut.model_validate(line).model_dump(),
        "cart": cart_payload(svc, cart),
    }


@router.patch("/items/{line_id}", summary="Change line quantity")
def update_quantity(
    line_id: str,
    payload: UpdateQuantityIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart = _open_cart(svc, request, response)
    try:
        svc.update_quantity(cart, line_id, payload.quantity)
    except CartServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("cart update crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return cart_payload(svc, cart)


@router.delete("/items/{line_id}", summary="Remove line")
def remove_line(
    line_id: str, request: Request, response: Response, db: Session = Depends(get_db)
):
    svc = CartService(db)
    cart = _open_cart(svc, request, response)
    try:
        removed = svc.remove_line(cart, line_id)
    except Exception as e:
        log.exception("cart update crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return {"removed": removed, "cart": cart_payload(svc, cart)}


@router.delete("", summary="Clear cart")
def clear_cart(request: Request, response: Response, db: Session = Depends(get_db)):
    svc = CartService(db)
    cart = _open_cart(svc, request, response)
    try:
        svc.clear(cart)
    except Exception as e:
        log.exception("cart update crashed")
        raise HTTPException(status_code=500, detail=f"Internal server error: {type(e).__name__}")
    return cart_payload(svc, cart)
