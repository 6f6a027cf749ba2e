from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from quickbite.db import SessionLocal, init_db
from quickbite.main import app
from quickbite.models.menu_item import MenuItem
from quickbite.services.cart_service import CartService
from quickbite.services.order_service import (
    OrderNotFound,
    OrderService,
    OrderServiceException,
)
from quickbite.services.order_status import InvalidStatusTransition


def setup_module(module):
    init_db(reset=True)


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    return TestClient(app)


def _place(db, session_uuid, *items):
    """items: (menu_item_id, quantity) pairs"""
    cart_svc = CartService(db)
    cart = cart_svc.get_or_create_cart(session_uuid)
    for item_id, qty in items:
        cart_svc.add_item(cart, item_id, quantity=qty)
    return OrderService(db).checkout(cart)


def test_checkout_snapshots_cart_and_clears_it(client):
    client.post(
        "/api/cart/items",
        json={"menu_item_id": "101", "customizations": [{"name": "Extra Cheese"}], "quantity": 2},
    )
    res = client.post("/api/orders")
    assert res.status_code == 200
    order = res.json()
    assert order["id"].startswith("order_")
    assert order["status"] == "pending"
    assert order["restaurant_id"] == "1"
    assert order["restaurant_name"] == "Burger Palace"
    assert order["subtotal_cents"] == 2300
    assert order["delivery_fee_cents"] == 299
    assert order["service_fee_cents"] == 150
    assert order["total_cents"] == 2749
    assert order["lines"][0]["customizations"] == [{"name": "Extra Cheese", "price_cents": 150}]
    assert order["estimated_delivery_at"] is not None

    cart = client.get("/api/cart").json()
    assert cart["lines"] == []

    res = client.get(f"/api/orders/{order['id']}")
    assert res.status_code == 200
    assert res.json()["total_cents"] == 2749


def test_checkout_empty_cart_rejected(client):
    res = client.post("/api/orders")
    assert res.status_code == 400
    assert res.json()["detail"] == "Cart is empty"


def test_cancel_only_while_pending_or_confirmed(client):
    client.post("/api/cart/items", json={"menu_item_id": "601"})
    order_id = client.post("/api/orders").json()["id"]

    res = client.post(f"/api/orders/{order_id}/cancel")
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"

    res = client.post(f"/api/orders/{order_id}/cancel")
    assert res.status_code == 400
    assert res.json()["detail"] == "Order cannot be cancelled"


def test_unknown_order_404(client):
    assert client.get("/api/orders/order_0_missing").status_code == 404
    assert client.post("/api/orders/order_0_missing/cancel").status_code == 404


def test_orders_are_scoped_to_session(client):
    client.post("/api/cart/items", json={"menu_item_id": "602"})
    order_id = client.post("/api/orders").json()["id"]
    other = TestClient(app)
    assert other.get(f"/api/orders/{order_id}").status_code == 404
    assert other.get("/api/orders").json()["total"] == 0


def test_checkout_with_promotion(client):
    client.post("/api/cart/items", json={"menu_item_id": "102", "quantity": 2})
    res = client.post("/api/orders", json={"promotion_code": "first20"})
    assert res.status_code == 200
    order = res.json()
    assert order["promotion_code"] == "FIRST20"
    assert order["subtotal_cents"] == 2900
    assert order["discount_cents"] == 580
    assert order["total_cents"] == 2900 + 299 + 150 - 580

    # usage limit is one per session; the failed checkout keeps the cart
    client.post("/api/cart/items", json={"menu_item_id": "102", "quantity": 2})
    res = client.post("/api/orders", json={"promotion_code": "FIRST20"})
    assert res.status_code == 400
    assert "usage limit" in res.json()["detail"]
    assert len(client.get("/api/cart").json()["lines"]) == 1


def test_checkout_promotion_for_other_restaurant(client):
    client.post("/api/cart/items", json={"menu_item_id": "102", "quantity": 2})
    res = client.post("/api/orders", json={"promotion_code": "FREEDEL"})
    assert res.status_code == 400
    assert res.json()["detail"] == "This promotion is only valid for Pizza Corner"


def test_order_lines_decoupled_from_catalogue(db):
    session_uuid = uuid4().hex
    order = _place(db, session_uuid, ("202", 1))
    item = db.get(MenuItem, "202")
    original = item.price_cents
    item.price_cents = 9999
    item.name = "Renamed"
    db.commit()
    try:
        fresh = OrderService(db).get_order(session_uuid, order.id)
        assert fresh.lines[0].name == "Pepperoni Pizza"
        assert fresh.lines[0].unit_price_cents == original
        assert fresh.subtotal_cents == original
    finally:
        item.price_cents = original
        item.name = "Pepperoni Pizza"
        db.commit()


def test_update_status_forward_only(db):
    svc = OrderService(db)
    order = _place(db, uuid4().hex, ("801", 1))
    with pytest.raises(InvalidStatusTransition):
        svc.update_status(order.id, "preparing")
    for status in ("confirmed", "preparing", "out-for-delivery", "delivered"):
        assert svc.update_status(order.id, status).status == status
    with pytest.raises(InvalidStatusTransition):
        svc.update_status(order.id, "cancelled")
    with pytest.raises(OrderNotFound):
        svc.update_status("order_0_missing", "confirmed")


def test_cancel_after_preparing_rejected(db):
    session_uuid = uuid4().hex
    svc = OrderService(db)
    order = _place(db, session_uuid, ("802", 1))
    svc.update_status(order.id, "confirmed")
    assert svc.cancel_order(session_uuid, order.id).status == "cancelled"

    order = _place(db, session_uuid, ("802", 1))
    svc.update_status(order.id, "confirmed")
    svc.update_status(order.id, "preparing")
    with pytest.raises(InvalidStatusTransition):
        svc.cancel_order(session_uuid, order.id)


def test_advance_ignores_stale_expectation(db):
    svc = OrderService(db)
    order = _place(db, uuid4().hex, ("401", 1))
    assert svc.advance(order.id, "confirmed") is None
    assert svc.advance(order.id, "pending").status == "confirmed"
    assert svc.advance("order_0_missing", "pending") is None


def test_stats_and_filters(db):
    session_uuid = uuid4().hex
    svc = OrderService(db)
    cheap = _place(db, session_uuid, ("103", 1))  # 399
    big = _place(db, session_uuid, ("701", 2))  # 4800
    mid = _place(db, session_uuid, ("102", 1))  # 1450
    for status in ("confirmed", "preparing", "out-for-delivery", "delivered"):
        svc.update_status(big.id, status)
    svc.cancel_order(session_uuid, cheap.id)

    newest_first = [o.id for o in svc.list_orders(session_uuid)]
    assert newest_first == [mid.id, big.id, cheap.id]

    stats = svc.order_stats(session_uuid)
    assert stats["total_orders"] == 3
    assert stats["completed_orders"] == 1
    assert stats["active_orders"] == 1
    assert stats["cancelled_orders"] == 1
    assert stats["total_spent_cents"] == 4800 + 449
    totals = [399 + 449, 4800 + 449, 1450 + 449]
    assert stats["average_order_value_cents"] == round(sum(totals) / 3)
    assert stats["favorite_restaurant"] == "Burger Palace"

    assert [o.id for o in svc.filter_orders(session_uuid, status="delivered")] == [big.id]
    assert len(svc.filter_orders(session_uuid, status="all")) == 3
    assert [o.id for o in svc.filter_orders(session_uuid, restaurant_id="7")] == [big.id]
    assert [o.id for o in svc.filter_orders(session_uuid, sort_by="total-low")] == [
        cheap.id,
        mid.id,
        big.id,
    ]
    assert [o.id for o in svc.filter_orders(session_uuid, sort_by="oldest")][0] == cheap.id
    assert [
        o.id for o in svc.filter_orders(session_uuid, min_total_cents=1000, max_total_cents=2000)
    ] == [mid.id]

    now = datetime.now(timezone.utc)
    assert len(svc.filter_orders(session_uuid, start_date=now - timedelta(minutes=5))) == 3
    assert svc.filter_orders(session_uuid, end_date=now - timedelta(minutes=5)) == []

    with pytest.raises(OrderServiceException):
        svc.filter_orders(session_uuid, sort_by="random")


def test_empty_stats(db):
    stats = OrderService(db).order_stats(uuid4().hex)
    assert stats["total_orders"] == 0
    assert stats["average_order_value_cents"] == 0
    assert stats["favorite_restaurant"] is None


def test_reorder_http(client):
    client.post("/api/cart/items", json={"menu_item_id": "301", "customizations": [{"name": "Guacamole"}]})
    client.post("/api/cart/items", json={"menu_item_id": "302", "quantity": 2})
    order_id = client.post("/api/orders").json()["id"]

    res = client.post(f"/api/orders/{order_id}/reorder")
    assert res.status_code == 200
    body = res.json()
    assert body["added"] == 2
    assert body["cart"]["subtotal_cents"] == 1100 + 2 * 1125

    res = client.get("/api/orders", params={"sort_by": "total-high"})
    assert res.status_code == 200
    assert res.json()["total"] == 1

    stats = client.get("/api/orders/stats").json()
    assert stats["active_orders"] == 1
