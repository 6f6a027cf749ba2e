from datetime import datetime, timezone
from uuid import uuid4

import pytest

from quickbite.db import SessionLocal, init_db
from quickbite.models.order import Order
from quickbite.services.cart_service import CartService
from quickbite.services.order_progression import OrderProgression
from quickbite.services.order_service import OrderService
from quickbite.services.order_status import InvalidStatusTransition, OrderStatus, next_status

DELAYS = {"confirmed": 2, "preparing": 5, "out-for-delivery": 10, "delivered": 15}


class RecordingScheduler:
    """Collects add_job calls so tests can fire them by hand."""

    def __init__(self):
        self.jobs = {}

    def add_job(self, func, trigger, run_date=None, args=None, id=None, replace_existing=False):
        assert trigger == "date"
        if id in self.jobs and not replace_existing:
            raise ValueError(f"duplicate job {id}")
        self.jobs[id] = (func, args or [], run_date)

    def fire(self, job_id):
        func, args, _ = self.jobs.pop(job_id)
        func(*args)


def setup_module(module):
    init_db(reset=True)


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def progression(scheduler):
    return OrderProgression(scheduler, delays=DELAYS, enabled=True)


def _checkout(progression):
    db = SessionLocal()
    try:
        cart_svc = CartService(db)
        cart = cart_svc.get_or_create_cart(uuid4().hex)
        cart_svc.add_item(cart, "201", quantity=1)
        order = OrderService(db, progression=progression).checkout(cart)
        return order.id, cart.session_uuid
    finally:
        db.close()


def _status(order_id):
    db = SessionLocal()
    try:
        return db.get(Order, order_id).status
    finally:
        db.close()


def test_checkout_schedules_confirmation(scheduler, progression):
    before = datetime.now(timezone.utc)
    order_id, _ = _checkout(progression)
    job_id = f"order-{order_id}-confirmed"
    assert list(scheduler.jobs) == [job_id]
    _, args, run_date = scheduler.jobs[job_id]
    assert args == [order_id, "pending"]
    assert 1.5 <= (run_date - before).total_seconds() <= 3


def test_full_progression_to_delivered(scheduler, progression):
    order_id, _ = _checkout(progression)
    for expected in ("confirmed", "preparing", "out-for-delivery", "delivered"):
        scheduler.fire(f"order-{order_id}-{expected}")
        assert _status(order_id) == expected
    assert scheduler.jobs == {}


def test_cancel_stops_progression(scheduler, progression):
    order_id, session_uuid = _checkout(progression)
    scheduler.fire(f"order-{order_id}-confirmed")
    assert _status(order_id) == "confirmed"

    db = SessionLocal()
    try:
        OrderService(db, progression=progression).cancel_order(session_uuid, order_id)
    finally:
        db.close()

    # the already scheduled step fires but finds the order cancelled
    scheduler.fire(f"order-{order_id}-preparing")
    assert _status(order_id) == "cancelled"
    assert scheduler.jobs == {}


def test_manual_step_leaves_stale_job_harmless(scheduler, progression):
    order_id, _ = _checkout(progression)
    db = SessionLocal()
    try:
        OrderService(db, progression=progression).update_status(order_id, "confirmed")
    finally:
        db.close()
    # the stale confirmation job is a no-op
    scheduler.fire(f"order-{order_id}-confirmed")
    assert _status(order_id) == "confirmed"
    scheduler.fire(f"order-{order_id}-preparing")
    assert _status(order_id) == "preparing"


def test_disabled_progression_schedules_nothing(scheduler):
    progression = OrderProgression(scheduler, delays=DELAYS, enabled=False)
    order_id, _ = _checkout(progression)
    assert scheduler.jobs == {}
    assert _status(order_id) == "pending"


def test_step_for_missing_order_is_harmless(progression):
    progression.run_step("order_0_missing", "pending")


def test_no_job_after_terminal_status(scheduler, progression):
    assert progression.schedule_next("order_x", "delivered") is None
    assert progression.schedule_next("order_x", "cancelled") is None
    assert scheduler.jobs == {}


def test_cancel_loses_to_concurrent_advance(scheduler, progression):
    order_id, session_uuid = _checkout(progression)
    scheduler.fire(f"order-{order_id}-confirmed")

    user_db = SessionLocal()
    timer_db = SessionLocal()
    try:
        user_svc = OrderService(user_db, progression=progression)
        # the user's session has already loaded the order as confirmed
        assert user_svc.get_order(session_uuid, order_id).status == "confirmed"

        OrderService(timer_db, progression=progression).advance(order_id, "confirmed")
        assert _status(order_id) == "preparing"

        with pytest.raises(InvalidStatusTransition):
            user_svc.cancel_order(session_uuid, order_id)
    finally:
        user_db.close()
        timer_db.close()

    assert _status(order_id) == "preparing"


def test_stale_advance_after_concurrent_cancel_is_noop(scheduler, progression):
    order_id, session_uuid = _checkout(progression)
    scheduler.fire(f"order-{order_id}-confirmed")

    timer_db = SessionLocal()
    user_db = SessionLocal()
    try:
        timer_svc = OrderService(timer_db, progression=progression)
        order = timer_svc.repo.get(order_id)
        assert order.status == "confirmed"

        OrderService(user_db, progression=progression).cancel_order(session_uuid, order_id)

        # conditional write against the row the timer session loaded earlier
        assert timer_svc._set_status(order, "confirmed", next_status(OrderStatus.CONFIRMED)) is None
    finally:
        timer_db.close()
        user_db.close()

    assert _status(order_id) == "cancelled"
