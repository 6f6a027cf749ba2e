from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from quickbite.config import settings
from quickbite.db import SessionLocal
from quickbite.services.order_service import OrderService
from quickbite.services.order_status import next_status, parse_status
from quickbite.utils.log import get_logger

log = get_logger("progression")


class OrderProgression:
    """
    Walks new orders through confirmed, preparing, out-for-delivery and
    delivered on fixed delays.

    Each step is a one-shot job on the given APScheduler scheduler. Jobs live
    only in memory: a restart drops them and the affected orders stay where
    they are. Cancelling an order leaves its pending job in place; the job
    then finds the status changed and does nothing.
    """

    def __init__(
        self,
        scheduler,
        session_factory=SessionLocal,
        delays: Optional[Dict[str, int]] = None,
        enabled: Optional[bool] = None,
    ):
        self.scheduler = scheduler
        self.session_factory = session_factory
        self.delays = delays if delays is not None else settings.ORDER_STATUS_DELAYS_SECONDS
        self.enabled = settings.ORDER_PROGRESSION_ENABLED if enabled is None else enabled

    def schedule_next(self, order_id: str, current_status) -> Optional[str]:
        if not self.enabled or self.scheduler is None:
            return None
        current = parse_status(current_status)
        target = next_status(current)
        if target is None:
            return None
        run_at = datetime.now(timezone.utc) + timedelta(seconds=self.delays.get(target.value, 0))
        job_id = f"order-{order_id}-{target.value}"
        self.scheduler.add_job(
            self.run_step,
            "date",
            run_date=run_at,
            args=[order_id, current.value],
            id=job_id,
            replace_existing=True,
        )
        log.debug(f"scheduled {job_id} at {run_at.isoformat()}")
        return job_id

    def run_step(self, order_id: str, expected_status: str):
        db = self.session_factory()
        try:
            OrderService(db, progression=self).advance(order_id, expected_status)
        except Exception:
            # the order keeps its last committed status
            db.rollback()
            log.exception(f"progression step failed for {order_id}")
        finally:
            db.close()
