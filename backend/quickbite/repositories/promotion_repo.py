from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from quickbite.models.promotion import Promotion, PromotionUsage


class PromotionRepository:
    def __init__(self, db: Session):
        self.db = db

    def all(self) -> List[Promotion]:
        return self.db.query(Promotion).all()

    def get_by_code(self, code: str) -> Optional[Promotion]:
        return (
            self.db.query(Promotion)
            .filter(func.lower(Promotion.code) == code.lower())
            .first()
        )

    def times_used(self, session_uuid: str, code: str) -> int:
        u = self._usage(session_uuid, code)
        return u.times_used if u else 0

    def record_usage(self, session_uuid: str, code: str) -> int:
        u = self._usage(session_uuid, code)
        if not u:
            u = PromotionUsage(session_uuid=session_uuid, code=code, times_used=0)
            self.db.add(u)
        u.times_used += 1
        self.db.flush()
        return u.times_used

    def _usage(self, session_uuid: str, code: str) -> Optional[PromotionUsage]:
        return (
            self.db.query(PromotionUsage)
            .filter(
                PromotionUsage.session_uuid == session_uuid,
                PromotionUsage.code == code,
            )
            .first()
        )
