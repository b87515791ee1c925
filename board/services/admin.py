from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models.ad import Ad, AdStatus
from ..utils.timeutils import utcnow
from .presenters import present_ad, present_ads

logger = logging.getLogger(__name__)


# ---- Админ ----
def admin_list_ads(db: Session, status: AdStatus | None = None) -> List[dict]:
    """Все объявления, включая BLOCKED и DELETED; по желанию с фильтром по статусу."""
    stmt = select(Ad)
    if status is not None:
        stmt = stmt.where(Ad.status == status)
    rows = db.execute(stmt.order_by(Ad.id.desc())).scalars().all()
    return present_ads(db, rows)


def admin_set_status(db: Session, ad_id: int, status: AdStatus) -> dict:
    ad = db.get(Ad, ad_id)
    if not ad:
        raise NotFoundError("Ad", ad_id)
    previous = ad.status
    ad.status = status
    ad.updated_at = utcnow()
    db.commit(); db.refresh(ad)
    logger.info("Admin status change id=%s %s -> %s", ad.id, previous.value, status.value)
    return present_ad(db, ad)


def admin_delete(db: Session, ad_id: int) -> None:
    """Мягкое удаление: строка остаётся, статус DELETED (видно в админке по фильтру)."""
    ad = db.get(Ad, ad_id)
    if not ad:
        raise NotFoundError("Ad", ad_id)
    ad.status = AdStatus.DELETED
    ad.updated_at = utcnow()
    db.commit()
    logger.info("Admin soft delete id=%s", ad.id)
