# board/routers/admin_ads.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ..admin.security import require_admin
from ..db import get_db
from ..models.ad import AdStatus
from ..schemas import AdminStatusUpdate
from ..services.admin import admin_delete, admin_list_ads, admin_set_status

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/ads")
def api_admin_ads(
    ad_status: Optional[AdStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    return admin_list_ads(db, ad_status)


@router.put("/ads/{ad_id}/status")
def api_admin_set_status(ad_id: int, payload: AdminStatusUpdate, db: Session = Depends(get_db)):
    return admin_set_status(db, ad_id, payload.status)


# мягкое удаление, в отличие от DELETE /api/ads/edit/{token}
@router.delete("/ads/{ad_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_admin_delete(ad_id: int, db: Session = Depends(get_db)):
    admin_delete(db, ad_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
