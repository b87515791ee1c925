from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..deps import get_client_ip, get_edit_token
from ..models.ad import AdStatus, Area, PricePeriod
from ..schemas import AdCreate, AdUpdate
from ..services import ads as ads_service
from ..services import images as images_service
from ..services.search import SearchRequest

router = APIRouter(prefix="/api/ads", tags=["ads"])


# ---------- списки ----------
@router.get("")
def api_list_ads(
    ad_status: Optional[AdStatus] = Query(None, alias="status"),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    return ads_service.list_filtered(db, status=ad_status, category_id=category_id, user_id=user_id)


@router.get("/active")
def api_active_ads(db: Session = Depends(get_db)):
    return ads_service.list_active_ads(db)


@router.get("/search")
def api_search_ads(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    user_id: Optional[int] = Query(None, alias="userId"),
    ad_status: Optional[AdStatus] = Query(None, alias="status"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice"),
    q: Optional[str] = Query(None),
    area: Optional[Area] = Query(None),
    price_period: Optional[PricePeriod] = Query(None, alias="pricePeriod"),
    page: int = Query(0, ge=0),
    size: int = Query(settings.SEARCH_DEFAULT_PAGE_SIZE, gt=0, le=settings.SEARCH_MAX_PAGE_SIZE),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_direction: str = Query("desc", alias="sortDirection"),
    db: Session = Depends(get_db),
):
    request = SearchRequest(
        category_id=category_id,
        user_id=user_id,
        status=ad_status,
        min_price=min_price,
        max_price=max_price,
        search=q,
        area=area,
        price_period=price_period,
        page=page,
        size=size,
        sort_by=sort_by,
        sort_direction=sort_direction,
        hide_deleted=True,
    )
    return ads_service.search_ads(db, request)


# ---------- по токену редактирования ----------
@router.get("/edit/{token}")
def api_get_by_token(token: str, db: Session = Depends(get_db)):
    return ads_service.get_ad_by_token(db, token)


@router.put("/edit/{token}")
def api_update_by_token(token: str, payload: AdUpdate, db: Session = Depends(get_db)):
    return ads_service.update_ad_by_token(db, token, payload.model_dump())


@router.delete("/edit/{token}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_by_token(token: str, db: Session = Depends(get_db)):
    ads_service.delete_ad_by_token(db, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- CRUD ----------
@router.post("", status_code=status.HTTP_201_CREATED)
def api_create_ad(
    payload: AdCreate,
    client_ip: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    return ads_service.create_ad(db, payload.model_dump(), client_ip)


@router.get("/{ad_id}")
def api_get_ad(ad_id: int, db: Session = Depends(get_db)):
    return ads_service.get_ad(db, ad_id)


@router.put("/{ad_id}")
def api_update_ad(ad_id: int, payload: AdUpdate, db: Session = Depends(get_db)):
    return ads_service.update_ad(db, ad_id, payload.model_dump())


@router.delete("/{ad_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_ad(ad_id: int, db: Session = Depends(get_db)):
    ads_service.delete_ad(db, ad_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- картинки ----------
@router.post("/{ad_id}/images", status_code=status.HTTP_201_CREATED)
def api_upload_images(
    ad_id: int,
    files: List[UploadFile] = File(...),
    edit_token: str | None = Depends(get_edit_token),
    db: Session = Depends(get_db),
):
    blobs = [(f.filename, f.file.read()) for f in files]
    return images_service.save_images(db, ad_id, blobs, edit_token)


@router.delete("/{ad_id}/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_image(
    ad_id: int,
    image_id: int,
    edit_token: str | None = Depends(get_edit_token),
    db: Session = Depends(get_db),
):
    images_service.delete_image(db, ad_id, image_id, edit_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
