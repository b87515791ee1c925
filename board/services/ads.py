from __future__ import annotations

import logging
import math
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import DuplicateError, NotFoundError
from ..models.ad import Ad, AdStatus
from ..utils.security import generate_edit_token, mask_token, tokens_match
from ..utils.timeutils import utcnow
from .antispam import AntiSpamPolicy, check_ad_admission
from .categories import category_exists
from .images import remove_ad_files
from .presenters import present_ad, present_ads
from .search import SearchRequest, build_predicate, build_search
from .users import user_exists

logger = logging.getLogger(__name__)

# поля, которые владелец может менять (статус меняет только админка)
UPDATABLE_FIELDS = ("title", "description", "price", "category_id", "area", "price_period")


# ---- утилиты ----

def _ad_by_id(db: Session, ad_id: int) -> Ad:
    ad = db.get(Ad, ad_id)
    if not ad:
        raise NotFoundError("Ad", ad_id)
    return ad


def _ad_by_token(db: Session, token: str) -> Ad:
    # неизвестный и неверный токен для клиента неотличимы
    ad = None
    if token:
        ad = db.execute(select(Ad).where(Ad.edit_token == token)).scalar_one_or_none()
    if not ad or not tokens_match(ad.edit_token, token):
        raise NotFoundError("Ad", "edit token")
    return ad


def _ensure_category(db: Session, category_id: int) -> None:
    if not category_exists(db, category_id):
        raise NotFoundError("Category", category_id)


def _ensure_user(db: Session, user_id: int) -> None:
    if not user_exists(db, user_id):
        raise NotFoundError("User", user_id)


# ---- создание ----

def create_ad(
    db: Session,
    payload: Dict[str, Any],
    client_ip: str | None,
    policy: AntiSpamPolicy | None = None,
) -> dict:
    """
    Создать объявление. Ответ содержит editToken: это единственный раз,
    когда токен отдаётся клиенту (кроме поиска по самому токену).
    """
    check_ad_admission(db, payload.get("title"), payload.get("description"), client_ip, policy)

    _ensure_category(db, payload["category_id"])
    if payload.get("user_id") is not None:
        _ensure_user(db, payload["user_id"])

    now = utcnow()
    ad = Ad(
        title=payload["title"],
        description=payload["description"],
        price=payload["price"],
        category_id=payload["category_id"],
        user_id=payload.get("user_id"),
        area=payload.get("area"),
        price_period=payload.get("price_period"),
        status=AdStatus.ACTIVE,
        edit_token=generate_edit_token(),
        created_ip=client_ip,
        created_at=now,
        updated_at=now,
    )
    db.add(ad)
    try:
        db.commit()
    except IntegrityError as exc:
        # коллизия токена (или другая уникальность): отказ без перезаписи
        db.rollback()
        raise DuplicateError("Ad could not be created: unique constraint violated") from exc
    db.refresh(ad)

    logger.info("Ad created id=%s ip=%s token=%s", ad.id, client_ip, mask_token(ad.edit_token))
    return present_ad(db, ad, include_token=True, with_images=False)


# ---- чтение ----

def get_ad(db: Session, ad_id: int) -> dict:
    # статус не фильтруем: это забота списков
    return present_ad(db, _ad_by_id(db, ad_id))


def get_ad_by_token(db: Session, token: str) -> dict:
    return present_ad(db, _ad_by_token(db, token), include_token=True)


# ---- изменение ----

def _apply_update(db: Session, ad: Ad, changes: Dict[str, Any]) -> Ad:
    # None == «поле не прислали»: существующее значение не трогаем
    present = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}

    if "category_id" in present:
        _ensure_category(db, present["category_id"])

    for field, value in present.items():
        setattr(ad, field, value)
    ad.updated_at = utcnow()

    db.commit()
    db.refresh(ad)
    return ad


def update_ad(db: Session, ad_id: int, changes: Dict[str, Any]) -> dict:
    ad = _apply_update(db, _ad_by_id(db, ad_id), changes)
    logger.info("Ad updated id=%s fields=%s", ad.id, sorted(k for k, v in changes.items() if v is not None))
    return present_ad(db, ad)


def update_ad_by_token(db: Session, token: str, changes: Dict[str, Any]) -> dict:
    ad = _apply_update(db, _ad_by_token(db, token), changes)
    logger.info("Ad updated by token id=%s token=%s", ad.id, mask_token(token))
    return present_ad(db, ad)


# ---- удаление (жёсткое) ----

def _hard_delete(db: Session, ad: Ad) -> None:
    ad_id = ad.id
    db.delete(ad)   # картинки уходят каскадом
    db.commit()
    remove_ad_files(ad_id)
    logger.info("Ad deleted id=%s", ad_id)


def delete_ad(db: Session, ad_id: int) -> None:
    _hard_delete(db, _ad_by_id(db, ad_id))


def delete_ad_by_token(db: Session, token: str) -> None:
    _hard_delete(db, _ad_by_token(db, token))


# ---- списки ----

def _visible(stmt):
    return stmt.where(Ad.status != AdStatus.DELETED)


def list_ads(db: Session) -> List[dict]:
    rows = db.execute(_visible(select(Ad)).order_by(Ad.created_at.desc(), Ad.id.desc())).scalars().all()
    return present_ads(db, rows)


def list_ads_by_status(db: Session, status: AdStatus) -> List[dict]:
    rows = db.execute(
        select(Ad).where(Ad.status == status).order_by(Ad.created_at.desc(), Ad.id.desc())
    ).scalars().all()
    return present_ads(db, rows)


def list_active_ads(db: Session) -> List[dict]:
    return list_ads_by_status(db, AdStatus.ACTIVE)


def list_ads_by_category(db: Session, category_id: int) -> List[dict]:
    _ensure_category(db, category_id)
    rows = db.execute(
        _visible(select(Ad).where(Ad.category_id == category_id))
        .order_by(Ad.created_at.desc(), Ad.id.desc())
    ).scalars().all()
    return present_ads(db, rows)


def list_ads_by_user(db: Session, user_id: int) -> List[dict]:
    _ensure_user(db, user_id)
    rows = db.execute(
        _visible(select(Ad).where(Ad.user_id == user_id))
        .order_by(Ad.created_at.desc(), Ad.id.desc())
    ).scalars().all()
    return present_ads(db, rows)


def list_filtered(
    db: Session,
    status: AdStatus | None = None,
    category_id: int | None = None,
    user_id: int | None = None,
) -> List[dict]:
    # приоритет: статус > категория > пользователь > без фильтра
    if status is not None:
        return list_ads_by_status(db, status)
    if category_id is not None:
        return list_ads_by_category(db, category_id)
    if user_id is not None:
        return list_ads_by_user(db, user_id)
    return list_ads(db)


# ---- поиск ----

def count_ads(db: Session, request: SearchRequest) -> int:
    return db.execute(
        select(func.count()).select_from(Ad).where(build_predicate(request))
    ).scalar_one()


def search_ads(db: Session, request: SearchRequest) -> dict:
    plan = build_search(request)
    rows = db.execute(
        select(Ad)
        .where(plan.predicate)
        .order_by(*plan.order_by)
        .limit(plan.limit)
        .offset(plan.offset)
    ).scalars().all()
    total = count_ads(db, request)

    return {
        "content": present_ads(db, rows),
        "page": request.page,
        "size": request.size,
        "totalElements": total,
        "totalPages": math.ceil(total / request.size) if request.size else 0,
    }
