from __future__ import annotations

import datetime as dt
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.ad import Ad, AdImage
from .categories import category_names
from .users import user_names


def _dt(x):
    if isinstance(x, (dt.date, dt.datetime)):
        return x.isoformat()
    return x


def _enum(x):
    return x.value if x is not None and hasattr(x, "value") else x


def image_to_public(img: AdImage) -> dict:
    return {"id": img.id, "url": img.url, "position": img.position}


def images_by_ad(db: Session, ad_id: int) -> List[dict]:
    rows = db.execute(
        select(AdImage).where(AdImage.ad_id == ad_id).order_by(AdImage.position.asc())
    ).scalars().all()
    return [image_to_public(img) for img in rows]


def images_by_ads(db: Session, ad_ids: Iterable[int]) -> Dict[int, List[dict]]:
    """Картинки для пачки объявлений одним запросом, сгруппированы по ad_id."""
    ids = {i for i in ad_ids if i is not None}
    if not ids:
        return {}
    rows = db.execute(
        select(AdImage)
        .where(AdImage.ad_id.in_(ids))
        .order_by(AdImage.ad_id.asc(), AdImage.position.asc())
    ).scalars().all()
    grouped: Dict[int, List[dict]] = defaultdict(list)
    for img in rows:
        grouped[img.ad_id].append(image_to_public(img))
    return dict(grouped)


def ad_to_public(
    ad: Ad,
    category_name: str | None = None,
    user_name: str | None = None,
    images: List[dict] | None = None,
    include_token: bool = False,
) -> dict:
    out = {
        "id": ad.id,
        "title": ad.title,
        "description": ad.description,
        "price": ad.price,
        "categoryId": ad.category_id,
        "categoryName": category_name,
        "userId": ad.user_id,
        "userName": user_name,
        "status": _enum(ad.status),
        "area": _enum(ad.area),
        "pricePeriod": _enum(ad.price_period),
        "createdAt": _dt(ad.created_at),
        "updatedAt": _dt(ad.updated_at),
        "images": images if images is not None else [],
    }
    # токен отдаём только при создании и при поиске по самому токену
    if include_token:
        out["editToken"] = ad.edit_token
    return out


def present_ads(db: Session, ads: Sequence[Ad]) -> List[dict]:
    """
    Сборка ответа для списка: имена категорий/пользователей и картинки
    подтягиваются одним запросом на каждый вид сущности, а не построчно.
    """
    if not ads:
        return []
    cat_names = category_names(db, (a.category_id for a in ads))
    usr_names = user_names(db, (a.user_id for a in ads))
    images = images_by_ads(db, (a.id for a in ads))
    return [
        ad_to_public(
            a,
            category_name=cat_names.get(a.category_id),
            user_name=usr_names.get(a.user_id),
            images=images.get(a.id, []),
        )
        for a in ads
    ]


def present_ad(db: Session, ad: Ad, include_token: bool = False, with_images: bool = True) -> dict:
    cat_names = category_names(db, [ad.category_id])
    usr_names = user_names(db, [ad.user_id])
    return ad_to_public(
        ad,
        category_name=cat_names.get(ad.category_id),
        user_name=usr_names.get(ad.user_id),
        images=images_by_ad(db, ad.id) if with_images else [],
        include_token=include_token,
    )
