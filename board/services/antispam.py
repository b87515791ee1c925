from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import RateLimitError, ValidationError
from ..models.ad import Ad
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOW = dt.timedelta(hours=1)


@dataclass(frozen=True)
class AntiSpamPolicy:
    min_title_length: int
    min_description_length: int
    max_ads_per_hour: int

    @classmethod
    def from_settings(cls) -> "AntiSpamPolicy":
        return cls(
            min_title_length=settings.ANTISPAM_MIN_TITLE_LENGTH,
            min_description_length=settings.ANTISPAM_MIN_DESCRIPTION_LENGTH,
            max_ads_per_hour=settings.ANTISPAM_MAX_ADS_PER_HOUR,
        )


def count_ads_from_ip_since(db: Session, ip: str, since: dt.datetime) -> int:
    return db.execute(
        select(func.count(Ad.id)).where(Ad.created_ip == ip, Ad.created_at >= since)
    ).scalar_one()


def check_ad_admission(
    db: Session,
    title: str | None,
    description: str | None,
    client_ip: str | None,
    policy: AntiSpamPolicy | None = None,
) -> None:
    """
    Пропускает объявление к созданию или бросает ошибку.

    Сначала дешёвые проверки текста, потом запрос на подсчёт объявлений
    с того же IP за последний час (скользящее окно). Пустой IP лимитом
    не ограничивается. Попытка нигде не записывается: следующие подсчёты
    увидят уже созданную строку объявления.
    """
    policy = policy or AntiSpamPolicy.from_settings()

    if title is not None and len(title) < policy.min_title_length:
        raise ValidationError(
            f"Title must be at least {policy.min_title_length} characters long"
        )
    if description is not None and len(description) < policy.min_description_length:
        raise ValidationError(
            f"Description must be at least {policy.min_description_length} characters long"
        )

    if not client_ip or not client_ip.strip():
        return

    since = utcnow() - RATE_LIMIT_WINDOW
    recent = count_ads_from_ip_since(db, client_ip, since)
    if recent >= policy.max_ads_per_hour:
        logger.warning("Rate limit hit ip=%s recent=%s limit=%s", client_ip, recent, policy.max_ads_per_hour)
        raise RateLimitError(
            f"Rate limit exceeded. Maximum {policy.max_ads_per_hour} "
            "ads per hour allowed from the same IP address."
        )
