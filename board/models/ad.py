from __future__ import annotations

import enum

from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime, ForeignKey, Enum, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship

from ..db import Base
from ..utils.timeutils import utcnow


class AdStatus(str, enum.Enum):
    ACTIVE  = "ACTIVE"
    BLOCKED = "BLOCKED"
    DELETED = "DELETED"   # мягкое удаление админом


class Area(str, enum.Enum):
    THONG_SALA = "THONG_SALA"
    SRITHANU   = "SRITHANU"
    HAAD_RIN   = "HAAD_RIN"
    BAAN_TAI   = "BAAN_TAI"
    BAAN_KAI   = "BAAN_KAI"
    CHALOKLUM  = "CHALOKLUM"
    MAE_HAAD   = "MAE_HAAD"
    SALAD      = "SALAD"
    HIN_KONG   = "HIN_KONG"
    WOK_TUM    = "WOK_TUM"
    OTHER      = "OTHER"


class PricePeriod(str, enum.Enum):
    DAY   = "DAY"
    WEEK  = "WEEK"
    MONTH = "MONTH"
    SALE  = "SALE"


class Ad(Base):
    __tablename__ = "ads"

    id = Column(Integer, primary_key=True, autoincrement=True)

    title       = Column(String(255), nullable=False)
    description = Column(String(5000), nullable=False)
    price       = Column(Numeric(12, 2), nullable=False)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    user_id     = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    area         = Column(Enum(Area), nullable=True)
    price_period = Column(Enum(PricePeriod), nullable=True)

    status = Column(Enum(AdStatus), nullable=False, default=AdStatus.ACTIVE)

    # секрет владельца: выдаётся один раз при создании
    edit_token = Column(String(128), nullable=False, unique=True)
    created_ip = Column(String(64), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    images = relationship(
        "AdImage",
        back_populates="ad",
        cascade="all, delete-orphan",
        order_by="AdImage.position",
    )

    __table_args__ = (
        Index("ix_ads_status", "status"),
        Index("ix_ads_created_ip_created_at", "created_ip", "created_at"),
    )


class AdImage(Base):
    __tablename__ = "ad_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ad_id = Column(Integer, ForeignKey("ads.id", ondelete="CASCADE"), nullable=False, index=True)

    url = Column(String(1000), nullable=False)
    position = Column(Integer, nullable=False)   # с нуля, порядок показа

    created_at = Column(DateTime, default=utcnow, nullable=False)

    ad = relationship("Ad", back_populates="images")

    __table_args__ = (UniqueConstraint("ad_id", "position", name="uq_ad_images_ad_position"),)
