from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models.ad import AdStatus, Area, PricePeriod


class CamelModel(BaseModel):
    # клиент шлёт camelCase, внутри snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=5000)
    price: Decimal = Field(ge=0)
    category_id: int
    user_id: Optional[int] = None
    area: Optional[Area] = None
    price_period: Optional[PricePeriod] = None


class AdUpdate(CamelModel):
    # status и прочие чужие поля: 400, а не молчаливый пропуск
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    price: Optional[Decimal] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    area: Optional[Area] = None
    price_period: Optional[PricePeriod] = None


class AdminStatusUpdate(CamelModel):
    status: AdStatus


class CategoryIn(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)


class UserIn(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: Optional[str] = Field(default=None, max_length=64)
