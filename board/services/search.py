from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable

from sqlalchemy import and_, func, or_, true
from sqlalchemy.sql.elements import ColumnElement

from ..models.ad import Ad, AdStatus, Area, PricePeriod


@dataclass
class SearchRequest:
    category_id: int | None = None
    user_id: int | None = None
    status: AdStatus | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    search: str | None = None
    area: Area | None = None
    price_period: PricePeriod | None = None
    page: int = 0
    size: int = 20
    sort_by: str | None = None
    sort_direction: str | None = None
    # публичный поиск прячет DELETED, если статус не задан явно
    hide_deleted: bool = False


@dataclass(frozen=True)
class SearchPlan:
    predicate: ColumnElement[bool]
    order_by: tuple[Any, ...]
    limit: int
    offset: int


def _text_clause(r: SearchRequest) -> ColumnElement[bool]:
    # подстрока как есть: пробелы по краям тоже часть запроса
    term = r.search.lower()
    return or_(
        func.lower(Ad.title).contains(term, autoescape=True),
        func.lower(Ad.description).contains(term, autoescape=True),
    )


# (поле задано?) -> (условие)
_FILTERS: tuple[tuple[Callable[[SearchRequest], bool], Callable[[SearchRequest], ColumnElement[bool]]], ...] = (
    (lambda r: r.status is not None,         lambda r: Ad.status == r.status),
    (lambda r: r.status is None and r.hide_deleted,
                                             lambda r: Ad.status != AdStatus.DELETED),
    (lambda r: r.category_id is not None,    lambda r: Ad.category_id == r.category_id),
    (lambda r: r.user_id is not None,        lambda r: Ad.user_id == r.user_id),
    (lambda r: r.min_price is not None,      lambda r: Ad.price >= r.min_price),
    (lambda r: r.max_price is not None,      lambda r: Ad.price <= r.max_price),
    (lambda r: bool(r.search and r.search.strip()), _text_clause),
    (lambda r: r.area is not None,           lambda r: Ad.area == r.area),
    (lambda r: r.price_period is not None,   lambda r: Ad.price_period == r.price_period),
)

_SORT_COLUMNS = {
    "price": Ad.price,
    "title": Ad.title,
    "updatedat": Ad.updated_at,
}


def build_predicate(request: SearchRequest) -> ColumnElement[bool]:
    """AND из условий по заданным полям; пустой запрос совпадает со всем."""
    clauses = [make(request) for present, make in _FILTERS if present(request)]
    if not clauses:
        return true()
    return and_(*clauses)


def build_order_by(sort_by: str | None, sort_direction: str | None) -> tuple[Any, ...]:
    column = _SORT_COLUMNS.get((sort_by or "").lower(), Ad.created_at)
    ascending = (sort_direction or "").lower() == "asc"
    # id добивает порядок до детерминированного при равных значениях
    if ascending:
        return column.asc(), Ad.id.asc()
    return column.desc(), Ad.id.desc()


def build_search(request: SearchRequest) -> SearchPlan:
    return SearchPlan(
        predicate=build_predicate(request),
        order_by=build_order_by(request.sort_by, request.sort_direction),
        limit=request.size,
        offset=request.page * request.size,
    )
