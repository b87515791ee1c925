from __future__ import annotations

from typing import Any, Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import DuplicateError, NotFoundError, ValidationError
from ..models.ad import Ad
from ..models.category import Category


def category_exists(db: Session, category_id: int) -> bool:
    return db.get(Category, category_id) is not None


def category_names(db: Session, ids: Iterable[int]) -> Dict[int, str]:
    """Имена категорий одним запросом: {id: name}."""
    unique_ids = {i for i in ids if i is not None}
    if not unique_ids:
        return {}
    rows = db.execute(select(Category.id, Category.name).where(Category.id.in_(unique_ids))).all()
    return {cid: name for cid, name in rows}


def get_category(db: Session, category_id: int) -> Category:
    c = db.get(Category, category_id)
    if not c:
        raise NotFoundError("Category", category_id)
    return c


def list_categories(db: Session) -> List[Category]:
    return db.execute(select(Category).order_by(Category.name.asc())).scalars().all()


def _name_taken(db: Session, name: str) -> bool:
    return db.execute(select(Category.id).where(Category.name == name)).first() is not None


def create_category(db: Session, payload: Dict[str, Any]) -> Category:
    name = payload["name"]
    if _name_taken(db, name):
        raise DuplicateError(f"Category with name '{name}' already exists")

    c = Category(name=name, description=payload.get("description"))
    db.add(c)
    _commit_unique(db, f"Category with name '{name}' already exists")
    db.refresh(c)
    return c


def update_category(db: Session, category_id: int, payload: Dict[str, Any]) -> Category:
    c = get_category(db, category_id)
    name = payload["name"]
    if c.name != name and _name_taken(db, name):
        raise DuplicateError(f"Category with name '{name}' already exists")

    c.name = name
    c.description = payload.get("description")
    _commit_unique(db, f"Category with name '{name}' already exists")
    db.refresh(c)
    return c


def delete_category(db: Session, category_id: int) -> None:
    c = get_category(db, category_id)
    in_use = db.execute(select(Ad.id).where(Ad.category_id == category_id).limit(1)).first()
    if in_use:
        raise ValidationError(f"Category {category_id} still has ads")
    db.delete(c)
    db.commit()


def _commit_unique(db: Session, message: str) -> None:
    # гонка между проверкой и вставкой ловится уникальным индексом
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateError(message) from exc


def category_to_public(c: Category) -> dict:
    return {"id": c.id, "name": c.name, "description": c.description}
