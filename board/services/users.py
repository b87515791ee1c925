from __future__ import annotations

from typing import Any, Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import DuplicateError, NotFoundError
from ..models.user import User


def user_exists(db: Session, user_id: int) -> bool:
    return db.get(User, user_id) is not None


def user_names(db: Session, ids: Iterable[int]) -> Dict[int, str]:
    unique_ids = {i for i in ids if i is not None}
    if not unique_ids:
        return {}
    rows = db.execute(select(User.id, User.name).where(User.id.in_(unique_ids))).all()
    return {uid: name for uid, name in rows}


def get_user(db: Session, user_id: int) -> User:
    u = db.get(User, user_id)
    if not u:
        raise NotFoundError("User", user_id)
    return u


def list_users(db: Session) -> List[User]:
    return db.execute(select(User).order_by(User.id.asc())).scalars().all()


def _email_taken(db: Session, email: str) -> bool:
    return db.execute(select(User.id).where(User.email == email)).first() is not None


def create_user(db: Session, payload: Dict[str, Any]) -> User:
    email = payload["email"]
    if _email_taken(db, email):
        raise DuplicateError(f"User with email '{email}' already exists")

    u = User(name=payload["name"], email=email, phone=payload.get("phone"))
    db.add(u)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateError(f"User with email '{email}' already exists") from exc
    db.refresh(u)
    return u


def update_user(db: Session, user_id: int, payload: Dict[str, Any]) -> User:
    u = get_user(db, user_id)
    email = payload["email"]
    if u.email != email and _email_taken(db, email):
        raise DuplicateError(f"User with email '{email}' already exists")

    u.name = payload["name"]
    u.email = email
    u.phone = payload.get("phone")
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateError(f"User with email '{email}' already exists") from exc
    db.refresh(u)
    return u


def delete_user(db: Session, user_id: int) -> None:
    u = get_user(db, user_id)
    db.delete(u)
    db.commit()


def user_to_public(u: User) -> dict:
    return {"id": u.id, "name": u.name, "email": u.email, "phone": u.phone}
