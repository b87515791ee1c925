from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import UserIn
from ..services.users import create_user, delete_user, get_user, list_users, update_user, user_to_public

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
def api_list_users(db: Session = Depends(get_db)):
    return [user_to_public(u) for u in list_users(db)]


@router.get("/{user_id}")
def api_get_user(user_id: int, db: Session = Depends(get_db)):
    return user_to_public(get_user(db, user_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def api_create_user(payload: UserIn, db: Session = Depends(get_db)):
    return user_to_public(create_user(db, payload.model_dump()))


@router.put("/{user_id}")
def api_update_user(user_id: int, payload: UserIn, db: Session = Depends(get_db)):
    return user_to_public(update_user(db, user_id, payload.model_dump()))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_user(user_id: int, db: Session = Depends(get_db)):
    delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
