from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import CategoryIn
from ..services.categories import (
    category_to_public,
    create_category,
    delete_category,
    get_category,
    list_categories,
    update_category,
)

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
def api_list_categories(db: Session = Depends(get_db)):
    return [category_to_public(c) for c in list_categories(db)]


@router.get("/{category_id}")
def api_get_category(category_id: int, db: Session = Depends(get_db)):
    return category_to_public(get_category(db, category_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def api_create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    return category_to_public(create_category(db, payload.model_dump()))


@router.put("/{category_id}")
def api_update_category(category_id: int, payload: CategoryIn, db: Session = Depends(get_db)):
    return category_to_public(update_category(db, category_id, payload.model_dump()))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def api_delete_category(category_id: int, db: Session = Depends(get_db)):
    delete_category(db, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
