# marketplace/api/categories.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import crud, schemas, services
from ..db import get_db
from ..errors import NotFoundError
from ..models import Category

router = APIRouter()


@router.get("")
def list_categories(db: Session = Depends(get_db)):
    res = crud.select_many(db, Category, order_by=(Category.name,))
    return {"categories": [schemas.CategoryOut.model_validate(c) for c in res["items"]]}


@router.get("/{category_id}")
def get_category(category_id: UUID, db: Session = Depends(get_db)):
    category = crud.select_one(db, Category, Category.id == category_id)
    if not category:
        raise NotFoundError("Category not found")
    return {"category": schemas.CategoryOut.model_validate(category)}


@router.get("/{category_id}/products")
def category_products(
    category_id: UUID,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    # anonymous visibility: active listings only
    return services.list_products(db, None, {"category_id": category_id}, limit=limit, offset=offset)
