# marketplace/api/products.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import schemas, services
from ..db import get_db
from ..identity import Caller
from ..models import Condition, ListingStatus
from .deps import get_current_user, get_optional_user

router = APIRouter()


@router.post("", status_code=201)
def create_product(
    payload: schemas.ProductCreate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = services.create_product(db, caller, payload)
    return {"message": "Product created successfully", "product": schemas.ProductOut.model_validate(product)}


@router.get("")
def list_products(
    category_id: UUID | None = Query(None),
    status: ListingStatus | None = Query(None),
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    condition: Condition | None = Query(None),
    search: str | None = Query(None),
    user_id: UUID | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    caller: Optional[Caller] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    filters = {
        "category_id": category_id,
        "status": status.value if status else None,
        "min_price": min_price,
        "max_price": max_price,
        "condition": condition.value if condition else None,
        "search": search,
        "user_id": user_id,
    }
    return services.list_products(db, caller, filters, limit=limit, offset=offset)


@router.get("/{product_id}")
def get_product(
    product_id: UUID,
    caller: Optional[Caller] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return {"product": services.read_product(db, caller, product_id)}


@router.put("/{product_id}")
def update_product(
    product_id: UUID,
    payload: schemas.ProductUpdate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = services.update_product(db, caller, product_id, payload.model_dump(exclude_unset=True))
    return {"message": "Product updated successfully", "product": schemas.ProductOut.model_validate(product)}


@router.delete("/{product_id}")
def delete_product(
    product_id: UUID,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    services.delete_product(db, caller, product_id)
    return {"message": "Product deleted successfully"}


@router.patch("/{product_id}/status")
def update_product_status(
    product_id: UUID,
    payload: schemas.StatusUpdate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = services.set_status(db, caller, product_id, payload.status)
    return {"message": "Product status updated successfully", "product": schemas.ProductOut.model_validate(product)}
