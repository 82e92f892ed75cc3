# marketplace/services.py
"""Listing lifecycle rules.

Decides who may read, create, change and delete a product listing, and
derives the automatic field changes (``sold_at`` stamping, view counting).
These predicates mirror the row-level policies of the managed database:

* anyone may read an ``active`` listing; the owner may read it in any status
* only the owner may update, change status or delete
* ``sold_at`` is stamped once, on the first transition into ``sold``, and is
  never cleared or moved afterwards
* reading a listing bumps its view count through the store's atomic increment
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from . import crud, schemas
from .errors import AppError, AuthorizationError, NotFoundError, UpstreamError, ValidationError
from .identity import Caller
from .models import Category, ListingStatus, Product, ProductImage
from .utils import logger, paginate, utcnow

CREATABLE_STATUSES = (ListingStatus.DRAFT.value, ListingStatus.ACTIVE.value)


def is_owner(caller: Optional[Caller], product: Product) -> bool:
    return caller is not None and caller.id == product.user_id


def can_read(caller: Optional[Caller], product: Product) -> bool:
    return product.status == ListingStatus.ACTIVE.value or is_owner(caller, product)


def apply_transition(product: Product, updates: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Return ``updates`` with the ``sold_at`` rule applied.

    Status moves are otherwise unrestricted: any status may follow any other.
    """
    updates = dict(updates)
    supplied_sold_at = updates.pop("sold_at", None)
    if product.sold_at is not None:
        return updates
    if updates.get("status") == ListingStatus.SOLD.value:
        updates["sold_at"] = supplied_sold_at or now or utcnow()
    return updates


def visibility_conditions(caller: Optional[Caller], user_id=None, status: Optional[str] = None) -> List:
    if caller is not None and user_id is not None and user_id == caller.id:
        conds = [Product.user_id == user_id]
        if status:
            conds.append(Product.status == status)
        return conds
    conds = [Product.status == ListingStatus.ACTIVE.value]
    if user_id is not None:
        conds.append(Product.user_id == user_id)
    return conds


def filter_conditions(filters: Dict[str, Any]) -> List:
    conds = []
    if filters.get("category_id") is not None:
        conds.append(Product.category_id == filters["category_id"])
    if filters.get("min_price") is not None:
        conds.append(Product.price >= filters["min_price"])
    if filters.get("max_price") is not None:
        conds.append(Product.price <= filters["max_price"])
    if filters.get("condition"):
        conds.append(Product.condition == filters["condition"])
    if filters.get("search"):
        pattern = f"%{filters['search']}%"
        conds.append(or_(Product.title.ilike(pattern), Product.description.ilike(pattern)))
    return conds


def list_products(db: Session, caller: Optional[Caller], filters: Dict[str, Any],
                  limit: int = 20, offset: int = 0) -> Dict[str, Any]:
    conds = visibility_conditions(caller, filters.get("user_id"), filters.get("status"))
    conds += filter_conditions(filters)
    res = crud.select_many(
        db, Product, conditions=conds,
        order_by=(Product.created_at.desc(), Product.id),
        skip=offset, limit=limit, with_count=True,
    )
    return {
        "products": [schemas.ProductOut.model_validate(p) for p in res["items"]],
        "pagination": paginate(res["total"], limit, offset),
    }


def read_product(db: Session, caller: Optional[Caller], product_id) -> schemas.ProductDetail:
    product = crud.select_one(db, Product, Product.id == product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if not can_read(caller, product):
        raise AuthorizationError("Access denied")

    snapshot = schemas.ProductDetail.model_validate(product)
    try:
        if crud.increment_field(db, Product, product.id, "views"):
            snapshot.views += 1
    except UpstreamError as e:
        logger.warning("View count increment failed for product %s: %s", product.id, e)
    return snapshot


def create_product(db: Session, caller: Caller, payload: schemas.ProductCreate) -> Product:
    if crud.select_one(db, Category, Category.id == payload.category_id) is None:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "category_id", "message": "Valid category ID is required", "location": "body"}],
        )
    status = payload.status or ListingStatus.DRAFT.value
    if status not in CREATABLE_STATUSES:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "status", "message": "Invalid status", "location": "body"}],
        )

    values = payload.model_dump(exclude={"images", "status"})
    values.update(user_id=caller.id, status=status, views=0, sold_at=None)
    product = crud.insert(db, Product, values)
    logger.info("Product %s created by %s (%s)", product.id, caller.id, status)

    if payload.images:
        rows = [
            {"product_id": product.id, "image_url": url, "display_order": i, "is_primary": i == 0}
            for i, url in enumerate(payload.images)
        ]
        try:
            crud.insert_many(db, ProductImage, rows)
        except AppError as e:
            logger.error("Error adding images to product %s: %s", product.id, e)
    return product


def _owned_product(db: Session, caller: Caller, product_id) -> Product:
    product = crud.select_one(db, Product, Product.id == product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if not is_owner(caller, product):
        raise AuthorizationError("Access denied")
    return product


def update_product(db: Session, caller: Caller, product_id, updates: Dict[str, Any]) -> Product:
    product = _owned_product(db, caller, product_id)
    if updates.get("category_id") is not None and \
            crud.select_one(db, Category, Category.id == updates["category_id"]) is None:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "category_id", "message": "Valid category ID is required", "location": "body"}],
        )
    previous = product.status
    values = apply_transition(product, updates)
    updated = crud.update(db, Product, (Product.id == product.id, Product.user_id == caller.id), values)
    if updated is None:
        raise NotFoundError("Product not found")
    if "status" in values and values["status"] != previous:
        logger.info("Product %s status %s -> %s", updated.id, previous, values["status"])
    return updated


def set_status(db: Session, caller: Caller, product_id, status: str) -> Product:
    return update_product(db, caller, product_id, {"status": status})


def delete_product(db: Session, caller: Caller, product_id) -> None:
    # scoped to the owner: a foreign listing and a missing one look the same
    count = crud.delete(db, Product, (Product.id == product_id, Product.user_id == caller.id))
    if not count:
        raise NotFoundError("Product not found")
    logger.info("Product %s deleted by %s", product_id, caller.id)
