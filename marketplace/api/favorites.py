# marketplace/api/favorites.py
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas, services
from ..db import get_db
from ..errors import AuthorizationError, ConflictError, NotFoundError
from ..identity import Caller
from ..models import Favorite, Product
from .deps import get_current_user

router = APIRouter()


def _favorite_out(caller: Caller, favorite: Favorite) -> schemas.FavoriteOut:
    out = schemas.FavoriteOut.model_validate(favorite)
    # embedded product follows the same visibility as a direct read
    if favorite.product is None or not services.can_read(caller, favorite.product):
        out.product = None
    return out


@router.get("")
def list_favorites(caller: Caller = Depends(get_current_user), db: Session = Depends(get_db)):
    res = crud.select_many(
        db, Favorite,
        conditions=(Favorite.user_id == caller.id,),
        order_by=(Favorite.created_at.desc(), Favorite.id),
    )
    return {"favorites": [_favorite_out(caller, f) for f in res["items"]]}


@router.post("", status_code=201)
def add_favorite(
    payload: schemas.FavoriteCreate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = crud.select_one(db, Product, Product.id == payload.product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if not services.can_read(caller, product):
        raise AuthorizationError("Access denied")
    try:
        favorite = crud.insert(db, Favorite, {"user_id": caller.id, "product_id": product.id})
    except ConflictError as e:
        raise ConflictError("Product already in favorites") from e
    return {"message": "Product added to favorites", "favorite": _favorite_out(caller, favorite)}


@router.delete("/{product_id}")
def remove_favorite(product_id: UUID, caller: Caller = Depends(get_current_user), db: Session = Depends(get_db)):
    crud.delete(db, Favorite, (Favorite.user_id == caller.id, Favorite.product_id == product_id))
    return {"message": "Product removed from favorites"}


@router.get("/check/{product_id}")
def check_favorite(product_id: UUID, caller: Caller = Depends(get_current_user), db: Session = Depends(get_db)):
    favorite = crud.select_one(db, Favorite, Favorite.user_id == caller.id, Favorite.product_id == product_id)
    return {"isFavorite": favorite is not None}
