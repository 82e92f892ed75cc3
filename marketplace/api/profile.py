# marketplace/api/profile.py
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas, services
from ..db import get_db
from ..errors import NotFoundError
from ..identity import Caller
from ..models import ListingStatus, Product, Profile
from .deps import get_current_user

router = APIRouter()


@router.get("")
def get_own_profile(caller: Caller = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = crud.select_one(db, Profile, Profile.id == caller.id)
    return {"profile": schemas.ProfileOut.model_validate(profile) if profile else None}


@router.put("")
def update_own_profile(
    payload: schemas.ProfileUpdate,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updates = payload.model_dump(exclude_unset=True, mode="json")
    profile = crud.update(db, Profile, (Profile.id == caller.id,), updates)
    if not profile:
        raise NotFoundError("Profile not found")
    return {"message": "Profile updated successfully", "profile": schemas.ProfileOut.model_validate(profile)}


@router.get("/listings")
def own_listings(
    status: ListingStatus | None = None,
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    conds = services.visibility_conditions(caller, caller.id, status.value if status else None)
    res = crud.select_many(db, Product, conditions=conds, order_by=(Product.created_at.desc(), Product.id))
    return {"products": [schemas.ProductOut.model_validate(p) for p in res["items"]]}


@router.get("/{profile_id}")
def get_public_profile(profile_id: UUID, db: Session = Depends(get_db)):
    profile = crud.select_one(db, Profile, Profile.id == profile_id)
    if not profile:
        raise NotFoundError("Profile not found")
    return {"profile": schemas.PublicProfileOut.model_validate(profile)}
